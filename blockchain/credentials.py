"""
Credential Loader
Maps each credentialed network to its ordered list of signing keys
"""

from typing import Dict, Tuple

from loguru import logger

from utils.settings import Settings


# One designated environment variable per credentialed network
NETWORK_KEY_ENV = {
    'adafel': 'PRIVATE_KEY_ADAFEL',
    'localhost': 'PRIVATE_KEY_LOCALHOST',
}


def load_credentials(settings: Settings) -> Dict[str, Tuple[str, ...]]:
    """
    Read signing keys from the settings' environment snapshot

    A missing or blank variable yields an empty account list for that
    network, which keeps the network usable for read-only work.

    Args:
        settings: Process settings

    Returns:
        Dict of network name -> tuple of private keys (zero or one entry)
    """
    credentials = {}

    for network_name, env_name in NETWORK_KEY_ENV.items():
        private_key = (settings.environ.get(env_name) or '').strip()

        if private_key:
            credentials[network_name] = (private_key,)
            logger.debug(f"Signer configured for {network_name} via {env_name}")
        else:
            credentials[network_name] = ()
            logger.debug(f"{env_name} not set - {network_name} is read-only")

    return credentials
