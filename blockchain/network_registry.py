"""
Network Registry
Static network definitions combined with per-network credentials
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from utils.errors import ConfigError
from utils.settings import Settings
from .credentials import NETWORK_KEY_ENV, load_credentials


@dataclass(frozen=True)
class NetworkConfig:
    """Resolved configuration of one network"""

    name: str
    chain_id: int
    rpc_url: Optional[str]
    accounts: Tuple[str, ...] = ()
    credential_env: Optional[str] = None
    in_memory: bool = False

    @property
    def default_signer(self) -> Optional[str]:
        """First configured key, or None for a read-only network"""
        return self.accounts[0] if self.accounts else None

    def __repr__(self) -> str:
        # Keys are masked
        return (
            f"NetworkConfig(name={self.name!r}, chain_id={self.chain_id}, "
            f"rpc_url={self.rpc_url!r}, accounts=<{len(self.accounts)} configured>, "
            f"in_memory={self.in_memory})"
        )


# name -> (chain id, rpc url); rpc url None marks the in-memory chain.
# The in-memory chain runs on eth-tester, whose chain id is fixed by the
# backend, so the id listed for it is informational and not checked.
NETWORK_DEFINITIONS = {
    'adafel': (3995596960668836, 'https://testnet-rpc.adafel.com'),
    'hardhat': (1337, None),
    'localhost': (31337, 'http://127.0.0.1:8545'),
}


class NetworkRegistry:
    """
    Read-only lookup of the statically known networks

    Built once per process; configs are immutable afterwards.
    """

    def __init__(self, settings: Settings, definitions: Optional[Dict] = None):
        """
        Initialize Network Registry

        Args:
            settings: Process settings (source of credentials)
            definitions: name -> (chain id, rpc url) overrides, mainly for tests
        """
        self.settings = settings
        credentials = load_credentials(settings)

        self._networks = {}
        for name, (chain_id, rpc_url) in (definitions or NETWORK_DEFINITIONS).items():
            self._networks[name] = NetworkConfig(
                name=name,
                chain_id=chain_id,
                rpc_url=rpc_url,
                accounts=credentials.get(name, ()),
                credential_env=NETWORK_KEY_ENV.get(name),
                in_memory=rpc_url is None,
            )

        logger.debug(f"Network registry loaded: {', '.join(self._networks)}")

    def resolve(self, name: str) -> NetworkConfig:
        """
        Look up a network by name

        Args:
            name: Network name

        Returns:
            NetworkConfig

        Raises:
            ConfigError: If the network is not known
        """
        network = self._networks.get(name)

        if network is None:
            raise ConfigError(
                f"Unknown network '{name}'. Known networks: {', '.join(self.names())}"
            )

        return network

    def names(self) -> List[str]:
        """Known network names in definition order"""
        return list(self._networks)

    @property
    def default_network(self) -> NetworkConfig:
        return self.resolve(self.settings.default_network)
