"""
RPC Manager
Creates and caches one Web3 connection per network
"""

from typing import Dict

from loguru import logger
from web3 import EthereumTesterProvider, Web3

from .errors import DeployError
from .settings import Settings


class RPCManager:
    """
    Hands out Web3 instances for resolved networks

    Remote networks get an HTTP provider; the in-memory network gets a
    fresh eth-tester chain that lives as long as this manager.
    """

    def __init__(self, settings: Settings):
        """
        Initialize RPC Manager

        Args:
            settings: Process settings
        """
        self.settings = settings
        self.w3_instances: Dict[str, Web3] = {}

    def get_web3(self, network) -> Web3:
        """
        Get a connected Web3 instance for a network

        Args:
            network: NetworkConfig

        Returns:
            Web3 instance

        Raises:
            DeployError: If the endpoint cannot be reached
        """
        if network.name in self.w3_instances:
            return self.w3_instances[network.name]

        if network.in_memory:
            w3 = Web3(EthereumTesterProvider())
            logger.debug(f"Started in-memory chain for {network.name}")
        else:
            w3 = Web3(Web3.HTTPProvider(
                network.rpc_url,
                request_kwargs={'timeout': self.settings.rpc_timeout}
            ))

            if not w3.is_connected():
                raise DeployError(
                    f"Failed to connect to {network.name} at {network.rpc_url}"
                )

            logger.success(f"Connected to {network.name} ({network.rpc_url})")

        self.w3_instances[network.name] = w3
        return w3

