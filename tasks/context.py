"""
Task Context
Runtime collaborators handed to every task handler
"""

from dataclasses import dataclass
from typing import Callable

from blockchain.contract_deployer import ContractDeployer
from blockchain.network_registry import NetworkConfig, NetworkRegistry
from utils.settings import Settings


@dataclass
class TaskContext:
    """
    What a handler may use: settings, networks and the deployer

    Attributes:
        settings: Process settings
        networks: Network registry
        network_name: Network selected for this invocation
        deployer: Contract deployer
        console: Writes user-facing lines (stdout)
    """

    settings: Settings
    networks: NetworkRegistry
    network_name: str
    deployer: ContractDeployer
    console: Callable[[str], None] = print

    @property
    def network(self) -> NetworkConfig:
        return self.networks.resolve(self.network_name)
