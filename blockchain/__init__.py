"""
Blockchain Interaction Package
Handles network resolution, contract artifacts and contract deployment
"""

from .network_registry import NetworkConfig, NetworkRegistry
from .contract_manager import ContractArtifact, load_artifact
from .contract_deployer import (
    ContractDeployer,
    DeploymentAttempt,
    DeploymentRequest,
    DeploymentResult,
    DeploymentState
)

__all__ = [
    'NetworkConfig',
    'NetworkRegistry',
    'ContractArtifact',
    'load_artifact',
    'ContractDeployer',
    'DeploymentAttempt',
    'DeploymentRequest',
    'DeploymentResult',
    'DeploymentState'
]
