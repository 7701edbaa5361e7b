"""
Utilities Package
Settings, error types and RPC connection management
"""

from .errors import ConfigError, DeployError, DeployerError, ParameterError
from .settings import Settings
from .rpc_manager import RPCManager

__all__ = [
    'ConfigError',
    'DeployError',
    'DeployerError',
    'ParameterError',
    'Settings',
    'RPCManager'
]
