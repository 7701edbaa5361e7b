"""
Settings
Process configuration, read once from the environment at startup
"""

import math
import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import dotenv_values

from .errors import ConfigError


DEFAULT_NETWORK = 'hardhat'
DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_CONFIRMATIONS = 0
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_ARTIFACTS_DIR = 'artifacts'
DEFAULT_LOG_FILE = 'data/logs/deploy.log'


@dataclass(frozen=True)
class Settings:
    """
    Immutable configuration passed explicitly to every component

    Attributes:
        environ: Snapshot of the environment (credentials are looked up here)
        default_network: Network used when none is given on the command line
        confirmation_timeout: Seconds to wait for inclusion plus confirmations
        confirmations: Additional blocks to wait for after inclusion
        poll_interval: Seconds between receipt / block number polls
        artifacts_dir: Root of the compiled contract artifacts
        gas_buffer: Multiplier applied to the gas estimate
        default_gas_limit: Gas limit used when estimation fails
        rpc_timeout: HTTP request timeout in seconds
        log_level: Console log level
        log_file: Path of the rotating debug log (None disables it)
    """

    environ: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    default_network: str = DEFAULT_NETWORK
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    confirmations: int = DEFAULT_CONFIRMATIONS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    gas_buffer: float = 1.2
    default_gas_limit: int = 3000000
    rpc_timeout: float = 30.0
    log_level: str = 'INFO'
    log_file: Optional[str] = DEFAULT_LOG_FILE

    def __post_init__(self):
        if not math.isfinite(self.confirmation_timeout) or self.confirmation_timeout <= 0:
            raise ConfigError(
                f"Confirmation timeout must be a positive number of seconds, got {self.confirmation_timeout}"
            )
        if self.confirmations < 0:
            raise ConfigError(
                f"Confirmations must be zero or more, got {self.confirmations}"
            )
        if not math.isfinite(self.poll_interval) or self.poll_interval <= 0:
            raise ConfigError(f"Poll interval must be a positive number of seconds, got {self.poll_interval}")
        if not math.isfinite(self.gas_buffer) or self.gas_buffer < 1:
            raise ConfigError(f"Gas buffer must be at least 1.0, got {self.gas_buffer}")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = '.env'
    ) -> 'Settings':
        """
        Build settings from the process environment

        Values from the .env file are used only where the real environment
        does not define them.

        Args:
            environ: Environment mapping (None = os.environ)
            dotenv_path: .env file to merge in (None = skip)

        Returns:
            Settings instance
        """
        merged = {}

        if dotenv_path and os.path.exists(dotenv_path):
            merged.update({
                key: value
                for key, value in dotenv_values(dotenv_path).items()
                if value is not None
            })

        merged.update(os.environ if environ is None else environ)

        return cls(
            environ=MappingProxyType(merged),
            default_network=merged.get('DEPLOY_NETWORK') or DEFAULT_NETWORK,
            confirmation_timeout=_parse_number(
                merged, 'DEPLOY_CONFIRMATION_TIMEOUT', DEFAULT_CONFIRMATION_TIMEOUT, float
            ),
            confirmations=_parse_number(
                merged, 'DEPLOY_CONFIRMATIONS', DEFAULT_CONFIRMATIONS, int
            ),
            poll_interval=_parse_number(
                merged, 'DEPLOY_POLL_INTERVAL', DEFAULT_POLL_INTERVAL, float
            ),
            artifacts_dir=merged.get('DEPLOY_ARTIFACTS_DIR') or DEFAULT_ARTIFACTS_DIR,
            log_level=(merged.get('DEPLOY_LOG_LEVEL') or 'INFO').upper(),
            log_file=merged.get('DEPLOY_LOG_FILE', DEFAULT_LOG_FILE) or None,
        )

    def with_overrides(self, **overrides) -> 'Settings':
        """Return a copy with the given non-None values replaced"""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def _parse_number(environ: Mapping[str, str], name: str, default, kind):
    raw = environ.get(name)

    if raw is None or raw.strip() == '':
        return default

    try:
        return kind(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got '{raw}'") from e
