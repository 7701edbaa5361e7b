"""
Deployment Errors
Error taxonomy surfaced to the command line boundary
"""

from typing import Optional


class DeployerError(Exception):
    """Base class for every error the deployer reports to the operator"""


class ConfigError(DeployerError, ValueError):
    """
    Network or settings problem

    Unknown network name, a network without a usable signer, a chain id
    mismatch, a missing contract artifact or an invalid settings value.
    """


class ParameterError(DeployerError, ValueError):
    """Missing or malformed command parameter, raised before any network call"""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"Invalid parameter '{parameter}': {message}")


class DeployError(DeployerError, RuntimeError):
    """
    Deployment transaction failure

    Carries the transaction hash when the transaction was broadcast, the
    lifecycle state it ended in and the revert reason when one was recovered.
    """

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        state=None,
        revert_reason: Optional[str] = None
    ):
        self.tx_hash = tx_hash
        self.state = state
        self.revert_reason = revert_reason

        details = []
        if tx_hash:
            details.append(f"tx {tx_hash}")
        if revert_reason:
            details.append(f"reason: {revert_reason}")

        if details:
            message = f"{message} ({', '.join(details)})"

        super().__init__(message)
