"""
Contract Deployer
Submits a contract-creation transaction and follows it to a terminal state

Lifecycle of one attempt:

    PENDING -> INCLUDED -> CONFIRMED
                        -> REVERTED
    PENDING -> FAILED

CONFIRMED, REVERTED and FAILED are terminal. Nothing is retried: a new
deployment is a new transaction with a new address.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from eth_account import Account
from loguru import logger
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from utils.errors import ConfigError, DeployError, DeployerError
from utils.rpc_manager import RPCManager
from utils.settings import Settings
from .contract_manager import check_constructor_args, load_artifact
from .network_registry import NetworkConfig


class DeploymentState(Enum):
    PENDING = 'pending'
    INCLUDED = 'included'
    CONFIRMED = 'confirmed'
    REVERTED = 'reverted'
    FAILED = 'failed'


ALLOWED_TRANSITIONS = {
    DeploymentState.PENDING: {DeploymentState.INCLUDED, DeploymentState.FAILED},
    DeploymentState.INCLUDED: {DeploymentState.CONFIRMED, DeploymentState.REVERTED},
    DeploymentState.CONFIRMED: set(),
    DeploymentState.REVERTED: set(),
    DeploymentState.FAILED: set(),
}


@dataclass(frozen=True)
class DeploymentRequest:
    """Contract to deploy and its constructor arguments in positional order"""

    contract_name: str
    constructor_args: Tuple = ()


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a confirmed deployment"""

    transaction_hash: str
    contract_address: Optional[str]
    confirmed: bool
    network: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    deployer: Optional[str] = None


@dataclass
class DeploymentAttempt:
    """State of a single deployment transaction"""

    contract_name: str
    network: str
    state: DeploymentState = DeploymentState.PENDING
    tx_hash: Optional[str] = None
    revert_reason: Optional[str] = None
    history: List[DeploymentState] = field(
        default_factory=lambda: [DeploymentState.PENDING]
    )

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.state]

    def transition(self, new_state: DeploymentState):
        """
        Move to a new lifecycle state

        Args:
            new_state: Target state

        Raises:
            RuntimeError: If the transition is not part of the lifecycle
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal deployment transition {self.state.value} -> {new_state.value}"
            )

        logger.debug(
            f"{self.contract_name}@{self.network}: {self.state.value} -> {new_state.value}"
        )
        self.state = new_state
        self.history.append(new_state)


class ContractDeployer:
    """
    Deploys compiled contracts to a resolved network

    One connection per network comes from the RPC manager; each deploy()
    call owns its own attempt state, so calls on independent managers do
    not share anything.
    """

    def __init__(
        self,
        settings: Settings,
        rpc_manager: Optional[RPCManager] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize Contract Deployer

        Args:
            settings: Process settings (timeouts, confirmations, artifacts)
            rpc_manager: Source of Web3 connections
            clock: Monotonic clock used for the confirmation deadline
            sleep: Sleep function used between block polls
        """
        self.settings = settings
        self.rpc_manager = rpc_manager or RPCManager(settings)
        self._clock = clock
        self._sleep = sleep

    def deploy(
        self,
        contract_name: str,
        constructor_args: Sequence,
        network: NetworkConfig
    ) -> DeploymentResult:
        """
        Deploy a contract and wait until it is confirmed

        Args:
            contract_name: Name of the compiled contract
            constructor_args: Constructor arguments in positional order
            network: Resolved network configuration

        Returns:
            DeploymentResult with confirmed=True

        Raises:
            ConfigError: No signer for the network, chain id mismatch, missing artifact
            ParameterError: Arguments do not match the constructor signature
            DeployError: Broadcast failure, timeout or revert
        """
        request = DeploymentRequest(contract_name, tuple(constructor_args))

        signer = self._select_signer(network)
        artifact = load_artifact(request.contract_name, self.settings.artifacts_dir)
        check_constructor_args(artifact, request.constructor_args)

        w3 = self.rpc_manager.get_web3(network)
        sender = self._preflight(w3, signer, network)

        Contract = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        constructor = Contract.constructor(*request.constructor_args)

        attempt = DeploymentAttempt(request.contract_name, network.name)
        deadline = self._clock() + self.settings.confirmation_timeout

        tx_hash = self._broadcast(w3, constructor, signer, sender, network, attempt)

        try:
            receipt = self._wait_for_inclusion(w3, tx_hash, attempt, deadline)

            if receipt['status'] == 0:
                attempt.revert_reason = self._revert_reason(
                    w3, constructor, sender, receipt['blockNumber']
                )
                attempt.transition(DeploymentState.REVERTED)
                raise DeployError(
                    f"Deployment of {request.contract_name} reverted on {network.name}",
                    tx_hash=attempt.tx_hash,
                    state=attempt.state,
                    revert_reason=attempt.revert_reason
                )

            if network.in_memory:
                # The in-memory chain only mines when a transaction arrives
                logger.debug("Skipping extra confirmations on in-memory chain")
            elif self.settings.confirmations:
                self._wait_for_confirmations(w3, receipt['blockNumber'], attempt, deadline)

            attempt.transition(DeploymentState.CONFIRMED)

        except KeyboardInterrupt:
            logger.warning(
                f"Interrupted while waiting for {attempt.tx_hash}. The transaction "
                f"was already broadcast to {network.name} and may still be mined"
            )
            raise

        result = DeploymentResult(
            transaction_hash=attempt.tx_hash,
            contract_address=Web3.to_checksum_address(receipt['contractAddress']),
            confirmed=True,
            network=network.name,
            block_number=receipt['blockNumber'],
            gas_used=receipt['gasUsed'],
            deployer=sender,
        )

        logger.success(f"{request.contract_name} deployed to {result.contract_address}")
        logger.success(f"Transaction hash: {result.transaction_hash}")
        logger.info(f"Block: {result.block_number}, gas used: {result.gas_used}")

        return result

    def _select_signer(self, network: NetworkConfig):
        """Default signer of the network, None for the in-memory dev account"""
        private_key = network.default_signer

        if private_key is None:
            if network.in_memory:
                return None

            hint = f" Set {network.credential_env} to deploy." if network.credential_env else ''
            raise ConfigError(
                f"No signer configured for network '{network.name}'.{hint}"
            )

        try:
            return Account.from_key(private_key)
        except Exception as e:
            raise ConfigError(
                f"Signing key for network '{network.name}' is not a valid private key"
            ) from e

    def _preflight(self, w3: Web3, signer, network: NetworkConfig) -> str:
        """
        Check the node before anything is broadcast

        Returns:
            Sender address

        Raises:
            ConfigError: Chain id mismatch
            DeployError: The node stopped answering
        """
        try:
            if not network.in_memory:
                self._check_chain_id(w3, network)

            sender = signer.address if signer is not None else w3.eth.accounts[0]
            self._log_balance(w3, sender, network)

        except DeployerError:
            raise
        except Exception as e:
            raise DeployError(
                f"Lost connection to {network.name} before broadcast: {e}",
                state=DeploymentState.PENDING
            ) from e

        return sender

    def _check_chain_id(self, w3: Web3, network: NetworkConfig):
        chain_id = w3.eth.chain_id

        if chain_id != network.chain_id:
            raise ConfigError(
                f"Network '{network.name}' expects chain id {network.chain_id}, "
                f"but {network.rpc_url} reports {chain_id}"
            )

    def _log_balance(self, w3: Web3, sender: str, network: NetworkConfig):
        balance = w3.eth.get_balance(sender)

        logger.info(f"Deploying from: {sender}")
        logger.info(f"Account balance: {w3.from_wei(balance, 'ether')} on {network.name}")

        if balance == 0:
            logger.warning(f"{sender} has no funds on {network.name}")

    def _estimate_gas(self, constructor, sender: str) -> int:
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            return int(gas_estimate * self.settings.gas_buffer)
        except Exception as e:
            logger.warning(
                f"Gas estimation failed: {e}, using {self.settings.default_gas_limit}"
            )
            return self.settings.default_gas_limit

    def _broadcast(self, w3: Web3, constructor, signer, sender: str, network, attempt) -> bytes:
        """
        Build, sign and send the creation transaction

        Returns:
            Transaction hash

        Raises:
            DeployError: If the transaction could not be broadcast
        """
        gas_limit = self._estimate_gas(constructor, sender)
        logger.info(f"Gas limit: {gas_limit}")

        try:
            if signer is None:
                tx_hash = constructor.transact({'from': sender, 'gas': gas_limit})
            else:
                transaction = constructor.build_transaction({
                    'from': sender,
                    'nonce': w3.eth.get_transaction_count(sender, 'pending'),
                    'gas': gas_limit,
                    'chainId': network.chain_id,
                })
                signed_tx = signer.sign_transaction(transaction)
                tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        except Exception as e:
            attempt.transition(DeploymentState.FAILED)
            raise DeployError(
                f"Failed to broadcast {attempt.contract_name} to {network.name}: {e}",
                state=attempt.state
            ) from e

        attempt.tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent: {attempt.tx_hash}")
        logger.info("Waiting for confirmation...")

        return tx_hash

    def _wait_for_inclusion(self, w3: Web3, tx_hash, attempt, deadline: float):
        remaining = max(deadline - self._clock(), 0)

        try:
            receipt = w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=remaining,
                poll_latency=self.settings.poll_interval
            )
        except TimeExhausted as e:
            logger.warning(
                f"{attempt.tx_hash} not mined after {self.settings.confirmation_timeout}s; "
                f"it may still be included later"
            )
            raise DeployError(
                f"Timed out waiting for {attempt.contract_name} deployment on {attempt.network}",
                tx_hash=attempt.tx_hash,
                state=attempt.state
            ) from e
        except Exception as e:
            raise DeployError(
                f"Lost connection to {attempt.network} while waiting for {attempt.contract_name}: {e}",
                tx_hash=attempt.tx_hash,
                state=attempt.state
            ) from e

        attempt.transition(DeploymentState.INCLUDED)
        logger.info(f"Included in block {receipt['blockNumber']}")

        return receipt

    def _wait_for_confirmations(self, w3: Web3, block_number: int, attempt, deadline: float):
        target = block_number + self.settings.confirmations

        while w3.eth.block_number < target:
            if self._clock() >= deadline:
                raise DeployError(
                    f"Timed out waiting for {self.settings.confirmations} confirmation(s)",
                    tx_hash=attempt.tx_hash,
                    state=attempt.state
                )
            self._sleep(self.settings.poll_interval)

        logger.info(f"{self.settings.confirmations} confirmation(s) reached")

    def _revert_reason(self, w3: Web3, constructor, sender: str, block_number: int) -> Optional[str]:
        """Replay the creation call at the inclusion block to recover the reason"""
        try:
            w3.eth.call(
                {'from': sender, 'data': constructor.data_in_transaction},
                block_identifier=block_number
            )
        except ContractLogicError as e:
            return str(e)
        except Exception as e:
            logger.debug(f"Could not recover revert reason: {e}")

        return None
