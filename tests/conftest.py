"""Shared pytest fixtures for deployer tests."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from loguru import logger

from blockchain.network_registry import NetworkConfig
from utils.settings import Settings


# Hardhat's first well-known development key
TEST_PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'

DEPLOYED_ADDRESS = '0x5FbDB2315678afecb367f032d93F642f64180aa3'

PREDICTION_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "_stakeAmount", "type": "uint256"},
            {"internalType": "uint256", "name": "_gameEnd", "type": "uint256"}
        ],
        "stateMutability": "nonpayable",
        "type": "constructor"
    }
]

# Init code: PUSH1 1, PUSH1 0, RETURN -> one byte of runtime code (STOP)
PREDICTION_BYTECODE = '0x60016000f3'


def write_artifact(root: Path, name: str, abi, bytecode: str) -> Path:
    """Write an artifact in the artifacts/contracts/X.sol/X.json layout"""
    path = root / 'contracts' / f'{name}.sol' / f'{name}.json'
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        'contractName': name,
        'abi': abi,
        'bytecode': bytecode
    }))
    return path


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Artifacts directory holding a compiled Prediction contract"""
    root = tmp_path / 'artifacts'
    write_artifact(root, 'Prediction', PREDICTION_ABI, PREDICTION_BYTECODE)
    return root


@pytest.fixture
def settings(artifacts_dir: Path) -> Settings:
    """Settings pointing at the temporary artifacts, without a log file"""
    return Settings(artifacts_dir=str(artifacts_dir), log_file=None, poll_interval=0.01)


@pytest.fixture
def local_network() -> NetworkConfig:
    """Remote-style local network with one signer"""
    return NetworkConfig(
        name='localhost',
        chain_id=31337,
        rpc_url='http://127.0.0.1:8545',
        accounts=(TEST_PRIVATE_KEY,),
        credential_env='PRIVATE_KEY_LOCALHOST'
    )


@pytest.fixture
def w3():
    """Mock Web3 instance that accepts and mines one deployment"""
    w3 = MagicMock()
    w3.eth.chain_id = 31337
    w3.eth.block_number = 10
    w3.eth.get_balance.return_value = 10 ** 18
    w3.eth.get_transaction_count.return_value = 0

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100000
    constructor.build_transaction.return_value = {'nonce': 0, 'gas': 120000, 'chainId': 31337}

    w3.eth.send_raw_transaction.return_value = bytes.fromhex('ab' * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': DEPLOYED_ADDRESS,
        'blockNumber': 10,
        'gasUsed': 95000
    }
    return w3


@pytest.fixture
def rpc_manager(w3):
    """RPC manager handing out the mock Web3"""
    manager = MagicMock()
    manager.get_web3.return_value = w3
    return manager


@pytest.fixture(autouse=True)
def reset_logging():
    """main.run() reconfigures loguru; point it back at the current stderr"""
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
