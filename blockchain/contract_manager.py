"""
Contract Manager
Loads compiled contract artifacts and checks constructor arguments
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence

from eth_abi import is_encodable
from loguru import logger

from utils.errors import ConfigError, ParameterError


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of one compiled contract"""

    name: str
    abi: List[Dict]
    bytecode: str
    path: Path


def load_artifact(contract_name: str, artifacts_dir) -> ContractArtifact:
    """
    Load a compiled contract artifact by contract name

    Looks for <artifacts_dir>/**/<contract_name>.json, the layout the
    Solidity toolchain writes (artifacts/contracts/X.sol/X.json).

    Args:
        contract_name: Contract name
        artifacts_dir: Root artifacts directory

    Returns:
        ContractArtifact

    Raises:
        ConfigError: If no usable artifact exists
    """
    root = Path(artifacts_dir)
    candidates = sorted(
        path for path in root.rglob(f"{contract_name}.json")
        if not path.name.endswith('.dbg.json')
    )

    if not candidates:
        raise ConfigError(
            f"Contract artifact for '{contract_name}' not found under {root}. "
            f"Compile the contracts first"
        )

    if len(candidates) > 1:
        logger.warning(
            f"Multiple artifacts named {contract_name}, using {candidates[0]}"
        )

    path = candidates[0]

    try:
        with open(path, 'r') as f:
            contract_json = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Contract artifact {path} is not valid JSON: {e}") from e

    abi = contract_json.get('abi')
    bytecode = contract_json.get('bytecode') or ''

    if abi is None:
        raise ConfigError(f"Contract artifact {path} has no ABI")

    if bytecode in ('', '0x'):
        raise ConfigError(
            f"Contract artifact {path} has no bytecode (interface or abstract contract?)"
        )

    logger.debug(f"Loaded artifact {contract_name} from {path}")

    return ContractArtifact(name=contract_name, abi=abi, bytecode=bytecode, path=path)


def constructor_inputs(abi: List[Dict]) -> List[Dict]:
    """Inputs of the ABI constructor (empty when the contract has none)"""
    for entry in abi:
        if entry.get('type') == 'constructor':
            return entry.get('inputs', [])

    return []


def check_constructor_args(artifact: ContractArtifact, args: Sequence):
    """
    Verify arguments match the constructor signature position by position

    Args:
        artifact: Contract artifact
        args: Constructor arguments in positional order

    Raises:
        ParameterError: On count or type mismatch
    """
    inputs = constructor_inputs(artifact.abi)

    if len(inputs) != len(args):
        raise ParameterError(
            'constructorArgs',
            f"{artifact.name} constructor takes {len(inputs)} argument(s), "
            f"got {len(args)}"
        )

    for position, (abi_input, value) in enumerate(zip(inputs, args)):
        abi_type = abi_input['type']
        name = abi_input.get('name') or f"arg{position}"

        if not is_encodable(abi_type, value):
            raise ParameterError(name, f"{value!r} is not a valid {abi_type}")
