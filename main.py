"""
Prediction Deployer - Main Entry Point
Runs a named deployment task against one of the configured networks

Usage:
    python main.py [--network NAME] deployPrediction --stakeamount N --gameend T
    python main.py networks
"""

import argparse
import sys
from typing import Callable, List, Optional

from loguru import logger

from blockchain.contract_deployer import ContractDeployer
from blockchain.network_registry import NetworkRegistry
from tasks import TaskContext, build_registry
from utils.errors import DeployerError
from utils.rpc_manager import RPCManager
from utils.settings import Settings


def configure_logging(settings: Settings, verbose: bool = False):
    """Console sink on stderr plus the rotating debug log"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else settings.log_level
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )


def build_parser(registry) -> argparse.ArgumentParser:
    """Global options plus one sub-command per registered task"""
    parser = argparse.ArgumentParser(
        prog='prediction-deployer',
        description='Deploy contracts to the configured networks'
    )
    parser.add_argument('--network', help='Network to use (default: DEPLOY_NETWORK or hardhat)')
    parser.add_argument('--timeout', type=float, help='Seconds to wait for confirmation')
    parser.add_argument('--confirmations', type=int, help='Extra blocks to wait for after inclusion')
    parser.add_argument('--artifacts', help='Compiled artifacts directory')
    parser.add_argument('--verbose', action='store_true', help='Debug logging on the console')

    subparsers = parser.add_subparsers(dest='task', metavar='TASK')
    subparsers.required = True

    for definition in registry.definitions():
        task_parser = subparsers.add_parser(definition.name, help=definition.description)

        # Presence and type checks happen in the task registry
        for param in definition.parameters:
            task_parser.add_argument(
                f"--{param.name}",
                dest=param.name,
                metavar=param.type.upper(),
                help=param.description
            )

    return parser


def run(
    argv: Optional[List[str]] = None,
    environ=None,
    console: Callable[[str], None] = print,
    rpc_manager: Optional[RPCManager] = None
) -> int:
    """
    Parse the command line and run one task

    Args:
        argv: Command line arguments (None = sys.argv[1:])
        environ: Environment mapping (None = os.environ)
        console: Sink for user-facing output
        rpc_manager: Connection manager override

    Returns:
        Process exit code
    """
    registry = build_registry()
    parser = build_parser(registry)
    options = parser.parse_args(argv)

    try:
        settings = Settings.from_env(environ).with_overrides(
            confirmation_timeout=options.timeout,
            confirmations=options.confirmations,
            artifacts_dir=options.artifacts,
        )
    except DeployerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings, options.verbose)

    try:
        networks = NetworkRegistry(settings)
        network_name = networks.resolve(options.network or settings.default_network).name

        context = TaskContext(
            settings=settings,
            networks=networks,
            network_name=network_name,
            deployer=ContractDeployer(settings, rpc_manager or RPCManager(settings)),
            console=console,
        )

        definition = registry.get(options.task)
        raw_args = {
            param.name: getattr(options, param.name)
            for param in definition.parameters
            if getattr(options, param.name) is not None
        }

        registry.invoke(options.task, raw_args, context)

    except DeployerError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130

    return 0


def main():
    """Main entry point"""
    sys.exit(run())


if __name__ == "__main__":
    main()
