"""
deployPrediction Task
Deploys the Prediction contract with a stake amount and a game end time
"""

from dataclasses import dataclass

from loguru import logger

from .task_registry import TaskParameter, TaskRegistry


CONTRACT_NAME = 'Prediction'

PARAMETERS = (
    TaskParameter('stakeamount', 'The amount to be staked for voting (smallest unit)'),
    TaskParameter('gameend', 'The timestamp for game end (Unix seconds)'),
)


@dataclass(frozen=True)
class DeployPredictionArgs:
    stakeamount: int
    gameend: int

    @property
    def constructor_args(self):
        """Constructor arguments in the contract's positional order"""
        return (self.stakeamount, self.gameend)


def deploy_prediction(args: DeployPredictionArgs, context):
    """
    Deploy Prediction on the active network

    Args:
        args: Parsed task arguments
        context: TaskContext

    Returns:
        DeploymentResult
    """
    network = context.network
    constructor_args = args.constructor_args

    context.console(f'Deploying "{CONTRACT_NAME}" on network: "{network.name}"')
    context.console(f"Contract constructor args: [{', '.join(str(a) for a in constructor_args)}]")

    logger.info(f"Deploying {CONTRACT_NAME} to {network.name} (chain {network.chain_id})")

    result = context.deployer.deploy(CONTRACT_NAME, constructor_args, network)

    context.console(f"{CONTRACT_NAME} deployed to: {result.contract_address}")
    return result


def register(registry: TaskRegistry):
    registry.register(
        'deployPrediction',
        'Deploys a prediction contract',
        PARAMETERS,
        DeployPredictionArgs,
        deploy_prediction,
    )
