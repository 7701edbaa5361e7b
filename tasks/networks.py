"""
networks Task
Lists the configured networks without connecting to any of them
"""

from dataclasses import dataclass

from .task_registry import TaskRegistry


@dataclass(frozen=True)
class NetworksArgs:
    pass


def list_networks(args: NetworksArgs, context):
    """Print one line per network; returns the network names"""
    names = context.networks.names()

    for name in names:
        network = context.networks.resolve(name)
        endpoint = network.rpc_url or 'in-memory'

        if network.in_memory:
            signer = 'development accounts'
        elif network.accounts:
            signer = 'signer configured'
        else:
            signer = f"read-only ({network.credential_env} not set)"

        marker = '*' if name == context.network_name else ' '
        context.console(
            f"{marker} {name:<10} chain {network.chain_id:<18} {endpoint:<32} {signer}"
        )

    return names


def register(registry: TaskRegistry):
    registry.register(
        'networks',
        'Lists the configured networks and their signers',
        (),
        NetworksArgs,
        list_networks,
    )
