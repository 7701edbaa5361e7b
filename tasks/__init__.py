"""
Tasks Package
Command definitions and the registry that validates and dispatches them
"""

from .task_registry import TaskRegistry, TaskDefinition, TaskParameter, parse_uint
from .context import TaskContext
from . import deploy_prediction, networks


def build_registry() -> TaskRegistry:
    """Registry holding every built-in task"""
    registry = TaskRegistry()
    deploy_prediction.register(registry)
    networks.register(registry)
    return registry


__all__ = [
    'TaskRegistry',
    'TaskDefinition',
    'TaskParameter',
    'TaskContext',
    'build_registry',
    'parse_uint'
]
