"""
Task Registry
Named commands with declared parameters, validated before dispatch
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from utils.errors import ConfigError, ParameterError


UINT256_MAX = 2 ** 256 - 1

_DECIMAL = re.compile(r'^[0-9]+$')
_HEX = re.compile(r'^0[xX][0-9a-fA-F]+$')


def parse_uint(name: str, raw: str) -> int:
    """
    Coerce a raw command line value into an unsigned 256-bit integer

    Accepts decimal digits or 0x-prefixed hex. Signs, decimals, exponents
    and surrounding garbage are rejected.

    Args:
        name: Parameter name (used in the error)
        raw: Raw string value

    Returns:
        Parsed integer

    Raises:
        ParameterError: If the value is not an unsigned integer
    """
    if not isinstance(raw, str):
        raise ParameterError(name, f"expected a string, got {type(raw).__name__}")

    value = raw.strip()

    if _DECIMAL.match(value):
        number = int(value, 10)
    elif _HEX.match(value):
        number = int(value, 16)
    else:
        raise ParameterError(name, f"'{raw}' is not a non-negative integer")

    if number > UINT256_MAX:
        raise ParameterError(name, f"'{raw}' does not fit in uint256")

    return number


# Semantic parameter types -> coercion function
PARAMETER_TYPES = {
    'uint': parse_uint,
}


@dataclass(frozen=True)
class TaskParameter:
    name: str
    description: str = ''
    required: bool = True
    type: str = 'uint'


@dataclass(frozen=True)
class TaskDefinition:
    """A registered command"""

    name: str
    description: str
    parameters: Tuple[TaskParameter, ...]
    args_type: Callable[..., Any]
    handler: Callable[[Any, Any], Any]

    @property
    def parameter_names(self) -> List[str]:
        return [param.name for param in self.parameters]


class TaskRegistry:
    """
    Explicit mapping of command name -> typed handler

    Populated once at startup; invoke() never calls a handler whose
    arguments failed validation.
    """

    def __init__(self):
        self._tasks: Dict[str, TaskDefinition] = {}

    def register(
        self,
        name: str,
        description: str,
        parameters,
        args_type: Callable[..., Any],
        handler: Callable[[Any, Any], Any]
    ) -> TaskDefinition:
        """
        Register a command

        Args:
            name: Command name
            description: One-line help text
            parameters: Ordered TaskParameter declarations
            args_type: Callable building the typed argument object from keywords
            handler: Called as handler(args, context)

        Returns:
            The registered TaskDefinition

        Raises:
            ConfigError: If the name is taken or a parameter type is unknown
        """
        if name in self._tasks:
            raise ConfigError(f"Task '{name}' is already registered")

        parameters = tuple(parameters)

        for param in parameters:
            if param.type not in PARAMETER_TYPES:
                raise ConfigError(
                    f"Task '{name}' declares parameter '{param.name}' "
                    f"with unknown type '{param.type}'"
                )

        definition = TaskDefinition(name, description, parameters, args_type, handler)
        self._tasks[name] = definition

        logger.debug(f"Registered task {name} ({', '.join(definition.parameter_names)})")
        return definition

    def get(self, name: str) -> TaskDefinition:
        definition = self._tasks.get(name)

        if definition is None:
            raise ParameterError(
                'task',
                f"unknown task '{name}'. Available: {', '.join(sorted(self._tasks))}"
            )

        return definition

    def definitions(self) -> List[TaskDefinition]:
        return list(self._tasks.values())

    def parse(self, name: str, raw_args: Mapping[str, Optional[str]]):
        """
        Validate raw string arguments and build the typed argument object

        Args:
            name: Task name
            raw_args: Mapping of parameter name -> raw string (None = absent)

        Returns:
            Typed argument object

        Raises:
            ParameterError: Unknown task, unknown argument, missing or malformed value
        """
        definition = self.get(name)

        unknown = sorted(set(raw_args) - set(definition.parameter_names))
        if unknown:
            raise ParameterError(unknown[0], f"not accepted by task '{name}'")

        typed = {}
        for param in definition.parameters:
            raw = raw_args.get(param.name)

            if raw is None:
                if param.required:
                    raise ParameterError(param.name, "required parameter is missing")
                typed[param.name] = None
                continue

            typed[param.name] = PARAMETER_TYPES[param.type](param.name, raw)

        return definition.args_type(**typed)

    def invoke(self, name: str, raw_args: Mapping[str, Optional[str]], context=None):
        """
        Validate arguments, then run the task handler

        Args:
            name: Task name
            raw_args: Mapping of parameter name -> raw string
            context: Runtime context handed to the handler

        Returns:
            Whatever the handler returns
        """
        args = self.parse(name, raw_args)

        logger.debug(f"Running task {name} with {args}")
        return self._tasks[name].handler(args, context)
