"""Canonical Pydantic models shared across all hardhat_core modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Parameters** -- the closed set of value types and the global parameters
plugins contribute:
    :class:`ParameterType`, :class:`GlobalParameter`,
    :class:`GlobalParametersMapEntry`.

**Plugins and tasks** -- the already-validated descriptors supplied by the
plugin-resolution collaborator:
    :class:`Plugin`, :class:`TaskParameterKind`, :class:`TaskParameter`,
    :class:`TaskDefinition`, :class:`TaskOverrideDefinition`.

**Configuration** -- the user config and the config the hooks resolve it to:
    :class:`UserConfig`, :class:`ResolvedConfig`,
    :class:`ConfigValidationIssue`.

**Configuration variables** -- values a config refers to by name and that
are fetched on demand: :class:`ConfigurationVariable`.

Everything a plugin declares is frozen once built. Configuration models use
``extra="allow"`` so that plugins can attach their own keys without model
changes; those keys are preserved in ``model_extra``.
"""

from __future__ import annotations

import enum
import re
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


ParameterValue = Union[str, bool, int, float, list[Any]]
"""A typed parameter value; lists hold the values of a variadic parameter."""

ActionReference = Union[str, Callable[..., Any]]
"""A task action: a callable, or a ``"module:attribute"`` string naming one."""

_CONFIGURATION_VARIABLE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


# --- Parameters ---


class ParameterType(str, enum.Enum):
    """Primitive types a parameter value can have.

    =========  ===================================================
    Type       Native value
    =========  ===================================================
    STRING     ``str``
    BOOLEAN    ``bool``
    INT        ``int`` within the safe-integer range
    BIGINT     ``int`` of any size
    FLOAT      finite ``float`` (``int`` is accepted as well)
    FILE       ``str`` holding a path
    =========  ===================================================
    """

    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    INT = "INT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    FILE = "FILE"


class GlobalParameter(BaseModel):
    """A validated global parameter definition.

    Global parameters are available to every task through the runtime
    environment. Their value comes, in order of precedence, from the
    command line, from a ``HARDHAT_<NAME_IN_UPPER_SNAKE_CASE>`` environment
    variable, or from :attr:`default_value`.

    Instances are built by
    :func:`~hardhat_core.global_parameters.build_global_parameter_definition`,
    which checks the name and the default before constructing the model.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameter_type: ParameterType = ParameterType.STRING
    default_value: Any = None


class GlobalParametersMapEntry(BaseModel):
    """An entry of the global parameters map: the definition and its owner."""

    model_config = ConfigDict(frozen=True)

    plugin_id: str
    param: GlobalParameter


GlobalParametersMap = dict[str, GlobalParametersMapEntry]
"""Parameter name to the plugin that defined it and the definition itself."""

GlobalArguments = dict[str, Any]
"""Parameter name to its resolved, typed value. Total over the registry."""


# --- Tasks ---


class TaskParameterKind(str, enum.Enum):
    """How a task parameter is supplied on the command line."""

    POSITIONAL = "positional"
    VARIADIC = "variadic"
    NAMED = "named"
    FLAG = "flag"


class TaskParameter(BaseModel):
    """A single task parameter.

    Flags are always boolean and default to ``False``. Positional and
    named parameters without a default are required; a variadic parameter
    without a default is required to receive at least one value.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    kind: TaskParameterKind = TaskParameterKind.NAMED
    parameter_type: ParameterType = ParameterType.STRING
    default_value: Any = None

    @model_validator(mode="before")
    @classmethod
    def flags_are_boolean(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("kind") in (
            TaskParameterKind.FLAG,
            TaskParameterKind.FLAG.value,
        ):
            data = {**data, "parameter_type": ParameterType.BOOLEAN}
            data.setdefault("default_value", False)
            if data["default_value"] is None:
                data["default_value"] = False
        return data

    @property
    def is_required(self) -> bool:
        return self.kind != TaskParameterKind.FLAG and self.default_value is None

    @property
    def is_positional(self) -> bool:
        return self.kind in (TaskParameterKind.POSITIONAL, TaskParameterKind.VARIADIC)


def _normalize_task_id(value: Any) -> Any:
    if isinstance(value, str):
        value = (value,)
    value = tuple(value)
    if not value or any(not isinstance(seg, str) or not seg for seg in value):
        raise ValueError("a task id must be a non-empty sequence of non-empty names")
    return value


class TaskDefinition(BaseModel):
    """A new task, or an empty task when ``action`` is ``None``.

    Empty tasks only group subtasks: ``TaskDefinition(id="test")`` lets
    ``TaskDefinition(id=["test", "solidity"], ...)`` be defined afterwards.

    The action is awaited as ``action(task_arguments, runtime)``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["task"] = "task"
    id: tuple[str, ...]
    description: str = ""
    parameters: list[TaskParameter] = Field(default_factory=list)
    action: Optional[ActionReference] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _normalize_task_id(value)


class TaskOverrideDefinition(BaseModel):
    """An override of an already defined task.

    The action is awaited as ``action(task_arguments, runtime, run_super)``
    where ``run_super`` runs the action being overridden. Added parameters
    must not reuse the names of the overridden task's parameters. A
    ``description`` of ``None`` keeps the original one.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["override"] = "override"
    id: tuple[str, ...]
    description: Optional[str] = None
    parameters: list[TaskParameter] = Field(default_factory=list)
    action: Optional[ActionReference] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _normalize_task_id(value)


AnyTaskDefinition = Annotated[
    Union[TaskDefinition, TaskOverrideDefinition], Field(discriminator="type")
]


# --- Plugins ---


class Plugin(BaseModel):
    """A plugin descriptor, as handed over by the plugin-resolution collaborator.

    ``global_parameters`` holds unvalidated definitions (dicts with
    ``name``, ``description``, ``parameter_type`` and ``default_value``
    keys, or :class:`GlobalParameter` instances); they are validated when
    the global parameters map is built.

    ``hook_handlers`` maps a hook category to the handlers the plugin
    contributes to it: a mapping of hook name to handler, an object whose
    attributes are the handlers, or a ``"module:attribute"`` reference
    to either, imported the first time a hook of that category runs.

    Example::

        Plugin(
            id="gas-reporter",
            global_parameters=[
                {"name": "gasReport", "parameter_type": "BOOLEAN", "default_value": False},
            ],
            hook_handlers={"hre": "gas_reporter.hooks:hre_handlers"},
        )
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    global_parameters: Optional[list[Any]] = None
    hook_handlers: dict[str, Any] = Field(default_factory=dict)
    tasks: list[AnyTaskDefinition] = Field(default_factory=list)


# --- Configuration ---


class ConfigValidationIssue(BaseModel):
    """A problem reported by a ``config.validateUserConfig`` handler."""

    path: list[Union[str, int]] = Field(default_factory=list)
    message: str


class UserConfig(BaseModel):
    """The configuration exported by a ``hardhat.config.py`` file.

    Plugin-specific keys are kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    plugins: list[Plugin] = Field(default_factory=list)
    tasks: list[AnyTaskDefinition] = Field(default_factory=list)


class ResolvedConfig(BaseModel):
    """The configuration produced by the ``config.resolveUserConfig`` hook chain."""

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    plugins: list[Plugin] = Field(default_factory=list)
    tasks: list[AnyTaskDefinition] = Field(default_factory=list)


class ConfigurationVariable(BaseModel):
    """A config value that is looked up by name when it is needed.

    Private keys and RPC URLs are referenced this way so they never have to
    be written into ``hardhat.config.py``. The value is produced by the
    ``configurationVariables.fetchValue`` hook chain; see
    :mod:`hardhat_core.configuration_variables`.

    ``env`` names the environment variable read by the default fetcher.
    When it is ``None``, ``HARDHAT_VAR_<NAME_IN_UPPER_SNAKE_CASE>`` is used.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["ConfigurationVariable"] = "ConfigurationVariable"
    name: str
    env: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_is_identifier(cls, value: str) -> str:
        if not _CONFIGURATION_VARIABLE_NAME_RE.match(value):
            raise ValueError(
                "a configuration variable name must start with a letter and "
                "contain only letters, digits and underscores"
            )
        return value
