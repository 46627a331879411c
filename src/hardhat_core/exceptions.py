"""Exception hierarchy for hardhat-core.

All exceptions inherit from :class:`HardhatCoreError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`hardhat_core.exit_codes`. The CLI entry point in
:func:`hardhat_core.app.main` catches ``HardhatCoreError`` and exits with the
appropriate code.

Besides a readable message, every error keeps the offending identifiers as
attributes so that callers can build their own diagnostics without parsing
``str(exc)``.

Errors raised by plugin hook handlers or task actions are never wrapped in
any of these classes; they reach the caller unchanged.

Subclass hierarchy::

    HardhatCoreError (exit 1)
    +-- InvalidNameError                          (exit 10)
    +-- ReservedNameError                         (exit 10)
    +-- GlobalParameterAlreadyDefinedError        (exit 10)
    +-- InvalidGlobalParameterDefinitionError     (exit 10)
    +-- ReferenceResolutionError                  (exit 10)
    +-- HookContextNotSetError                    (exit 1)
    +-- InvalidValueForTypeError                  (exit 2)
    +-- InvalidTaskArgumentError                  (exit 2)
    +-- ConfigError                               (exit 3)
    |   +-- ConfigValidationError                 (exit 3)
    |   +-- ConfigurationVariableNotFoundError    (exit 3)
    +-- TaskNotFoundError                         (exit 4)
    +-- TaskDefinitionError                       (exit 5)
    |   +-- TaskAlreadyDefinedError               (exit 5)
    |   +-- SubtaskWithoutParentError             (exit 5)
    +-- EmptyTaskError                            (exit 2)
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from hardhat_core.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_TASK_DEFINITION_ERROR,
    EXIT_TASK_NOT_FOUND,
)


def format_task_id(task_id: Sequence[str]) -> str:
    """Render a task path the way users type it (``"test solidity"``)."""
    return " ".join(task_id)


class HardhatCoreError(Exception):
    """Base exception for all hardhat-core errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Parameter definitions ---


class InvalidNameError(HardhatCoreError):
    """Raised when a parameter name is not lower camel case."""

    exit_code = EXIT_PLUGIN_ERROR

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid parameter name '{name}'. Parameter names must be in "
            "camelCase and start with a lowercase letter."
        )


class ReservedNameError(HardhatCoreError):
    """Raised when a parameter name is one the runtime uses for itself."""

    exit_code = EXIT_PLUGIN_ERROR

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Parameter name '{name}' is reserved and cannot be used.")


class InvalidValueForTypeError(HardhatCoreError):
    """Raised when a raw string or a default value does not fit its declared type.

    Attributes:
        value: The offending value, exactly as it was supplied.
        name: The parameter name (``"defaultValue"`` for rejected defaults).
        parameter_type: The :class:`~hardhat_core.models.ParameterType`
            the value was checked against.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, value: Any, name: str, parameter_type: Any):
        self.value = value
        self.name = name
        self.parameter_type = parameter_type
        type_name = getattr(parameter_type, "value", parameter_type)
        super().__init__(
            f"Invalid value {value!r} for argument '{name}' of type {type_name}."
        )


class GlobalParameterAlreadyDefinedError(HardhatCoreError):
    """Raised when two plugins declare a global parameter with the same name."""

    exit_code = EXIT_PLUGIN_ERROR

    def __init__(self, plugin: str, global_parameter: str, defined_by_plugin: str):
        self.plugin = plugin
        self.global_parameter = global_parameter
        self.defined_by_plugin = defined_by_plugin
        super().__init__(
            f"Plugin '{plugin}' is trying to define the global parameter "
            f"'{global_parameter}' but it is already defined by plugin "
            f"'{defined_by_plugin}'."
        )


class InvalidGlobalParameterDefinitionError(HardhatCoreError):
    """Raised when a plugin's global parameter entry is not a usable definition.

    Covers malformed entries (unknown keys, a missing name, an unknown
    parameter type); name and default value problems have their own errors.
    """

    exit_code = EXIT_PLUGIN_ERROR

    def __init__(self, reason: str, plugin: Optional[str] = None):
        self.reason = reason
        self.plugin = plugin
        where = f" in plugin '{plugin}'" if plugin else ""
        super().__init__(f"Invalid global parameter definition{where}: {reason}")


class ReferenceResolutionError(HardhatCoreError):
    """Raised when a ``"module:attribute"`` reference cannot be imported."""

    exit_code = EXIT_PLUGIN_ERROR

    def __init__(self, reference: str, reason: str):
        self.reference = reference
        super().__init__(f"Cannot resolve reference '{reference}': {reason}")


# --- Hooks ---


class HookContextNotSetError(HardhatCoreError):
    """Raised when a context-bearing hook runs before a context was installed."""

    def __init__(self, category: str, hook_name: str):
        self.category = category
        self.hook_name = hook_name
        super().__init__(
            f"Cannot run hook '{category}.{hook_name}': the hook context has "
            "not been set yet."
        )


# --- Configuration ---


class ConfigError(HardhatCoreError):
    """Raised when the user configuration cannot be found or loaded."""

    exit_code = EXIT_CONFIG_ERROR


class ConfigValidationError(ConfigError):
    """Raised when ``config.validateUserConfig`` handlers report problems.

    Attributes:
        errors: The collected validation errors, each with a ``path`` and
            a ``message``.
    """

    def __init__(self, errors: list[Any]):
        self.errors = errors
        lines = [
            f"  * Config error in config.{'.'.join(str(p) for p in e.path)}: {e.message}"
            for e in errors
        ]
        super().__init__("Invalid config:\n" + "\n".join(lines))


class ConfigurationVariableNotFoundError(ConfigError):
    """Raised when no hook handler and no environment variable supplies a value.

    Attributes:
        name: The configuration variable name.
        env_variable: The environment variable the default fetcher read.
    """

    def __init__(self, name: str, env_variable: str):
        self.name = name
        self.env_variable = env_variable
        super().__init__(
            f"Configuration variable '{name}' has no value. Set the "
            f"{env_variable} environment variable."
        )


# --- Tasks ---


class TaskNotFoundError(HardhatCoreError):
    """Raised when a task path does not resolve to a task."""

    exit_code = EXIT_TASK_NOT_FOUND

    def __init__(self, task_id: Sequence[str], message: Optional[str] = None):
        self.task_id = tuple(task_id)
        super().__init__(message or f"Task '{format_task_id(task_id)}' not found.")


class TaskDefinitionError(HardhatCoreError):
    """Raised when a task or override definition is malformed."""

    exit_code = EXIT_TASK_DEFINITION_ERROR

    def __init__(self, task_id: Sequence[str], reason: str):
        self.task_id = tuple(task_id)
        self.reason = reason
        super().__init__(f"Invalid definition for task '{format_task_id(task_id)}': {reason}")


class TaskAlreadyDefinedError(TaskDefinitionError):
    """Raised when a task path is defined twice."""

    def __init__(
        self,
        task_id: Sequence[str],
        plugin: Optional[str] = None,
        defined_by_plugin: Optional[str] = None,
    ):
        self.plugin = plugin
        self.defined_by_plugin = defined_by_plugin
        by = f" by plugin '{defined_by_plugin}'" if defined_by_plugin else ""
        super().__init__(task_id, f"the task is already defined{by}.")


class SubtaskWithoutParentError(TaskDefinitionError):
    """Raised when a subtask is defined before (or without) its parent task."""

    def __init__(self, task_id: Sequence[str]):
        parent = format_task_id(tuple(task_id)[:-1])
        super().__init__(
            task_id,
            f"its parent task '{parent}' is not defined. Define it first, "
            "possibly as an empty task.",
        )


class EmptyTaskError(HardhatCoreError):
    """Raised when an empty task (a namespace without an action) is run."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, task_id: Sequence[str]):
        self.task_id = tuple(task_id)
        super().__init__(
            f"Task '{format_task_id(task_id)}' is an empty task; run one of its subtasks."
        )


class InvalidTaskArgumentError(HardhatCoreError):
    """Raised for unknown or missing task arguments."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, task_id: Sequence[str], name: str, reason: str):
        self.task_id = tuple(task_id)
        self.name = name
        super().__init__(
            f"Invalid argument '{name}' for task '{format_task_id(task_id)}': {reason}"
        )
