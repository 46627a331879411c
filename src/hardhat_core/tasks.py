"""Task tree construction, task overrides and task execution.

Tasks are addressed by a non-empty path of names: ``("test",)`` is a root
task and ``("test", "solidity")`` one of its subtasks. The
:class:`TaskManager` builds the tree once from the plugins' tasks (in plugin
order) followed by the user config's tasks, applying every definition and
override in list order.

An override keeps the task's place in the tree, adds its parameters to the
task's own, and wraps the task's action: the override action receives a
``run_super`` handle that runs the action it replaced. Overriding an
overridden task chains ``run_super`` calls from the most recent override
back to the original action, the same way hook handler chains compose.

Parameter rules, checked when a task or override is applied:

* names are lower camel case, not reserved, and unique within the task;
* defaults, when given, must match the parameter type;
* a required positional parameter cannot follow an optional one, and no
  positional parameter can follow the variadic one.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from hardhat_core.exceptions import (
    EmptyTaskError,
    InvalidNameError,
    InvalidTaskArgumentError,
    InvalidValueForTypeError,
    ReservedNameError,
    SubtaskWithoutParentError,
    TaskAlreadyDefinedError,
    TaskDefinitionError,
    TaskNotFoundError,
)
from hardhat_core.models import (
    ActionReference,
    Plugin,
    TaskDefinition,
    TaskOverrideDefinition,
    TaskParameter,
    TaskParameterKind,
)
from hardhat_core.parameters import (
    RESERVED_PARAMETER_NAMES,
    is_parameter_value_valid,
    is_valid_param_name_casing,
    parse_parameter_value,
)
from hardhat_core.references import load_reference

logger = logging.getLogger(__name__)

TaskId = Union[str, Sequence[str]]


def _as_task_id(task_id: TaskId) -> tuple[str, ...]:
    if isinstance(task_id, str):
        return (task_id,)
    return tuple(task_id)


def validate_task_parameters(task_id: Sequence[str], parameters: Sequence[TaskParameter]) -> None:
    """Check the parameter rules listed in the module docstring.

    Raises:
        InvalidNameError: For a name that is not lower camel case.
        ReservedNameError: For a reserved name.
        InvalidValueForTypeError: For a default that does not fit its type.
        TaskDefinitionError: For a duplicated name or a bad positional order.
    """
    seen: set[str] = set()
    seen_optional_positional = False
    seen_variadic = False

    for param in parameters:
        if not is_valid_param_name_casing(param.name):
            raise InvalidNameError(param.name)
        if param.name in RESERVED_PARAMETER_NAMES:
            raise ReservedNameError(param.name)
        if param.name in seen:
            raise TaskDefinitionError(task_id, f"parameter '{param.name}' is defined twice.")
        seen.add(param.name)

        is_variadic = param.kind == TaskParameterKind.VARIADIC
        if param.default_value is not None and not is_parameter_value_valid(
            param.parameter_type, param.default_value, is_variadic
        ):
            raise InvalidValueForTypeError(
                param.default_value, "defaultValue", param.parameter_type
            )

        if not param.is_positional:
            continue
        if seen_variadic:
            raise TaskDefinitionError(
                task_id,
                f"positional parameter '{param.name}' cannot follow the variadic parameter.",
            )
        if param.is_required and seen_optional_positional:
            raise TaskDefinitionError(
                task_id,
                f"required positional parameter '{param.name}' cannot follow "
                "an optional one.",
            )
        seen_optional_positional = seen_optional_positional or not param.is_required
        seen_variadic = is_variadic


@dataclass(frozen=True)
class _TaskAction:
    action: ActionReference
    plugin_id: Optional[str]
    is_override: bool


class Task:
    """A task of the tree, with every override applied.

    Attributes:
        id: The task path.
        description: Help text (the latest override's, if it set one).
        parameters: Parameters by name, the original ones first.
        plugin_id: The plugin that defined the task, ``None`` for the config.
        subtasks: Child tasks by name.
    """

    def __init__(
        self,
        id: Sequence[str],
        description: str = "",
        parameters: Sequence[TaskParameter] = (),
        actions: Sequence[_TaskAction] = (),
        plugin_id: Optional[str] = None,
        subtasks: Optional[dict[str, Task]] = None,
    ) -> None:
        self.id = tuple(id)
        self.description = description
        self.parameters: dict[str, TaskParameter] = {p.name: p for p in parameters}
        self.plugin_id = plugin_id
        self.subtasks: dict[str, Task] = subtasks if subtasks is not None else {}
        self._actions = tuple(actions)

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, overrides={self.override_count})"

    @classmethod
    def from_definition(cls, definition: TaskDefinition, plugin_id: Optional[str] = None) -> Task:
        validate_task_parameters(definition.id, definition.parameters)
        actions = []
        if definition.action is not None:
            actions.append(_TaskAction(definition.action, plugin_id, is_override=False))
        return cls(
            id=definition.id,
            description=definition.description,
            parameters=definition.parameters,
            actions=actions,
            plugin_id=plugin_id,
        )

    @property
    def is_empty(self) -> bool:
        """``True`` for a task without any action (a namespace for subtasks)."""
        return not self._actions

    @property
    def override_count(self) -> int:
        return sum(1 for a in self._actions if a.is_override)

    def with_override(
        self, override: TaskOverrideDefinition, plugin_id: Optional[str] = None
    ) -> Task:
        """Return a new task with *override* applied on top of this one.

        The subtasks are shared with the new task.

        Raises:
            TaskDefinitionError: If an added parameter reuses an existing
                name, or breaks the positional ordering of the union.
        """
        for param in override.parameters:
            if param.name in self.parameters:
                raise TaskDefinitionError(
                    self.id,
                    f"the override adds parameter '{param.name}', which the task "
                    "already has.",
                )
        parameters = [*self.parameters.values(), *override.parameters]
        validate_task_parameters(self.id, parameters)

        actions = list(self._actions)
        if override.action is not None:
            actions.append(_TaskAction(override.action, plugin_id, is_override=True))

        return Task(
            id=self.id,
            description=(
                self.description if override.description is None else override.description
            ),
            parameters=parameters,
            actions=actions,
            plugin_id=self.plugin_id,
            subtasks=self.subtasks,
        )

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def parse_arguments(
        self, raw_arguments: Mapping[str, Union[str, Sequence[str]]]
    ) -> dict[str, Any]:
        """Turn raw command-line strings into typed task arguments.

        Variadic parameters take a list of strings; every other parameter
        takes a single string.

        Raises:
            InvalidTaskArgumentError: For unknown names or a list given to a
                non-variadic parameter.
            InvalidValueForTypeError: For values that cannot be parsed.
        """
        parsed: dict[str, Any] = {}
        for name, raw in raw_arguments.items():
            param = self.parameters.get(name)
            if param is None:
                raise InvalidTaskArgumentError(self.id, name, "the task has no such parameter.")
            if param.kind == TaskParameterKind.VARIADIC:
                values = [raw] if isinstance(raw, str) else list(raw)
                parsed[name] = [
                    parse_parameter_value(v, param.parameter_type, name) for v in values
                ]
                continue
            if not isinstance(raw, str):
                if len(raw) != 1:
                    raise InvalidTaskArgumentError(self.id, name, "expected a single value.")
                raw = raw[0]
            parsed[name] = parse_parameter_value(raw, param.parameter_type, name)
        return parsed

    def resolve_arguments(self, task_arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Validate typed *task_arguments* and fill in defaults.

        Raises:
            InvalidTaskArgumentError: For unknown names or missing required
                values.
            InvalidValueForTypeError: For values of the wrong type.
        """
        for name in task_arguments:
            if name not in self.parameters:
                raise InvalidTaskArgumentError(self.id, name, "the task has no such parameter.")

        resolved: dict[str, Any] = {}
        for name, param in self.parameters.items():
            value = task_arguments.get(name)
            if value is None:
                if param.is_required:
                    raise InvalidTaskArgumentError(self.id, name, "a value is required.")
                resolved[name] = param.default_value
                continue
            is_variadic = param.kind == TaskParameterKind.VARIADIC
            if not is_parameter_value_valid(param.parameter_type, value, is_variadic):
                raise InvalidValueForTypeError(value, name, param.parameter_type)
            resolved[name] = value
        return resolved

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, task_arguments: Mapping[str, Any], runtime: Any) -> Any:
        """Run the task's action chain with *task_arguments*.

        The most recent override runs first; its ``run_super(args=None)``
        runs the previous action with the same arguments, or with *args*
        when given (which are validated again).

        Raises:
            EmptyTaskError: If the task has no action to run.
        """
        if self.is_empty:
            raise EmptyTaskError(self.id)

        resolved = self.resolve_arguments(task_arguments)
        logger.debug(
            "Running task '%s' (%d override(s))", " ".join(self.id), self.override_count
        )
        return await self._run_action(len(self._actions) - 1, resolved, runtime)

    async def _run_action(self, index: int, task_arguments: dict[str, Any], runtime: Any) -> Any:
        if index < 0:
            raise EmptyTaskError(self.id)

        entry = self._actions[index]
        action = _resolve_action(entry.action)
        if not entry.is_override:
            return await _call_action(action, task_arguments, runtime)

        async def run_super(args: Optional[Mapping[str, Any]] = None) -> Any:
            super_arguments = task_arguments if args is None else self.resolve_arguments(args)
            return await self._run_action(index - 1, super_arguments, runtime)

        return await _call_action(action, task_arguments, runtime, run_super)


def _resolve_action(action: ActionReference) -> Callable[..., Any]:
    if isinstance(action, str):
        return load_reference(action)
    return action


async def _call_action(action: Callable[..., Any], *args: Any) -> Any:
    result = action(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class TaskManager:
    """Builds and queries the task tree.

    Args:
        plugins: Resolved plugins, in load order; their tasks are applied
            first.
        config_tasks: The user config's task definitions and overrides,
            applied last.

    Example::

        manager = TaskManager(config.plugins, config.tasks)
        task = manager.get_task(["test", "solidity"])
    """

    def __init__(
        self,
        plugins: Sequence[Plugin] = (),
        config_tasks: Sequence[Union[TaskDefinition, TaskOverrideDefinition]] = (),
    ) -> None:
        self._root_tasks: dict[str, Task] = {}

        for plugin in plugins:
            for definition in plugin.tasks:
                self._apply(definition, plugin.id)
        for definition in config_tasks:
            self._apply(definition, None)

    @property
    def root_tasks(self) -> dict[str, Task]:
        return self._root_tasks

    def get_task(self, task_id: TaskId) -> Task:
        """Return the task at *task_id*.

        Raises:
            TaskNotFoundError: If any segment of the path does not exist.
        """
        path = _as_task_id(task_id)
        if not path:
            raise TaskNotFoundError(path, "An empty task id was given.")

        task = self._root_tasks.get(path[0])
        for name in path[1:]:
            if task is None:
                break
            task = task.subtasks.get(name)
        if task is None:
            raise TaskNotFoundError(path)
        return task

    def iter_tasks(self) -> list[Task]:
        """Return every task, depth first, in definition order."""
        result: list[Task] = []

        def _walk(tasks: dict[str, Task]) -> None:
            for task in tasks.values():
                result.append(task)
                _walk(task.subtasks)

        _walk(self._root_tasks)
        return result

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _container_for(self, task_id: tuple[str, ...]) -> Optional[dict[str, Task]]:
        """Return the dict holding *task_id*'s node, or ``None`` without a parent."""
        if len(task_id) == 1:
            return self._root_tasks
        try:
            return self.get_task(task_id[:-1]).subtasks
        except TaskNotFoundError:
            return None

    def _apply(
        self,
        definition: Union[TaskDefinition, TaskOverrideDefinition],
        plugin_id: Optional[str],
    ) -> None:
        if isinstance(definition, TaskOverrideDefinition):
            self._apply_override(definition, plugin_id)
        else:
            self._insert_task(definition, plugin_id)

    def _insert_task(self, definition: TaskDefinition, plugin_id: Optional[str]) -> None:
        container = self._container_for(definition.id)
        if container is None:
            raise SubtaskWithoutParentError(definition.id)

        name = definition.id[-1]
        existing = container.get(name)
        if existing is not None:
            raise TaskAlreadyDefinedError(
                definition.id, plugin=plugin_id, defined_by_plugin=existing.plugin_id
            )

        container[name] = Task.from_definition(definition, plugin_id)
        logger.debug(
            "Defined task '%s'%s",
            " ".join(definition.id),
            f" from plugin '{plugin_id}'" if plugin_id else "",
        )

    def _apply_override(
        self, override: TaskOverrideDefinition, plugin_id: Optional[str]
    ) -> None:
        container = self._container_for(override.id)
        name = override.id[-1]
        if container is None or name not in container:
            raise TaskNotFoundError(
                override.id,
                f"Cannot override task '{' '.join(override.id)}': it is not defined.",
            )
        container[name] = container[name].with_override(override, plugin_id)
        logger.debug(
            "Overrode task '%s'%s",
            " ".join(override.id),
            f" from plugin '{plugin_id}'" if plugin_id else "",
        )

