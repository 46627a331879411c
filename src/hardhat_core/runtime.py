"""Runtime environment construction.

:func:`create_runtime_environment` wires the core pieces together in the
order they depend on each other:

1. A :class:`~hardhat_core.hooks.HookManager` over the config's plugins.
2. The ``config`` hooks, which run without a context:
   ``extendUserConfig`` (chain), ``validateUserConfig`` (parallel) and
   ``resolveUserConfig`` (chain).
3. The global parameters map and the resolved global arguments.
4. The :class:`~hardhat_core.hooks.HookContext`, installed once and
   shared by every later non-config hook.
5. The task tree, and finally the ``hre.created`` hook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rich.console import Console

from hardhat_core.configuration_variables import fetch_configuration_variable
from hardhat_core.exceptions import ConfigValidationError
from hardhat_core.global_parameters import (
    build_global_parameters_map,
    resolve_global_arguments,
)
from hardhat_core.hooks import CONFIG_CATEGORY, HRE_CATEGORY, HookContext, HookManager
from hardhat_core.interruptions import UserInterruptionManager
from hardhat_core.models import (
    ConfigValidationIssue,
    ConfigurationVariable,
    GlobalArguments,
    GlobalParametersMap,
    ResolvedConfig,
    UserConfig,
)
from hardhat_core.tasks import TaskId, TaskManager

logger = logging.getLogger(__name__)


@dataclass
class RuntimeEnvironment:
    """Everything a task action or a hook handler can reach.

    Attributes:
        user_config: The config as loaded, after ``extendUserConfig``.
        config: The config produced by ``resolveUserConfig``.
        hooks: The hook manager.
        global_parameters_map: Registered global parameters and owners.
        global_arguments: One resolved value per global parameter.
        interruptions: The terminal input/output surface.
        tasks: The task tree.
        environ: Environment read for ``HARDHAT_VAR_*`` configuration
            variables; ``None`` means :data:`os.environ`.
    """

    user_config: UserConfig
    config: ResolvedConfig
    hooks: HookManager
    global_parameters_map: GlobalParametersMap
    global_arguments: GlobalArguments
    interruptions: UserInterruptionManager
    tasks: TaskManager
    environ: Optional[Mapping[str, str]] = None

    async def run_task(
        self, task_id: TaskId, task_arguments: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """Look up *task_id* and run it with typed *task_arguments*."""
        task = self.tasks.get_task(task_id)
        return await task.run(task_arguments or {}, self)

    async def fetch_configuration_variable(self, variable: ConfigurationVariable) -> str:
        """Fetch *variable* through the ``configurationVariables.fetchValue`` chain."""
        return await fetch_configuration_variable(self.hooks, variable, self.environ)


def _default_resolve_user_config(user_config: UserConfig) -> ResolvedConfig:
    return ResolvedConfig(
        plugins=user_config.plugins,
        tasks=user_config.tasks,
        **(user_config.model_extra or {}),
    )


async def resolve_user_config(
    hooks: HookManager, user_config: UserConfig
) -> tuple[UserConfig, ResolvedConfig]:
    """Run the ``config`` hooks over *user_config*.

    Returns:
        The extended user config and the resolved config.

    Raises:
        ConfigValidationError: If any ``validateUserConfig`` handler
            reports a problem.
    """
    extended = await hooks.run_handler_chain(
        CONFIG_CATEGORY, "extendUserConfig", [user_config], lambda config: config
    )

    results = await hooks.run_parallel_handlers(
        CONFIG_CATEGORY, "validateUserConfig", [extended]
    )
    issues = [
        ConfigValidationIssue.model_validate(issue)
        for handler_issues in results
        for issue in (handler_issues or [])
    ]
    if issues:
        raise ConfigValidationError(issues)

    resolved = await hooks.run_handler_chain(
        CONFIG_CATEGORY, "resolveUserConfig", [extended], _default_resolve_user_config
    )
    return extended, resolved


async def create_runtime_environment(
    user_config: UserConfig,
    user_global_arguments: Optional[Mapping[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    console: Optional[Console] = None,
) -> RuntimeEnvironment:
    """Build a :class:`RuntimeEnvironment` from a user config.

    Args:
        user_config: The loaded user config; its plugins are used in
            list order.
        user_global_arguments: Raw global argument values from the command
            line, keyed by parameter name.
        environ: Environment for ``HARDHAT_*`` global arguments and
            ``HARDHAT_VAR_*`` configuration variables (default
            :data:`os.environ`).
        console: Console for the default user interruptions.

    Raises:
        ConfigValidationError: If the config hooks reject the config.
        GlobalParameterAlreadyDefinedError, InvalidNameError,
        ReservedNameError, InvalidValueForTypeError: From global parameter
            registration or resolution.
        TaskDefinitionError, TaskNotFoundError: From building the task tree.
    """
    hooks = HookManager(user_config.plugins)

    extended, resolved = await resolve_user_config(hooks, user_config)

    global_parameters_map = build_global_parameters_map(resolved.plugins)
    global_arguments = resolve_global_arguments(
        user_global_arguments or {}, global_parameters_map, environ
    )

    interruptions = UserInterruptionManager(hooks, console)
    hooks.set_context(
        HookContext(
            config=resolved,
            hooks=hooks,
            global_arguments=global_arguments,
            interruptions=interruptions,
        )
    )

    runtime = RuntimeEnvironment(
        user_config=extended,
        config=resolved,
        hooks=hooks,
        global_parameters_map=global_parameters_map,
        global_arguments=global_arguments,
        interruptions=interruptions,
        tasks=TaskManager(resolved.plugins, resolved.tasks),
        environ=environ,
    )
    logger.debug(
        "Runtime environment created with %d plugin(s) and %d global parameter(s)",
        len(resolved.plugins),
        len(global_parameters_map),
    )

    await hooks.run_sequential_handlers(HRE_CATEGORY, "created", [runtime])
    return runtime
