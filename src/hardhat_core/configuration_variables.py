"""Configuration variables: config values that are fetched by name on demand.

A config refers to a secret or a per-machine value with
:func:`config_variable` instead of writing it down::

    config = UserConfig(
        plugins=[...],
        deployer_key=config_variable("deployerKey"),
    )

The value is only read when a plugin or a task asks for it, through
:func:`fetch_configuration_variable` (or
:meth:`RuntimeEnvironment.fetch_configuration_variable
<hardhat_core.runtime.RuntimeEnvironment.fetch_configuration_variable>`).
That runs the ``configurationVariables.fetchValue`` hook chain, so a
keystore plugin can answer from its own storage and call ``next`` for
variables it does not hold. The end of the chain reads the environment:
``HARDHAT_VAR_<NAME_IN_UPPER_SNAKE_CASE>``, or the variable's own ``env``.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from hardhat_core.exceptions import ConfigurationVariableNotFoundError
from hardhat_core.hooks import CONFIGURATION_VARIABLES_CATEGORY, HookContext, HookManager
from hardhat_core.models import ConfigurationVariable
from hardhat_core.parameters import camel_to_snake_case

logger = logging.getLogger(__name__)

CONFIGURATION_VARIABLE_ENV_PREFIX = "HARDHAT_VAR_"


def config_variable(name: str, env: Optional[str] = None) -> ConfigurationVariable:
    """Refer to the configuration variable *name* from a config file.

    Args:
        name: The variable name, e.g. ``"deployerKey"`` or ``"DEPLOYER_KEY"``.
        env: Environment variable to read instead of the ``HARDHAT_VAR_``
            default.
    """
    return ConfigurationVariable(name=name, env=env)


def configuration_variable_env_name(variable: ConfigurationVariable) -> str:
    """Return the environment variable the default fetcher reads for *variable*.

    Example::

        >>> configuration_variable_env_name(config_variable("deployerKey"))
        'HARDHAT_VAR_DEPLOYER_KEY'
        >>> configuration_variable_env_name(config_variable("RPC_URL"))
        'HARDHAT_VAR_RPC_URL'
    """
    if variable.env is not None:
        return variable.env
    name = variable.name
    if name != name.upper():
        name = camel_to_snake_case(name).upper()
    return CONFIGURATION_VARIABLE_ENV_PREFIX + name


async def fetch_configuration_variable(
    hooks: HookManager,
    variable: ConfigurationVariable,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Fetch the value of *variable* through the ``fetchValue`` hook chain.

    Handlers are called as ``handler(context, variable, next)`` and return
    the value, or ``await next(context, variable)`` to pass the variable on.

    Args:
        hooks: The hook manager; its context must be set.
        variable: The variable to fetch.
        environ: Environment for the default fetcher (default
            :data:`os.environ`).

    Raises:
        ConfigurationVariableNotFoundError: If the chain reaches the
            default fetcher and the environment variable is unset.
        HookContextNotSetError: If no hook context is installed yet.
    """
    env = os.environ if environ is None else environ

    def _read_environment(context: HookContext, requested: ConfigurationVariable) -> str:
        env_name = configuration_variable_env_name(requested)
        value = env.get(env_name)
        if value is None:
            raise ConfigurationVariableNotFoundError(requested.name, env_name)
        logger.debug("Configuration variable '%s' read from %s", requested.name, env_name)
        return value

    return await hooks.run_handler_chain(
        CONFIGURATION_VARIABLES_CATEGORY, "fetchValue", [variable], _read_environment
    )
