"""Global parameter registry and argument resolution.

Plugins contribute global parameters through :attr:`Plugin.global_parameters
<hardhat_core.models.Plugin.global_parameters>`. At startup the ordered
plugin list is folded into a single name-to-definition map with
:func:`build_global_parameters_map`; afterwards
:func:`resolve_global_arguments` produces one typed value per registered
parameter.

Resolution precedence (high to low):
    1. The value supplied by the user (e.g. ``--show-logs true``).
    2. The ``HARDHAT_<NAME_IN_UPPER_SNAKE_CASE>`` environment variable.
    3. The parameter's default value.

The map is the only source of which names exist: user-supplied or
environment values for unknown names are ignored.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional, Sequence

from hardhat_core.exceptions import (
    GlobalParameterAlreadyDefinedError,
    InvalidGlobalParameterDefinitionError,
    InvalidNameError,
    InvalidValueForTypeError,
    ReservedNameError,
)
from hardhat_core.models import (
    GlobalArguments,
    GlobalParameter,
    GlobalParametersMap,
    GlobalParametersMapEntry,
    ParameterType,
    Plugin,
)
from hardhat_core.parameters import (
    RESERVED_PARAMETER_NAMES,
    env_variable_name,
    is_parameter_value_valid,
    is_valid_param_name_casing,
    parse_parameter_value,
)

logger = logging.getLogger(__name__)


_DEFINITION_KEYS = ("name", "description", "parameter_type", "default_value")


def _as_definition_input(param: Any, plugin_id: str) -> dict[str, Any]:
    """Accept either a plain dict or a :class:`GlobalParameter` instance.

    Dict keys must be among :data:`_DEFINITION_KEYS`; camelCase spellings
    such as ``defaultValue`` are rejected.
    """
    if isinstance(param, GlobalParameter):
        return param.model_dump()
    if not isinstance(param, Mapping):
        raise InvalidGlobalParameterDefinitionError(
            f"expected a mapping or a GlobalParameter, got {type(param).__name__}",
            plugin=plugin_id,
        )

    unknown = sorted(str(key) for key in param if key not in _DEFINITION_KEYS)
    if unknown:
        raise InvalidGlobalParameterDefinitionError(
            f"unexpected key(s) {', '.join(unknown)}; "
            f"expected {', '.join(_DEFINITION_KEYS)}",
            plugin=plugin_id,
        )
    if not isinstance(param.get("name"), str):
        raise InvalidGlobalParameterDefinitionError(
            "every global parameter needs a string 'name'", plugin=plugin_id
        )
    return dict(param)


def build_global_parameter_definition(
    name: str,
    description: str = "",
    parameter_type: Optional[ParameterType] = None,
    default_value: Any = None,
) -> GlobalParameter:
    """Validate a global parameter and build its immutable definition.

    The name is checked before the default value: an invalid or reserved
    name is reported even if the default is wrong too.

    Args:
        name: Lower camel case parameter name.
        description: Help text shown by the CLI.
        parameter_type: Declared type; ``None`` means ``STRING``.
        default_value: Value used when neither the user nor the environment
            supplies one. Must already be of the declared type.

    Returns:
        The validated :class:`~hardhat_core.models.GlobalParameter`.

    Raises:
        InvalidNameError: If *name* is not lower camel case.
        ReservedNameError: If *name* is reserved by the CLI.
        InvalidGlobalParameterDefinitionError: If *parameter_type* is not a
            known type.
        InvalidValueForTypeError: If *default_value* does not satisfy
            *parameter_type*.
    """
    if not is_valid_param_name_casing(name):
        raise InvalidNameError(name)

    if name in RESERVED_PARAMETER_NAMES:
        raise ReservedNameError(name)

    try:
        resolved_type = (
            ParameterType(parameter_type)
            if parameter_type is not None
            else ParameterType.STRING
        )
    except ValueError:
        raise InvalidGlobalParameterDefinitionError(
            f"unknown parameter type {parameter_type!r} for '{name}'"
        ) from None

    if not is_parameter_value_valid(resolved_type, default_value):
        raise InvalidValueForTypeError(default_value, "defaultValue", resolved_type)

    return GlobalParameter(
        name=name,
        description=description,
        parameter_type=resolved_type,
        default_value=default_value,
    )


def build_global_parameters_map(plugins: Sequence[Plugin]) -> GlobalParametersMap:
    """Collect the global parameters of *plugins* into a single map.

    Plugins are processed in order; the order only decides which plugin is
    reported as the original owner when two of them declare the same name.
    The plugins are not assumed to be validated, so every definition is
    checked with :func:`build_global_parameter_definition`.

    Args:
        plugins: Resolved plugins, in load order.

    Returns:
        A map from parameter name to its owning plugin and definition.

    Raises:
        GlobalParameterAlreadyDefinedError: If a name was already declared
            by an earlier plugin.
        InvalidNameError, ReservedNameError, InvalidValueForTypeError: If a
            definition is invalid.
        InvalidGlobalParameterDefinitionError: If an entry has unknown keys,
            no name, or an unknown type.
    """
    global_parameters_map: GlobalParametersMap = {}

    for plugin in plugins:
        if plugin.global_parameters is None:
            continue

        for raw_param in plugin.global_parameters:
            param_input = _as_definition_input(raw_param, plugin.id)
            existing = global_parameters_map.get(param_input["name"])
            if existing is not None:
                raise GlobalParameterAlreadyDefinedError(
                    plugin=plugin.id,
                    global_parameter=param_input["name"],
                    defined_by_plugin=existing.plugin_id,
                )

            try:
                definition = build_global_parameter_definition(**param_input)
            except InvalidGlobalParameterDefinitionError as exc:
                raise InvalidGlobalParameterDefinitionError(exc.reason, plugin=plugin.id) from None
            global_parameters_map[definition.name] = GlobalParametersMapEntry(
                plugin_id=plugin.id, param=definition
            )
            logger.debug(
                "Registered global parameter '%s' (%s) from plugin '%s'",
                definition.name,
                definition.parameter_type.value,
                plugin.id,
            )

    return global_parameters_map


def resolve_global_arguments(
    user_provided_global_arguments: Mapping[str, str],
    global_parameters_map: GlobalParametersMap,
    environ: Optional[Mapping[str, str]] = None,
) -> GlobalArguments:
    """Resolve one typed value per registered global parameter.

    Args:
        user_provided_global_arguments: Raw string values supplied by the
            user, keyed by parameter name. Unknown names are ignored.
        global_parameters_map: The registry built by
            :func:`build_global_parameters_map`.
        environ: Environment to read ``HARDHAT_*`` variables from.
            Defaults to :data:`os.environ`.

    Returns:
        A dict with exactly one entry per registered parameter.

    Raises:
        InvalidValueForTypeError: If a user or environment value cannot be
            parsed. Resolution stops at the first failure.
    """
    env = os.environ if environ is None else environ
    global_arguments: GlobalArguments = {}

    for name, entry in global_parameters_map.items():
        value = user_provided_global_arguments.get(name)
        source = "user"
        if value is None:
            value = env.get(env_variable_name(name))
            source = "environment"

        if value is not None:
            global_arguments[name] = parse_parameter_value(
                value, entry.param.parameter_type, name
            )
            logger.debug("Global argument '%s' taken from %s", name, source)
        else:
            global_arguments[name] = entry.param.default_value

    return global_arguments
