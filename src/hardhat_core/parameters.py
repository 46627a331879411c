"""Parameter names, value parsing and value validation.

These rules are shared by global parameters and task parameters:

* :func:`is_valid_param_name_casing` -- names are lower camel case.
* :data:`RESERVED_PARAMETER_NAMES` -- names the CLI keeps for itself.
* :func:`parse_parameter_value` -- turn a raw string (from the command line
  or the environment) into a typed value.
* :func:`is_parameter_value_valid` -- check an already-typed value, such as
  a default supplied by a plugin.

A string that cannot be parsed losslessly is always rejected with
:class:`~hardhat_core.exceptions.InvalidValueForTypeError`; nothing is
coerced silently.
"""

from __future__ import annotations

import math
import re
from typing import Any

from hardhat_core.exceptions import InvalidValueForTypeError
from hardhat_core.models import ParameterType, ParameterValue


RESERVED_PARAMETER_NAMES: frozenset[str] = frozenset(
    {"config", "help", "showStackTraces", "version"}
)
"""Names used by the CLI's own options; plugins and tasks cannot declare them."""

ENV_VARIABLE_PREFIX = "HARDHAT_"

MAX_SAFE_INTEGER = 2**53 - 1
"""Largest magnitude an ``INT`` value may have."""

_PARAM_NAME_RE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_UPPERCASE_RE = re.compile(r"[A-Z]")

_DECIMAL_INT_RE = re.compile(r"^[-+]?\d+$")
_HEX_INT_RE = re.compile(r"^[-+]?0[xX][0-9a-fA-F]+$")
_BIGINT_RE = re.compile(r"^[-+]?(?:\d+|0[xX][0-9a-fA-F]+)n?$")
_DECIMAL_FLOAT_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?$")


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def is_valid_param_name_casing(name: str) -> bool:
    """Return ``True`` if *name* is lower camel case (``fooBar``, ``param3``)."""
    return _PARAM_NAME_RE.match(name) is not None


def camel_to_snake_case(name: str) -> str:
    """Convert ``showStackTraces`` to ``show_stack_traces``.

    Digits are left where they are, so ``param3`` stays ``param3``.
    """
    return _UPPERCASE_RE.sub(lambda m: "_" + m.group(0).lower(), name)


def env_variable_name(name: str) -> str:
    """Return the environment variable that can supply parameter *name*.

    Example::

        >>> env_variable_name("showStackTraces")
        'HARDHAT_SHOW_STACK_TRACES'
    """
    return ENV_VARIABLE_PREFIX + camel_to_snake_case(name).upper()


# ---------------------------------------------------------------------------
# Parsing raw strings
# ---------------------------------------------------------------------------


def _parse_int_literal(value: str) -> int:
    sign = -1 if value.startswith("-") else 1
    digits = value.lstrip("+-")
    if digits[:2].lower() == "0x":
        return sign * int(digits[2:], 16)
    return sign * int(digits, 10)


def _parse_number(value: str, parameter_type: ParameterType) -> int | float | None:
    """Parse a numeric literal, or return ``None`` if it does not fit the type."""
    if parameter_type == ParameterType.INT:
        if _DECIMAL_INT_RE.match(value) or _HEX_INT_RE.match(value):
            parsed = _parse_int_literal(value)
            if abs(parsed) <= MAX_SAFE_INTEGER:
                return parsed

    elif parameter_type == ParameterType.BIGINT:
        if _BIGINT_RE.match(value):
            return _parse_int_literal(value.removesuffix("n"))

    elif parameter_type == ParameterType.FLOAT:
        if _DECIMAL_FLOAT_RE.match(value):
            parsed_float = float(value)
        elif _HEX_INT_RE.match(value):
            parsed_float = float(_parse_int_literal(value))
        else:
            return None
        if math.isfinite(parsed_float):
            return parsed_float

    return None


def parse_parameter_value(value: str, parameter_type: ParameterType, name: str) -> Any:
    """Parse the raw string *value* as *parameter_type*.

    Args:
        value: The raw string, e.g. from ``--my-param 10`` or
            ``HARDHAT_MY_PARAM=10``.
        parameter_type: The declared type of the parameter.
        name: The parameter name, reported in errors.

    Returns:
        The typed value.

    Raises:
        InvalidValueForTypeError: If *value* is not a valid literal of
            *parameter_type*, or overflows it.
    """
    if parameter_type in (ParameterType.STRING, ParameterType.FILE):
        return value

    if parameter_type == ParameterType.BOOLEAN:
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False

    else:
        try:
            parsed = _parse_number(value, parameter_type)
        except (ValueError, OverflowError):
            # Literals past int's digit limit or float's range.
            parsed = None
        if parsed is not None:
            return parsed

    raise InvalidValueForTypeError(value, name, parameter_type)


# ---------------------------------------------------------------------------
# Validating typed values
# ---------------------------------------------------------------------------


def _is_single_value_valid(parameter_type: ParameterType, value: Any) -> bool:
    if parameter_type in (ParameterType.STRING, ParameterType.FILE):
        return isinstance(value, str)
    if parameter_type == ParameterType.BOOLEAN:
        return isinstance(value, bool)
    # bool is a subclass of int; True is not a number here.
    if isinstance(value, bool):
        return False
    if parameter_type == ParameterType.INT:
        return isinstance(value, int) and abs(value) <= MAX_SAFE_INTEGER
    if parameter_type == ParameterType.BIGINT:
        return isinstance(value, int)
    if parameter_type == ParameterType.FLOAT:
        if not isinstance(value, (int, float)):
            return False
        try:
            return math.isfinite(value)
        except OverflowError:
            # An int too large to be represented as a float.
            return False
    return False


def is_parameter_value_valid(
    parameter_type: ParameterType,
    value: ParameterValue,
    is_variadic: bool = False,
) -> bool:
    """Check that an already-typed *value* belongs to *parameter_type*.

    Used for defaults supplied programmatically. When *is_variadic* is set,
    *value* must be a non-empty list whose items all satisfy the type.
    """
    if is_variadic:
        return (
            isinstance(value, list)
            and len(value) > 0
            and all(_is_single_value_valid(parameter_type, v) for v in value)
        )
    return _is_single_value_valid(parameter_type, value)
