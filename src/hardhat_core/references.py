"""Resolve ``"module:attribute"`` references to Python objects.

Plugins can point at hook handlers and task actions lazily, the same way
entry points do (``"my_plugin.tasks:deploy"``), so that heavy modules are
only imported when a hook or task actually runs.
"""

from __future__ import annotations

import importlib
from typing import Any

from hardhat_core.exceptions import ReferenceResolutionError


def load_reference(reference: str) -> Any:
    """Import ``module.path:attr.path`` and return the named object.

    Raises:
        ReferenceResolutionError: If the string is malformed, the module
            cannot be imported, or the attribute does not exist.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ReferenceResolutionError(reference, "expected 'module:attribute'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ReferenceResolutionError(reference, str(exc)) from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ReferenceResolutionError(
                reference, f"'{attr}' not found in '{module_name}'"
            ) from None
    return obj
