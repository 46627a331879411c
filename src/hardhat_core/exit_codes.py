"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hardhat_core.exceptions.HardhatCoreError` subclass.
Shell wrappers and CI scripts can inspect the exit code to tell a bad
argument apart from a broken plugin without parsing stderr.

Example::

    $ HARDHAT_SHOW_LOGS=maybe hardhat-core tasks
    $ echo $?
    2   # EXIT_INVALID_USAGE -- HARDHAT_SHOW_LOGS is not a boolean
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""An argument or environment value could not be parsed for its parameter."""

EXIT_CONFIG_ERROR = 3
"""The user configuration could not be loaded or failed validation."""

EXIT_TASK_NOT_FOUND = 4
"""The requested task does not exist in the task tree."""

EXIT_TASK_DEFINITION_ERROR = 5
"""A task or task override is malformed or conflicts with another one."""

EXIT_PLUGIN_ERROR = 10
"""A plugin declared an invalid or conflicting global parameter or hook."""
