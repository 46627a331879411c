"""hardhat_core -- the extensibility core of a plugin-driven task runner.

Plugins extend the runner in three ways:

* **Hooks** -- handlers for lifecycle events, dispatched as an onion-style
  chain, sequentially, or in parallel by the hook manager.
* **Global parameters** -- typed values resolved from the command line, the
  ``HARDHAT_*`` environment variables, or their defaults.
* **Tasks** -- named, possibly nested tasks with typed parameters, which
  later plugins and the user config can override.

Typical usage::

    runtime = await create_runtime_environment(user_config, {"showLogs": "true"})
    await runtime.run_task(["test", "solidity"])

Modules:
    models: Pydantic models shared across the package.
    parameters: Parameter names, parsing and validation.
    global_parameters: Global parameter registry and argument resolution.
    hooks: Hook context and hook manager.
    interruptions: User interruptions routed through hooks.
    configuration_variables: Config values fetched by name through hooks.
    tasks: Task tree, overrides and execution.
    runtime: Runtime environment construction.
    config: ``hardhat.config.py`` discovery and loading.
    output: Listings, task results and diagnostics for the CLI.
    app: Typer CLI.
"""

__version__ = "0.1.0"
