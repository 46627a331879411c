"""Hook context and the hook manager that dispatches plugin handlers.

This module provides two core components:

* :class:`HookContext` -- the shared object threaded into every non-config
  hook handler of a runtime environment.
* :class:`HookManager` -- holds, per hook category and hook name, the
  handlers contributed by plugins (and registered dynamically), and
  dispatches them in one of three ways:

  - :meth:`~HookManager.run_handler_chain` composes the handlers like an
    onion: the most recently registered handler runs outermost and each
    one receives a ``next`` continuation leading inwards, down to a default
    implementation. A handler that does not call ``next`` short-circuits
    the rest of the chain.
  - :meth:`~HookManager.run_sequential_handlers` awaits every handler one
    after the other with the same arguments and collects the results.
  - :meth:`~HookManager.run_parallel_handlers` runs every handler
    concurrently; results keep the sequential order.

All three dispatch in reverse registration order: the last registered
handler runs (or is listed) first. Handlers of the ``config`` category
are called without a context, since the configuration is loaded before any
context exists; handlers of every other category get the context as their
first argument.

Handler exceptions propagate unchanged. Nothing is retried and nothing is
swallowed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Sequence

from hardhat_core.exceptions import HookContextNotSetError
from hardhat_core.models import GlobalArguments, Plugin, ResolvedConfig
from hardhat_core.references import load_reference

if TYPE_CHECKING:
    from hardhat_core.interruptions import UserInterruptionManager

logger = logging.getLogger(__name__)

CONFIG_CATEGORY = "config"
"""Context-free hooks run while the configuration is being loaded."""

HRE_CATEGORY = "hre"
"""Runtime environment lifecycle hooks (e.g. ``created``)."""

USER_INTERRUPTIONS_CATEGORY = "userInterruptions"
"""Hooks that let plugins take over terminal input and output."""

CONFIGURATION_VARIABLES_CATEGORY = "configurationVariables"
"""Hooks that fetch the values of configuration variables."""


@dataclass
class HookContext:
    """Shared context passed as first argument to every non-config hook handler.

    A single instance is created per runtime environment and installed with
    :meth:`HookManager.set_context`. Handlers may read it but must not
    replace it; the hook manager itself never mutates it.

    Attributes:
        config: The resolved configuration.
        hooks: The hook manager, so handlers can run other hooks.
        global_arguments: The resolved global arguments.
        interruptions: The terminal input/output surface.
    """

    config: ResolvedConfig
    hooks: HookManager
    global_arguments: GlobalArguments
    interruptions: UserInterruptionManager


Handler = Callable[..., Any]


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    """Call *fn* and await its result if it is awaitable."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _link(
    handler: Handler, next_fn: Callable[..., Awaitable[Any]]
) -> Callable[..., Awaitable[Any]]:
    """Wrap *handler* so that it is called with *next_fn* as its last argument."""

    async def link(*args: Any) -> Any:
        return await _call(handler, *args, next_fn)

    return link


def _lookup_handler(handler_set: Any, hook_name: str) -> Optional[Handler]:
    if isinstance(handler_set, Mapping):
        return handler_set.get(hook_name)
    return getattr(handler_set, hook_name, None)


class HookManager:
    """Registers hook handlers and dispatches them.

    Handler sets are kept per category, in registration order: first one
    per plugin, in plugin order, then the ones added with
    :meth:`register_handlers`. A handler set is a mapping from hook name to
    handler, or any object whose attributes are the handlers. Plugin sets
    given as ``"module:attribute"`` references are imported the first time
    a hook of their category is dispatched.

    Example::

        hooks = HookManager(plugins)
        hooks.set_context(context)
        results = await hooks.run_sequential_handlers("hre", "created", [hre])
    """

    def __init__(self, plugins: Sequence[Plugin] = ()) -> None:
        self._plugins = list(plugins)
        self._context: Optional[HookContext] = None
        # Plugin handler sets, resolved lazily per category.
        self._static_handler_sets: dict[str, list[Any]] = {}
        self._dynamic_handler_sets: dict[str, list[Any]] = {}

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def context(self) -> Optional[HookContext]:
        """The installed :class:`HookContext`, or ``None`` before setup."""
        return self._context

    def set_context(self, context: HookContext) -> None:
        """Install the context passed to every non-config handler."""
        self._context = context

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_handlers(self, category: str, handlers: Any) -> None:
        """Register a handler set after every plugin's handlers.

        Dynamic handlers are the most recent registrations, so they
        dispatch before any plugin handler of the same hook.

        Args:
            category: The hook category (e.g. ``"hre"``).
            handlers: A mapping from hook name to handler, or an object
                whose attributes are the handlers.
        """
        self._dynamic_handler_sets.setdefault(category, []).append(handlers)
        logger.debug("Registered dynamic handlers for category '%s'", category)

    def unregister_handlers(self, category: str, handlers: Any) -> None:
        """Remove a handler set previously added with :meth:`register_handlers`.

        Unknown handler sets are ignored.
        """
        handler_sets = self._dynamic_handler_sets.get(category, [])
        self._dynamic_handler_sets[category] = [
            h for h in handler_sets if h is not handlers
        ]

    def has_handlers(self, category: str, hook_name: str) -> bool:
        """Return ``True`` if at least one handler is registered for the hook."""
        return bool(self._get_handlers(category, hook_name))

    def _get_plugin_handler_sets(self, category: str) -> list[Any]:
        handler_sets = self._static_handler_sets.get(category)
        if handler_sets is None:
            handler_sets = []
            for plugin in self._plugins:
                handler_set = plugin.hook_handlers.get(category)
                if handler_set is None:
                    continue
                if isinstance(handler_set, str):
                    logger.debug(
                        "Loading '%s' handlers of plugin '%s' from %s",
                        category,
                        plugin.id,
                        handler_set,
                    )
                    handler_set = load_reference(handler_set)
                handler_sets.append(handler_set)
            self._static_handler_sets[category] = handler_sets
        return handler_sets

    def _get_handlers(self, category: str, hook_name: str) -> list[Handler]:
        """Return the handlers of a hook, most recently registered first."""
        handler_sets = [
            *self._get_plugin_handler_sets(category),
            *self._dynamic_handler_sets.get(category, []),
        ]
        handlers = []
        for handler_set in handler_sets:
            handler = _lookup_handler(handler_set, hook_name)
            if handler is not None:
                handlers.append(handler)
        handlers.reverse()
        return handlers

    def _dispatch_args(self, category: str, hook_name: str, args: Sequence[Any]) -> list[Any]:
        """Prepend the context to *args* unless *category* is ``config``."""
        if category == CONFIG_CATEGORY:
            return list(args)
        if self._context is None:
            raise HookContextNotSetError(category, hook_name)
        return [self._context, *args]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def run_handler_chain(
        self,
        category: str,
        hook_name: str,
        args: Sequence[Any],
        default_implementation: Callable[..., Any],
    ) -> Any:
        """Run the handlers of a hook as a chain ending in *default_implementation*.

        Each handler is called as ``handler(*args, next)`` (with the context
        prepended for non-config categories) and may await
        ``next(*new_args)`` to delegate to the next inner handler. The
        innermost ``next`` is *default_implementation*. With no handlers,
        *default_implementation* is called directly.

        Args:
            category: The hook category.
            hook_name: The hook name within the category.
            args: Arguments for the outermost handler.
            default_implementation: The behaviour being extended.

        Returns:
            Whatever the outermost handler (or the default) returns.
        """
        handlers = self._get_handlers(category, hook_name)
        call_args = self._dispatch_args(category, hook_name, args)
        logger.debug(
            "Running %s.%s as a chain of %d handler(s)", category, hook_name, len(handlers)
        )

        async def innermost(*next_args: Any) -> Any:
            return await _call(default_implementation, *next_args)

        chain: Callable[..., Awaitable[Any]] = innermost
        for handler in reversed(handlers):
            chain = _link(handler, chain)
        return await chain(*call_args)

    async def run_sequential_handlers(
        self,
        category: str,
        hook_name: str,
        args: Sequence[Any],
    ) -> list[Any]:
        """Await every handler of a hook one after the other.

        Every handler receives the same *args* (plus the context for
        non-config categories). Each call completes before the next starts.

        Returns:
            The handlers' results, most recently registered handler first.
            Empty if no handler is registered.
        """
        handlers = self._get_handlers(category, hook_name)
        call_args = self._dispatch_args(category, hook_name, args)
        logger.debug(
            "Running %d %s.%s handler(s) sequentially", len(handlers), category, hook_name
        )

        results = []
        for handler in handlers:
            results.append(await _call(handler, *call_args))
        return results

    async def run_parallel_handlers(
        self,
        category: str,
        hook_name: str,
        args: Sequence[Any],
    ) -> list[Any]:
        """Run every handler of a hook concurrently.

        Arguments are passed as in :meth:`run_sequential_handlers`. If any
        handler raises, the call raises that error; the other handlers are
        not cancelled.

        Returns:
            The handlers' results in the same order as
            :meth:`run_sequential_handlers`, whatever order they finish in.
        """
        handlers = self._get_handlers(category, hook_name)
        call_args = self._dispatch_args(category, hook_name, args)
        logger.debug(
            "Running %d %s.%s handler(s) in parallel", len(handlers), category, hook_name
        )

        return list(await asyncio.gather(*(_call(handler, *call_args) for handler in handlers)))
