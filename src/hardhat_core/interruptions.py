"""User interruptions -- the terminal input/output surface of the hook context.

Tasks and plugins interrupt the user to show a message or ask for a value
(e.g. a password to decrypt a key). Every interruption runs as a handler
chain in the ``userInterruptions`` hook category, so a plugin can take it
over entirely (for instance to answer from a keychain, or to render into a
UI of its own). The default implementations talk to the terminal through
Rich.

Interruptions never overlap: they are serialised through a single
:class:`asyncio.Lock`, and :meth:`UserInterruptionManager.uninterrupted`
holds that lock while a caller draws to the terminal itself.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from rich.console import Console
from rich.prompt import Prompt

from hardhat_core.hooks import USER_INTERRUPTIONS_CATEGORY, HookContext, HookManager

T = TypeVar("T")


class UserInterruptionManager:
    """Serialises user interruptions and routes them through the hook manager.

    Args:
        hooks: The hook manager whose ``userInterruptions`` handlers may
            replace the default behaviour.
        console: Console used by the default implementations. Defaults to
            a stderr console so that stdout keeps carrying data only.
    """

    def __init__(self, hooks: HookManager, console: Optional[Console] = None) -> None:
        self._hooks = hooks
        self._console = console or Console(stderr=True)
        self._lock = asyncio.Lock()

    async def display_message(self, interruptor: str, message: str) -> None:
        """Show *message* to the user on behalf of *interruptor*."""
        async with self._lock:
            await self._hooks.run_handler_chain(
                USER_INTERRUPTIONS_CATEGORY,
                "displayMessage",
                [interruptor, message],
                self._default_display_message,
            )

    async def request_input(self, interruptor: str, input_description: str) -> str:
        """Ask the user for a value on behalf of *interruptor*."""
        async with self._lock:
            return await self._hooks.run_handler_chain(
                USER_INTERRUPTIONS_CATEGORY,
                "requestInput",
                [interruptor, input_description],
                self._default_request_input,
            )

    async def request_secret_input(self, interruptor: str, input_description: str) -> str:
        """Ask the user for a secret; the default prompt does not echo it."""
        async with self._lock:
            return await self._hooks.run_handler_chain(
                USER_INTERRUPTIONS_CATEGORY,
                "requestSecretInput",
                [interruptor, input_description],
                self._default_request_secret_input,
            )

    async def uninterrupted(self, fn: Callable[[], Awaitable[T] | T]) -> T:
        """Run *fn* while no interruption can be shown.

        *fn* may be a plain function or return an awaitable.
        """
        async with self._lock:
            result: Any = fn()
            if inspect.isawaitable(result):
                result = await result
            return result

    # ------------------------------------------------------------------
    # Default implementations
    # ------------------------------------------------------------------

    async def _default_display_message(
        self, _context: HookContext, interruptor: str, message: str
    ) -> None:
        self._console.print(f"[blue]\\[{interruptor}][/blue] {message}")

    async def _default_request_input(
        self, _context: HookContext, interruptor: str, input_description: str
    ) -> str:
        return await asyncio.to_thread(
            Prompt.ask,
            f"[blue]\\[{interruptor}][/blue] {input_description}",
            console=self._console,
        )

    async def _default_request_secret_input(
        self, _context: HookContext, interruptor: str, input_description: str
    ) -> str:
        return await asyncio.to_thread(
            Prompt.ask,
            f"[blue]\\[{interruptor}][/blue] {input_description}",
            console=self._console,
            password=True,
        )
