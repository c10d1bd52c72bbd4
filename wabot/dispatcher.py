"""Dispatcher — serializes webhook deliveries and routes each message.

All payloads go through one FIFO queue drained by a single, non-reentrant
loop, so handlers run strictly one at a time in submission order. This
is what lets the next-step map and the context store go without locks.
The price is that a slow handler holds up every payload behind it.

For each payload:
1. Drop it unless entry[0].changes[0].value carries metadata and messages[0].
2. Drop it unless metadata.phone_number_id matches this client's number id.
3. Mark the message read (best effort).
4. Candidates: persistent handlers, then the sender's next-step fallback
   and primary handler if an override is active, else every other
   registered handler.
5. Run the first candidate whose kind and filter match, then stop.
6. Remove the sender's override if its handler was the one that ran.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wabot.context import ContextStore, UserContext
from wabot.handlers import HandlerAction, UpdateHandler, text_handler
from wabot.helpers import keys_exist
from wabot.models import QueueStatus
from wabot.update import Update

if TYPE_CHECKING:
    from wabot.client import WhatsApp

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_PATTERN = re.compile(r"^(end|stop|cancel)$", re.IGNORECASE)

ErrorHook = Callable[[Exception, dict[str, Any]], Awaitable[None] | None]


@dataclass(frozen=True)
class NextStepConfig:
    """A single-use handler override for one user."""

    handler: UpdateHandler
    fallback_handler: UpdateHandler | None = None

    def owns(self, handler: UpdateHandler) -> bool:
        return handler is self.handler or handler is self.fallback_handler


class Dispatcher:
    """Queues webhook payloads and routes each message to one handler."""

    def __init__(
        self,
        bot: WhatsApp,
        mark_as_read: bool = True,
        context_store: ContextStore | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        self.bot = bot
        self.mark_as_read = mark_as_read
        self.context_store = context_store if context_store is not None else ContextStore()
        self.on_error = on_error
        self._queue: deque[tuple[dict[str, Any], asyncio.Future[None]]] = deque()
        self._drain_task: asyncio.Task[None] | None = None
        self._handlers: list[UpdateHandler] = []
        self._next_steps: dict[str, NextStepConfig] = {}

    # --- Queue ---

    async def process_update(self, payload: dict[str, Any]) -> None:
        """Queue a webhook payload and wait until it has been processed.

        The queue is drained by a task of its own, so cancelling a caller
        (a timeout, a dropped web request) only stops that caller's wait.
        Its payload and everything queued behind it are still processed.
        """
        done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._queue.append((payload, done))
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.create_task(self._drain())
        await asyncio.shield(done)

    async def _drain(self) -> None:
        done: asyncio.Future[None] | None = None
        try:
            while self._queue:
                payload, done = self._queue.popleft()
                try:
                    await self._process_payload(payload)
                except Exception as exc:
                    await self._handle_failure(exc, payload, done)
                else:
                    if not done.done():
                        done.set_result(None)
        finally:
            # Only reached with work left when the drain task itself is
            # cancelled, e.g. on event loop shutdown
            if done is not None and not done.done():
                done.cancel()
            while self._queue:
                _, pending = self._queue.popleft()
                pending.cancel()

    async def _handle_failure(
        self, exc: Exception, payload: dict[str, Any], done: asyncio.Future[None],
    ) -> None:
        logger.exception("Failed to process webhook payload")
        if self.on_error is None:
            if not done.done():
                done.set_exception(exc)
            return
        try:
            result = self.on_error(exc, payload)
            if inspect.isawaitable(result):
                await result
        except Exception as hook_exc:
            if not done.done():
                done.set_exception(hook_exc)
        else:
            if not done.done():
                done.set_result(None)

    def get_queue_status(self) -> QueueStatus:
        processing = self._drain_task is not None and not self._drain_task.done()
        return QueueStatus(size=len(self._queue), is_processing=processing)

    # --- Routing ---

    async def _process_payload(self, payload: dict[str, Any]) -> None:
        if not keys_exist(payload, "entry", 0, "changes", 0, "value"):
            logger.debug("Dropping payload without entry/changes/value")
            return

        value: dict[str, Any] = payload["entry"][0]["changes"][0]["value"]
        if not keys_exist(value, "metadata", "phone_number_id"):
            logger.debug("Dropping payload without metadata.phone_number_id")
            return
        if str(value["metadata"]["phone_number_id"]) != str(self.bot.id):
            logger.debug(
                "Dropping payload for phone number id %s",
                value["metadata"]["phone_number_id"],
            )
            return
        if not keys_exist(value, "messages", 0):
            logger.debug("Dropping payload without messages")
            return

        message: dict[str, Any] = value["messages"][0]
        contacts = value.get("contacts") or [{}]
        if (
            not isinstance(message, dict)
            or not isinstance(contacts, list)
            or not isinstance(contacts[0], dict)
        ):
            logger.debug("Dropping payload with malformed messages or contacts")
            return

        if self.mark_as_read:
            try:
                await self.bot.mark_as_read(message)
            except Exception as exc:
                logger.debug("Could not mark message %s as read: %s", message.get("id"), exc)

        sender = Update(self.bot, value).user_phone_number
        for handler in self._candidates(sender):
            if await self._check_and_run(handler, value, message):
                config = self._next_steps.get(sender)
                if config is not None and config.owns(handler):
                    del self._next_steps[sender]
                return

    def _candidates(self, phone_number: str) -> list[UpdateHandler]:
        persistent = [h for h in self._handlers if h.persistent]
        config = self._next_steps.get(phone_number)
        if config is None:
            return persistent + [h for h in self._handlers if not h.persistent]

        overrides = [config.handler]
        if config.fallback_handler is not None:
            overrides.insert(0, config.fallback_handler)
        return persistent + overrides

    async def _check_and_run(
        self,
        handler: UpdateHandler,
        value: dict[str, Any],
        message: dict[str, Any],
    ) -> bool:
        if handler.message_type.value != message.get("type"):
            return False

        data = handler.extract_data(message)
        if not handler.filter_check(data.message_text):
            return False

        update = Update(self.bot, value)
        update.apply(data)
        if handler.context:
            context = UserContext(update.user_phone_number, self.context_store)
            await handler.run(update, context)
        else:
            await handler.run(update)
        return True

    # --- Registration ---

    def register_handler(self, handler: UpdateHandler) -> int:
        """Append a handler and return its position. Order breaks ties."""
        self._handlers.append(handler)
        return len(self._handlers) - 1

    def get_handlers(self) -> list[UpdateHandler]:
        return list(self._handlers)

    def clear_handlers(self) -> None:
        self._handlers = []

    def set_next_step(
        self,
        update: Update,
        handler: UpdateHandler,
        fallback: HandlerAction | None = None,
        fallback_pattern: str | re.Pattern[str] = DEFAULT_FALLBACK_PATTERN,
    ) -> None:
        """Route the sender's next message to handler, once.

        With a fallback callback, a text message matching fallback_pattern
        (by default end/stop/cancel in any case) runs the fallback instead.
        Replaces any override already set for the sender.
        """
        fallback_handler = None
        if fallback is not None:
            fallback_handler = text_handler(fallback, regex=fallback_pattern)
        self._next_steps[update.user_phone_number] = NextStepConfig(
            handler=handler, fallback_handler=fallback_handler,
        )

    def clear_next_step(self, phone_number: str) -> None:
        self._next_steps.pop(phone_number, None)

    def get_next_step(self, phone_number: str) -> NextStepConfig | None:
        return self._next_steps.get(phone_number)
