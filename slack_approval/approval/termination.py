"""Termination of the approval gate.

The first terminal outcome (full approval, a rejection, or a cancellation
signal) edits both messages to their final form and resolves the exit code
the driver waits on. Later triggers are no-ops.
"""

import asyncio
from enum import Enum
from typing import Optional

from loguru import logger
from slack_sdk.web.async_client import AsyncWebClient

from .errors import SLACK_CALL_ERRORS
from .payload import MessagePayload


class Outcome(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELED = "canceled"

    @property
    def exit_code(self) -> int:
        return 0 if self is Outcome.APPROVED else 1


class TerminationController:
    """Performs the final message edits exactly once and reports the exit code."""

    def __init__(
        self,
        client: AsyncWebClient,
        channel_id: str,
        main_ts: str,
        reply_ts: str,
        request_payload: MessagePayload,
        success_payload: Optional[MessagePayload] = None,
        fail_payload: Optional[MessagePayload] = None,
    ):
        self.client = client
        self.channel_id = channel_id
        self.main_ts = main_ts
        self.reply_ts = reply_ts
        self.request_payload = request_payload
        self.success_payload = success_payload or MessagePayload()
        self.fail_payload = fail_payload or MessagePayload()
        self._outcome: Optional[Outcome] = None
        self._done = asyncio.Event()

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def finished(self) -> bool:
        return self._outcome is not None

    def final_payload(self, outcome: Outcome) -> MessagePayload:
        """Select the primary message for an outcome.

        Approval uses the success payload, anything else the fail payload;
        either falls back to the request payload when empty.
        """
        configured = self.success_payload if outcome is Outcome.APPROVED else self.fail_payload
        return MessagePayload.choose(configured, self.request_payload)

    async def finish(self, outcome: Outcome, reply_blocks: list[dict]) -> bool:
        """Finish the approval gate with outcome.

        Args:
            outcome: The terminal outcome
            reply_blocks: Final blocks for the threaded reply

        Returns:
            True if this call terminated the gate, False if it had already
            been terminated
        """
        # Claimed before the first await so racing triggers see it
        if self._outcome is not None:
            logger.debug(f"Ignoring {outcome.value}: already {self._outcome.value}")
            return False
        self._outcome = outcome
        logger.info(f"Approval gate finished: {outcome.value}")

        try:
            await self._update(
                "primary message",
                ts=self.main_ts,
                **self.final_payload(outcome).as_kwargs(),
            )
            await self._update("reply message", ts=self.reply_ts, text="", blocks=reply_blocks)
        finally:
            self._done.set()
        return True

    async def cancel(self, reply_blocks: list[dict]) -> bool:
        """Finish as canceled (external signal)."""
        return await self.finish(Outcome.CANCELED, reply_blocks)

    async def wait(self) -> int:
        """Wait for the gate to finish and return the process exit code."""
        await self._done.wait()
        return self._outcome.exit_code

    async def _update(self, label: str, **kwargs) -> None:
        # Edit failures are logged only; approval state stays authoritative
        try:
            await self.client.chat_update(channel=self.channel_id, **kwargs)
        except SLACK_CALL_ERRORS as e:
            logger.error(f"Failed to update {label}: {type(e).__name__}: {e}")
