"""Message payloads for the primary approval message."""

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from .errors import PayloadError


class MessagePayload(BaseModel):
    """A Slack message body: fallback text and/or Block Kit blocks.

    Payloads are used wholesale. A configured payload with content replaces
    the default entirely; fields are never merged across payloads.
    """

    text: Optional[str] = None
    blocks: Optional[list[dict[str, Any]]] = None

    def has_content(self) -> bool:
        return bool(self.text) or bool(self.blocks)

    def as_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for chat_postMessage / chat_update."""
        kwargs: dict[str, Any] = {}
        if self.text is not None:
            kwargs["text"] = self.text
        if self.blocks is not None:
            kwargs["blocks"] = self.blocks
        return kwargs

    @staticmethod
    def choose(primary: "MessagePayload", fallback: "MessagePayload") -> "MessagePayload":
        """Return primary if it has content, otherwise fallback."""
        return primary if primary.has_content() else fallback


def parse_payload(raw: Optional[str], name: str = "payload") -> MessagePayload:
    """Parse a payload input into a MessagePayload.

    Multi-line inputs are joined line by line before parsing. Empty input
    yields an empty payload.

    Args:
        raw: The raw input string
        name: Input name used in error messages

    Returns:
        The parsed MessagePayload

    Raises:
        PayloadError: If the input is not a JSON object with valid fields
    """
    if raw is None:
        return MessagePayload()

    joined = "".join(line.strip() for line in raw.splitlines())
    if not joined:
        return MessagePayload()

    try:
        parsed = json.loads(joined)
    except json.JSONDecodeError as e:
        raise PayloadError(name, f"Invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise PayloadError(name, "Expected a JSON object")

    try:
        return MessagePayload.model_validate(
            {k: parsed[k] for k in ("text", "blocks") if k in parsed}
        )
    except ValidationError as e:
        raise PayloadError(name, str(e)) from e
