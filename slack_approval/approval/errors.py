"""Errors raised by the approval gate."""

import asyncio

import aiohttp
from slack_sdk.errors import SlackApiError

# Failures of a single Slack Web API call: API errors and transport errors
SLACK_CALL_ERRORS = (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError, TimeoutError, OSError)


class ApprovalError(Exception):
    """Base class for errors that stop the gate before any message is posted."""


class ResolutionError(ApprovalError):
    """Not enough approvers to ever satisfy the required approval count."""

    def __init__(self, have: int, need: int):
        self.have = have
        self.need = need
        super().__init__(
            f"Insufficient approvers. Minimum required approvers not met. "
            f"(Have: {have}, Need: {need})"
        )


class PayloadError(ApprovalError):
    """A configured message payload is not a valid JSON object."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Invalid {name}: {reason}")
