"""Pytest fixtures for Slack approval gate tests."""

import os
from unittest.mock import AsyncMock

import pytest
from slack_sdk.web.async_client import AsyncWebClient

from slack_approval.approval.payload import MessagePayload
from slack_approval.approval.request import ApprovalRequest
from slack_approval.approval.termination import TerminationController

TOKEN = "octo/hello-world-Deploy-1001-7-1"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run live integration tests that require Slack credentials",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: marks tests as live integration tests (require Slack credentials)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --live flag is passed."""
    if config.getoption("--live"):
        return

    skip_live = pytest.mark.skip(reason="Need --live option to run live tests")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def request_state() -> ApprovalRequest:
    """Request needing two of three approvers."""
    return ApprovalRequest(
        correlation_token=TOKEN,
        required_count=2,
        outstanding=["U1", "U2", "U3"],
    )


@pytest.fixture
def mock_client():
    """Slack client double recording chat calls."""
    client = AsyncMock()
    client.chat_postMessage = AsyncMock(side_effect=[{"ts": "100.001"}, {"ts": "100.002"}])
    client.chat_update = AsyncMock(return_value={"ok": True})
    return client


@pytest.fixture
def controller(mock_client) -> TerminationController:
    return TerminationController(
        client=mock_client,
        channel_id="C123",
        main_ts="100.001",
        reply_ts="100.002",
        request_payload=MessagePayload(text="Deploy?"),
        success_payload=MessagePayload(text="Deployed"),
        fail_payload=MessagePayload(),
    )


@pytest.fixture
def action_body():
    """Factory for (body, action) pairs shaped like a Slack block_actions payload."""

    def make(user_id: str, value: str = TOKEN, action_id: str = "slack-approval-approve"):
        action = {
            "type": "button",
            "action_id": action_id,
            "value": value,
        }
        body = {
            "type": "block_actions",
            "user": {"id": user_id},
            "channel": {"id": "C123"},
            "message": {"ts": "100.002"},
            "actions": [action],
        }
        return body, action

    return make


@pytest.fixture
def slack_bot_token() -> str:
    """Get Slack bot token from environment."""
    token = os.environ.get("SLACK_BOT_TOKEN", "")
    if not token:
        pytest.skip("SLACK_BOT_TOKEN environment variable not set")
    return token


@pytest.fixture
def slack_test_channel() -> str:
    """Get test channel ID from environment."""
    channel = os.environ.get("SLACK_TEST_CHANNEL", "")
    if not channel:
        pytest.skip("SLACK_TEST_CHANNEL environment variable not set")
    return channel


@pytest.fixture
def slack_client(slack_bot_token: str) -> AsyncWebClient:
    """Create an async Slack WebClient for live tests."""
    return AsyncWebClient(token=slack_bot_token)
