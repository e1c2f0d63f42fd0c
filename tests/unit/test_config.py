"""Unit tests for configuration module."""

import os
from unittest import mock

import pytest
from pydantic import ValidationError

from slack_approval.config import ApprovalInputs, Config, RunContext

ACTION_ENV = {
    "SLACK_BOT_TOKEN": "xoxb-test",
    "SLACK_APP_TOKEN": "xapp-test",
    "SLACK_SIGNING_SECRET": "secret",
    "SLACK_CHANNEL_ID": "C123",
    "INPUT_APPROVERS": "U1, <@U2>,,S1 ",
    "INPUT_MINIMUMAPPROVALCOUNT": "2",
    "INPUT_BASEMESSAGETS": "",
    "GITHUB_SERVER_URL": "https://github.com",
    "GITHUB_REPOSITORY": "octo/hello-world",
    "GITHUB_WORKFLOW": "Deploy",
    "GITHUB_RUN_ID": "1001",
    "GITHUB_RUN_NUMBER": "7",
    "GITHUB_RUN_ATTEMPT": "1",
}


def _config(**overrides) -> Config:
    env = {**ACTION_ENV, **overrides}
    with mock.patch.dict(os.environ, env, clear=True):
        return Config(_env_file=None)


class TestRunContext:
    """Tests for RunContext."""

    def test_correlation_token(self):
        run = RunContext(
            repository="octo/hello-world",
            workflow="Deploy",
            run_id="1001",
            run_number="7",
            run_attempt="2",
        )

        assert run.correlation_token == "octo/hello-world-Deploy-1001-7-2"

    def test_correlation_token_differs_per_attempt(self):
        first = RunContext(repository="r", workflow="w", run_id="1", run_number="1", run_attempt="1")
        second = first.model_copy(update={"run_attempt": "2"})

        assert first.correlation_token != second.correlation_token

    def test_urls(self):
        run = RunContext(server_url="https://github.com", repository="octo/hello-world", run_id="5")

        assert run.repository_url == "https://github.com/octo/hello-world"
        assert run.actions_url == "https://github.com/octo/hello-world/actions/runs/5"


class TestApprovalInputs:
    """Tests for ApprovalInputs."""

    def test_default_values(self):
        inputs = ApprovalInputs()

        assert inputs.minimum_approval_count == 1
        assert inputs.base_message_ts is None

    def test_rejects_non_positive_count(self):
        with pytest.raises(ValidationError):
            ApprovalInputs(minimum_approval_count=0)


class TestConfig:
    """Tests for Config loaded from the action environment."""

    def test_reads_action_inputs(self):
        config = _config()

        assert config.approver_references == ["U1", "<@U2>", "S1"]
        assert config.inputs.minimum_approval_count == 2
        assert config.inputs.base_message_ts is None
        assert config.run.correlation_token == "octo/hello-world-Deploy-1001-7-1"
        assert config.validate_required() == []

    @pytest.mark.parametrize("raw", ["", "abc", "0", "-3"])
    def test_minimum_approval_count_falls_back_to_one(self, raw):
        assert _config(INPUT_MINIMUMAPPROVALCOUNT=raw).MINIMUM_APPROVAL_COUNT == 1

    def test_base_message_ts(self):
        config = _config(INPUT_BASEMESSAGETS=" 1700000000.000100 ")

        assert config.inputs.base_message_ts == "1700000000.000100"

    def test_validate_required(self):
        config = _config(SLACK_BOT_TOKEN="", SLACK_CHANNEL_ID="", INPUT_APPROVERS=" , ")

        errors = config.validate_required()

        assert "SLACK_BOT_TOKEN is required" in errors
        assert "SLACK_CHANNEL_ID is required" in errors
        assert "Input required and not supplied: approvers" in errors
        assert len(errors) == 3
