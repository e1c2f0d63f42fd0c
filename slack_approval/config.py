import functools
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APPROVE_ACTION_ID = "slack-approval-approve"
REJECT_ACTION_ID = "slack-approval-reject"


class RunContext(BaseModel):
    """Identity of the pipeline run requesting approval."""

    server_url: str = ""
    repository: str = ""
    workflow: str = ""
    run_id: str = ""
    run_number: str = ""
    run_attempt: str = ""
    actor: str = ""
    runner_os: str = ""

    @property
    def correlation_token(self) -> str:
        """Token shared by the buttons of this run attempt.

        Actions carrying any other value belong to a different run (or an
        earlier attempt of this one) and are ignored.
        """
        return (
            f"{self.repository}-{self.workflow}-{self.run_id}"
            f"-{self.run_number}-{self.run_attempt}"
        )

    @property
    def repository_url(self) -> str:
        return f"{self.server_url}/{self.repository}"

    @property
    def actions_url(self) -> str:
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"


class ApprovalInputs(BaseModel):
    """Action inputs controlling the approval gate."""

    minimum_approval_count: int = 1
    base_message_ts: Optional[str] = None
    base_message_payload: str = ""
    success_message_payload: str = ""
    fail_message_payload: str = ""

    @field_validator("minimum_approval_count")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Ensure the approval count is a positive integer."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer, got {v}")
        return v


class Config(BaseSettings):
    """
    Approval gate configuration loaded from the action environment.

    Priority (highest to lowest):
    1. Environment variables (GitHub passes action inputs as INPUT_*)
    2. .env file
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Slack configuration
    SLACK_BOT_TOKEN: str = ""
    SLACK_APP_TOKEN: str = ""
    SLACK_SIGNING_SECRET: str = ""
    SLACK_CHANNEL_ID: str = ""

    # Action inputs
    APPROVERS: str = Field(default="", alias="INPUT_APPROVERS")
    MINIMUM_APPROVAL_COUNT_STR: str = Field(default="", alias="INPUT_MINIMUMAPPROVALCOUNT")
    BASE_MESSAGE_TS: str = Field(default="", alias="INPUT_BASEMESSAGETS")
    BASE_MESSAGE_PAYLOAD: str = Field(default="", alias="INPUT_BASEMESSAGEPAYLOAD")
    SUCCESS_MESSAGE_PAYLOAD: str = Field(default="", alias="INPUT_SUCCESSMESSAGEPAYLOAD")
    FAIL_MESSAGE_PAYLOAD: str = Field(default="", alias="INPUT_FAILMESSAGEPAYLOAD")

    # GitHub Actions runtime
    GITHUB_SERVER_URL: str = ""
    GITHUB_REPOSITORY: str = ""
    GITHUB_WORKFLOW: str = ""
    GITHUB_RUN_ID: str = ""
    GITHUB_RUN_NUMBER: str = ""
    GITHUB_RUN_ATTEMPT: str = ""
    GITHUB_ACTOR: str = ""
    GITHUB_OUTPUT: str = ""
    RUNNER_OS: str = ""

    LOG_LEVEL: str = "INFO"

    @property
    def MINIMUM_APPROVAL_COUNT(self) -> int:
        """Parse the minimum approval count, falling back to 1 when unset or invalid."""
        try:
            count = int(self.MINIMUM_APPROVAL_COUNT_STR.strip())
        except ValueError:
            return 1
        return count if count > 0 else 1

    @property
    def approver_references(self) -> list[str]:
        """Split APPROVERS into raw references, dropping empty entries."""
        return [a.strip() for a in self.APPROVERS.split(",") if a.strip()]

    @functools.cached_property
    def inputs(self) -> ApprovalInputs:
        """Build ApprovalInputs from the INPUT_* environment variables."""
        return ApprovalInputs(
            minimum_approval_count=self.MINIMUM_APPROVAL_COUNT,
            base_message_ts=self.BASE_MESSAGE_TS.strip() or None,
            base_message_payload=self.BASE_MESSAGE_PAYLOAD,
            success_message_payload=self.SUCCESS_MESSAGE_PAYLOAD,
            fail_message_payload=self.FAIL_MESSAGE_PAYLOAD,
        )

    @functools.cached_property
    def run(self) -> RunContext:
        """Build RunContext from the GITHUB_* environment variables."""
        return RunContext(
            server_url=self.GITHUB_SERVER_URL,
            repository=self.GITHUB_REPOSITORY,
            workflow=self.GITHUB_WORKFLOW,
            run_id=self.GITHUB_RUN_ID,
            run_number=self.GITHUB_RUN_NUMBER,
            run_attempt=self.GITHUB_RUN_ATTEMPT,
            actor=self.GITHUB_ACTOR,
            runner_os=self.RUNNER_OS,
        )

    def validate_required(self) -> list[str]:
        """Validate required configuration."""
        errors = []
        if not self.SLACK_BOT_TOKEN:
            errors.append("SLACK_BOT_TOKEN is required")
        if not self.SLACK_APP_TOKEN:
            errors.append("SLACK_APP_TOKEN is required (for Socket Mode)")
        if not self.SLACK_SIGNING_SECRET:
            errors.append("SLACK_SIGNING_SECRET is required")
        if not self.SLACK_CHANNEL_ID:
            errors.append("SLACK_CHANNEL_ID is required")
        if not self.approver_references:
            errors.append("Input required and not supplied: approvers")
        return errors


config = Config()
