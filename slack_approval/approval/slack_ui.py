"""Slack UI builders for approval gate messages."""

from slack_approval.config import APPROVE_ACTION_ID, REJECT_ACTION_ID, RunContext

from .payload import MessagePayload
from .request import ApprovalRequest, ApprovalStatus


def user_mention(user_id: str) -> str:
    return f"<@{user_id}>"


def _section(text: str) -> dict:
    return {
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": text,
        },
    }


def build_status_block(request: ApprovalRequest) -> dict:
    """Build the status line for the threaded reply.

    Group mentions are listed before the remaining individual approvers.

    Args:
        request: Current approval state

    Returns:
        A single Slack section block
    """
    remaining = [*request.group_mentions, *(user_mention(u) for u in request.outstanding)]
    approvers = ""
    if request.confirmed:
        approvers = f"Approvers: {', '.join(user_mention(u) for u in request.confirmed)} "

    return _section(
        f"*Required Approvers Count:* {request.required_count}\n"
        f"*Remaining Approvers:* {', '.join(remaining)}\n"
        f"{approvers}\n"
    )


def build_action_block(request: ApprovalRequest) -> dict:
    """Build the approve/reject buttons, or the approved notice once satisfied.

    Both buttons carry the run's correlation token so that buttons left
    over from another run attempt are ignored.

    Args:
        request: Current approval state

    Returns:
        A single Slack block
    """
    if request.current_status() is ApprovalStatus.APPROVED:
        return _section("Approved :white_check_mark:")

    return {
        "type": "actions",
        "elements": [
            {
                "type": "button",
                "text": {
                    "type": "plain_text",
                    "text": "approve",
                    "emoji": True,
                },
                "style": "primary",
                "value": request.correlation_token,
                "action_id": APPROVE_ACTION_ID,
            },
            {
                "type": "button",
                "text": {
                    "type": "plain_text",
                    "text": "reject",
                    "emoji": True,
                },
                "style": "danger",
                "value": request.correlation_token,
                "action_id": REJECT_ACTION_ID,
            },
        ],
    }


def build_reply_blocks(request: ApprovalRequest) -> list[dict]:
    """Status line and action fragment, always sent together in one edit."""
    return [build_status_block(request), build_action_block(request)]


def build_rejected_blocks(request: ApprovalRequest, user_id: str) -> list[dict]:
    return [build_status_block(request), _section(f"Rejected by {user_mention(user_id)} :x:")]


def build_canceled_blocks(request: ApprovalRequest) -> list[dict]:
    return [
        build_status_block(request),
        _section("Canceled :radio_button: :leftwards_arrow_with_hook:"),
    ]


def build_default_request_payload(run: RunContext) -> MessagePayload:
    """Build the primary message used when no base payload is configured.

    Args:
        run: Pipeline run identity

    Returns:
        MessagePayload describing the run awaiting approval
    """
    fields = [
        ("GitHub Actor", run.actor),
        ("Repos", run.repository_url),
        ("Actions URL", run.actions_url),
        ("GITHUB_RUN_ID", run.run_id),
        ("Workflow", run.workflow),
        ("RunnerOS", run.runner_os),
    ]
    return MessagePayload(
        text="GitHub Actions Approval Request",
        blocks=[
            _section("GitHub Actions Approval Request"),
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}
                    for label, value in fields
                ],
            },
        ],
    )
