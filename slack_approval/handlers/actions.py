"""Interactive component action handlers for the approve/reject buttons."""

from typing import Optional

from loguru import logger
from slack_bolt.async_app import AsyncApp

from slack_approval.approval.errors import SLACK_CALL_ERRORS
from slack_approval.approval.request import ApproveResult
from slack_approval.approval.slack_ui import build_rejected_blocks, build_reply_blocks
from slack_approval.approval.termination import Outcome
from slack_approval.config import APPROVE_ACTION_ID, REJECT_ACTION_ID

from .base import ActionContext, HandlerDependencies


def _accept_action(body: dict, action: dict, deps: HandlerDependencies) -> Optional[ActionContext]:
    """Return the action context if this action belongs to the running gate.

    Parameters
    ----------
    body : dict
        Slack action body.
    action : dict
        Action data carrying the correlation token as its value.
    deps : HandlerDependencies
        Shared handler dependencies.

    Returns
    -------
    ActionContext | None
        None for non-button actions, foreign correlation tokens, or a gate
        that has already finished.
    """
    try:
        ctx = ActionContext.from_action(body, action)
    except KeyError as e:
        logger.error(f"Missing required field in action body: {e}")
        return None

    if ctx.action_type != "button":
        return None
    if ctx.value != deps.request.correlation_token:
        logger.debug(f"Ignoring {ctx.action_id} from {ctx.user_id}: correlation token mismatch")
        return None
    if deps.controller.finished:
        return None
    return ctx


async def handle_approve_action(body: dict, action: dict, client, deps: HandlerDependencies) -> None:
    """Apply an approve click and refresh the reply message."""
    ctx = _accept_action(body, action, deps)
    if ctx is None:
        return

    request = deps.request
    async with request.lock:
        if deps.controller.finished:
            return

        result = request.approve(ctx.user_id)
        if result is ApproveResult.NOT_ELIGIBLE:
            logger.info(f"Ignoring approval from {ctx.user_id}: not a remaining approver")
            return

        logger.info(
            f"Approved by {ctx.user_id} ({len(request.confirmed)}/{request.required_count})"
        )

        if result is ApproveResult.SATISFIED:
            await deps.controller.finish(Outcome.APPROVED, build_reply_blocks(request))
            return

        try:
            await client.chat_update(
                channel=ctx.channel_id or deps.controller.channel_id,
                ts=deps.controller.reply_ts,
                text="",
                blocks=build_reply_blocks(request),
            )
        except SLACK_CALL_ERRORS as e:
            logger.error(f"Failed to update reply message: {type(e).__name__}: {e}")


async def handle_reject_action(body: dict, action: dict, client, deps: HandlerDependencies) -> None:
    """Apply a reject click; a single eligible rejection ends the gate."""
    ctx = _accept_action(body, action, deps)
    if ctx is None:
        return

    request = deps.request
    async with request.lock:
        if deps.controller.finished:
            return

        if not request.is_eligible(ctx.user_id):
            logger.info(f"Ignoring rejection from {ctx.user_id}: not a remaining approver")
            return

        request.reject(ctx.user_id)
        logger.info(f"Rejected by {ctx.user_id}")
        await deps.controller.finish(
            Outcome.REJECTED, build_rejected_blocks(request, ctx.user_id)
        )


def register_actions(app: AsyncApp, deps: HandlerDependencies) -> None:
    """Register the approve/reject button handlers.

    Parameters
    ----------
    app : AsyncApp
        The Slack Bolt async app.
    deps : HandlerDependencies
        Shared handler dependencies.
    """

    @app.action(APPROVE_ACTION_ID)
    async def handle_approve(ack, action, body, client):
        """Handle approve button click."""
        await ack()
        await handle_approve_action(body, action, client, deps)

    @app.action(REJECT_ACTION_ID)
    async def handle_reject(ack, action, body, client):
        """Handle reject button click."""
        await ack()
        await handle_reject_action(body, action, client, deps)
