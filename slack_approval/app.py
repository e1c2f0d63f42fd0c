"""
Slack Approval Gate - Main Application Entry Point

Posts an approval request for a pipeline run to a Slack channel, waits for
the required approvers to respond, and exits 0 when approved or 1 when
rejected or canceled.
"""

import asyncio
import signal
import sys
from typing import Optional

from loguru import logger
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from slack_approval.approval.errors import SLACK_CALL_ERRORS, ApprovalError
from slack_approval.approval.payload import MessagePayload, parse_payload
from slack_approval.approval.request import ApprovalRequest
from slack_approval.approval.resolver import resolve_approvers, slack_usergroup_lookup
from slack_approval.approval.slack_ui import (
    build_canceled_blocks,
    build_default_request_payload,
    build_reply_blocks,
)
from slack_approval.approval.termination import TerminationController
from slack_approval.config import Config, config
from slack_approval.github import set_failed, set_output
from slack_approval.handlers import HandlerDependencies, register_actions


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


async def post_request_messages(
    client: AsyncWebClient,
    channel_id: str,
    payload: MessagePayload,
    request: ApprovalRequest,
    base_message_ts: Optional[str] = None,
) -> tuple[str, str]:
    """
    Post the primary request message and its threaded status reply.

    Args:
        client: Slack WebClient
        channel_id: Slack channel ID
        payload: Primary message payload
        request: Approval state rendered into the reply
        base_message_ts: Existing message to update instead of posting anew

    Returns:
        (main_ts, reply_ts)

    Raises:
        SlackApiError, aiohttp.ClientError: If either message cannot be posted
    """
    if base_message_ts:
        main_message = await client.chat_update(
            channel=channel_id,
            ts=base_message_ts,
            **payload.as_kwargs(),
        )
    else:
        main_message = await client.chat_postMessage(
            channel=channel_id,
            **payload.as_kwargs(),
        )
    main_ts = main_message["ts"]

    reply_message = await client.chat_postMessage(
        channel=channel_id,
        thread_ts=main_ts,
        text="",
        blocks=build_reply_blocks(request),
    )
    return main_ts, reply_message["ts"]


def install_signal_handlers(
    controller: TerminationController,
    request: ApprovalRequest,
) -> set[asyncio.Task]:
    """Cancel the approval gate on SIGTERM/SIGINT (and SIGBREAK where available)."""
    loop = asyncio.get_running_loop()
    tasks: set[asyncio.Task] = set()

    def signal_handler(signame: str):
        logger.info(f"Received {signame}, canceling approval request")
        task = loop.create_task(controller.cancel(build_canceled_blocks(request)))
        tasks.add(task)
        task.add_done_callback(tasks.discard)

    for signame in ("SIGTERM", "SIGINT", "SIGBREAK"):
        sig = getattr(signal, signame, None)
        if sig is None:
            continue
        try:
            loop.add_signal_handler(sig, signal_handler, signame)
        except NotImplementedError:
            # Event loops on Windows do not support add_signal_handler
            signal.signal(sig, lambda *_args, name=signame: loop.call_soon_threadsafe(signal_handler, name))
    return tasks


async def main(settings: Optional[Config] = None) -> int:
    """Run the approval gate and return the process exit code."""
    settings = settings or config
    configure_logging(settings.LOG_LEVEL)

    errors = settings.validate_required()
    if errors:
        for error in errors:
            set_failed(error)
        return 1

    inputs = settings.inputs
    try:
        base_payload = parse_payload(inputs.base_message_payload, "baseMessagePayload")
        success_payload = parse_payload(inputs.success_message_payload, "successMessagePayload")
        fail_payload = parse_payload(inputs.fail_message_payload, "failMessagePayload")
    except ApprovalError as e:
        set_failed(str(e))
        return 1

    client = AsyncWebClient(token=settings.SLACK_BOT_TOKEN)
    channel_id = settings.SLACK_CHANNEL_ID

    resolved = await resolve_approvers(
        settings.approver_references, slack_usergroup_lookup(client)
    )
    try:
        request = ApprovalRequest.from_resolved(
            resolved,
            required_count=inputs.minimum_approval_count,
            correlation_token=settings.run.correlation_token,
        )
    except ApprovalError as e:
        set_failed(f"Error: {e}")
        return 1

    logger.info(
        f"Approval requires {request.required_count} of {request.total_approvers} approver(s)"
    )

    request_payload = MessagePayload.choose(
        base_payload, build_default_request_payload(settings.run)
    )
    try:
        main_ts, reply_ts = await post_request_messages(
            client, channel_id, request_payload, request, inputs.base_message_ts
        )
    except SLACK_CALL_ERRORS as e:
        set_failed(f"Failed to post approval request: {e}")
        return 1

    set_output("mainMessageTs", main_ts, settings.GITHUB_OUTPUT or None)
    set_output("replyMessageTs", reply_ts, settings.GITHUB_OUTPUT or None)

    controller = TerminationController(
        client=client,
        channel_id=channel_id,
        main_ts=main_ts,
        reply_ts=reply_ts,
        request_payload=request_payload,
        success_payload=success_payload,
        fail_payload=fail_payload,
    )

    app = AsyncApp(
        token=settings.SLACK_BOT_TOKEN,
        signing_secret=settings.SLACK_SIGNING_SECRET,
    )
    register_actions(app, HandlerDependencies(request=request, controller=controller))

    handler = AsyncSocketModeHandler(app, settings.SLACK_APP_TOKEN)
    install_signal_handlers(controller, request)

    try:
        await handler.connect_async()
        logger.info("Waiting Approval reaction.....")
        exit_code = await controller.wait()
    finally:
        await handler.close_async()

    logger.info(f"Exiting with code {exit_code}")
    return exit_code

