"""Resolve approver references into individual Slack user IDs.

References may name a user (``U123``, ``<@U123>``) or a user group
(``S123``, ``<!subteam^S123>``, ``<@subteam^S123>``). Groups are expanded
into their members via the Slack API; the group mentions are kept for
display so the whole group is notified.
"""

import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable

from loguru import logger
from slack_sdk.web.async_client import AsyncWebClient

from .errors import ResolutionError

GroupLookup = Callable[[str], Awaitable[list[str]]]

# Checked in order: group forms take priority over user forms. Bare IDs are
# uppercase in Slack, so only mentions match case-insensitively.
GROUP_MENTION_PATTERN = re.compile(r"^<[@!]subteam\^(S[A-Z0-9]+)(?:\|[^>]*)?>$", re.IGNORECASE)
GROUP_ID_PATTERN = re.compile(r"^(S[A-Z0-9]+)$")
USER_MENTION_PATTERN = re.compile(r"^<@([UW][A-Z0-9]+)(?:\|[^>]*)?>$", re.IGNORECASE)
USER_ID_PATTERN = re.compile(r"^([UW][A-Z0-9]+)$")


@dataclass
class ResolvedApprovers:
    """Deduplicated approver IDs plus display mentions for expanded groups."""

    approvers: list[str] = field(default_factory=list)
    group_mentions: list[str] = field(default_factory=list)


def group_mention(group_id: str) -> str:
    return f"<!subteam^{group_id}>"


def classify_reference(reference: str) -> tuple[str, str]:
    """Classify a single approver reference.

    Args:
        reference: Raw reference, already trimmed

    Returns:
        ("group", group_id) or ("user", user_id). Unrecognized references
        are treated as literal user IDs.
    """
    for pattern in (GROUP_MENTION_PATTERN, GROUP_ID_PATTERN):
        match = pattern.match(reference)
        if match:
            return "group", match.group(1)

    for pattern in (USER_MENTION_PATTERN, USER_ID_PATTERN):
        match = pattern.match(reference)
        if match:
            return "user", match.group(1)

    return "user", reference


def slack_usergroup_lookup(client: AsyncWebClient) -> GroupLookup:
    """Build a group lookup backed by usergroups.users.list."""

    async def lookup(group_id: str) -> list[str]:
        response = await client.usergroups_users_list(usergroup=group_id)
        users = response.get("users")
        if not response.get("ok") or not isinstance(users, list):
            return []
        return list(users)

    return lookup


async def _lookup_members(lookup: GroupLookup, group_id: str) -> list[str]:
    try:
        return await lookup(group_id)
    except Exception as e:
        logger.error(f"Failed to fetch users for user group {group_id}: {type(e).__name__}: {e}")
        return []


async def resolve_approvers(
    references: Iterable[str],
    lookup: GroupLookup,
) -> ResolvedApprovers:
    """Resolve approver references into a deduplicated, ordered list of user IDs.

    Directly listed users come first in order of first appearance, followed
    by members of each referenced group. A group whose lookup fails
    contributes no members.

    Args:
        references: Raw approver references
        lookup: Async callable returning the member IDs of a user group

    Returns:
        ResolvedApprovers with the approver IDs and group display mentions
    """
    resolved = ResolvedApprovers()
    group_ids: list[str] = []

    for entry in references:
        reference = entry.strip()
        if not reference:
            continue

        kind, identifier = classify_reference(reference)
        if kind == "group":
            if identifier not in group_ids:
                group_ids.append(identifier)
                resolved.group_mentions.append(group_mention(identifier))
        elif identifier not in resolved.approvers:
            resolved.approvers.append(identifier)

    for group_id in group_ids:
        members = await _lookup_members(lookup, group_id)
        logger.debug(f"User group {group_id} has {len(members)} member(s)")
        for user_id in members:
            if user_id not in resolved.approvers:
                resolved.approvers.append(user_id)

    return resolved


def ensure_sufficient(resolved: ResolvedApprovers, required_count: int) -> None:
    """Raise ResolutionError if required_count can never be reached.

    Must be called once, after all group expansion.
    """
    if required_count > len(resolved.approvers):
        raise ResolutionError(have=len(resolved.approvers), need=required_count)
