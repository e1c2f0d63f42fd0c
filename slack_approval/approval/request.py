"""Approval state for a single pipeline run.

Approvers move from ``outstanding`` to ``confirmed``; they are never added
or dropped otherwise, so ``len(confirmed) + len(outstanding)`` always equals
the number of resolved approvers.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .resolver import ResolvedApprovers, ensure_sufficient


class ApprovalStatus(Enum):
    """Derived status of an approval request."""

    AWAITING_APPROVAL = "awaitingApproval"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalStatus.AWAITING_APPROVAL


class ApproveResult(Enum):
    """Outcome of a single approve action."""

    NOT_ELIGIBLE = "notEligible"
    PENDING = "pending"
    SATISFIED = "satisfied"


@dataclass
class ApprovalRequest:
    """Run-scoped approval state.

    Mutated only through approve() and reject(). Callers that may receive
    actions concurrently must hold ``lock`` across the read-modify-write.
    """

    correlation_token: str
    required_count: int
    outstanding: list[str] = field(default_factory=list)
    confirmed: list[str] = field(default_factory=list)
    group_mentions: list[str] = field(default_factory=list)
    rejected_by: Optional[str] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @classmethod
    def from_resolved(
        cls,
        resolved: ResolvedApprovers,
        required_count: int,
        correlation_token: str,
    ) -> "ApprovalRequest":
        """Create a request from resolved approvers.

        Raises:
            ResolutionError: If required_count exceeds the resolved approvers
        """
        if required_count < 1:
            raise ValueError(f"required_count must be a positive integer, got {required_count}")
        ensure_sufficient(resolved, required_count)
        return cls(
            correlation_token=correlation_token,
            required_count=required_count,
            outstanding=list(dict.fromkeys(resolved.approvers)),
            group_mentions=list(resolved.group_mentions),
        )

    @property
    def total_approvers(self) -> int:
        return len(self.outstanding) + len(self.confirmed)

    def is_eligible(self, user_id: str) -> bool:
        """True if user_id may still act on this request."""
        return not self.current_status().is_terminal and user_id in self.outstanding

    def current_status(self) -> ApprovalStatus:
        if self.rejected_by is not None:
            return ApprovalStatus.REJECTED
        if len(self.confirmed) >= self.required_count:
            return ApprovalStatus.APPROVED
        return ApprovalStatus.AWAITING_APPROVAL

    def approve(self, user_id: str) -> ApproveResult:
        """Record an approval from user_id.

        Returns NOT_ELIGIBLE without changing state when user_id is not an
        outstanding approver or the request is already terminal.
        """
        if not self.is_eligible(user_id):
            return ApproveResult.NOT_ELIGIBLE

        self.outstanding.remove(user_id)
        self.confirmed.append(user_id)

        if len(self.confirmed) >= self.required_count:
            return ApproveResult.SATISFIED
        return ApproveResult.PENDING

    def reject(self, user_id: str) -> ApprovalStatus:
        """Reject the request.

        A single rejection ends a request that is awaiting approval, however
        many approvals it already has. Terminal requests are left unchanged
        and their status is returned.
        """
        if not self.current_status().is_terminal:
            self.rejected_by = user_id
        return self.current_status()
