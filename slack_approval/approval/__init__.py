"""Approval gate state, rendering, and termination."""

from .errors import ApprovalError, PayloadError, ResolutionError
from .payload import MessagePayload, parse_payload
from .request import ApprovalRequest, ApprovalStatus, ApproveResult
from .resolver import ResolvedApprovers, resolve_approvers, slack_usergroup_lookup
from .termination import Outcome, TerminationController
