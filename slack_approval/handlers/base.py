"""Base infrastructure for Slack interaction handlers."""

from dataclasses import dataclass
from typing import Optional

from slack_approval.approval.request import ApprovalRequest
from slack_approval.approval.termination import TerminationController


@dataclass
class ActionContext:
    """Fields of an inbound block action used by the approval gate."""

    user_id: str
    action_id: str
    action_type: str
    value: Optional[str]
    channel_id: Optional[str] = None

    @classmethod
    def from_action(cls, body: dict, action: dict) -> "ActionContext":
        """Create context from a Slack block action payload.

        Parameters
        ----------
        body : dict
            The interaction payload from Slack.
        action : dict
            The action that triggered this handler.

        Returns
        -------
        ActionContext
            Populated context object.

        Raises
        ------
        KeyError
            If the payload has no user.
        """
        return cls(
            user_id=body["user"]["id"],
            action_id=action.get("action_id", ""),
            action_type=action.get("type", ""),
            value=action.get("value"),
            channel_id=(body.get("channel") or {}).get("id"),
        )


@dataclass
class HandlerDependencies:
    """Container for handler dependencies.

    Provides access to the run's approval state and its termination controller.
    """

    request: ApprovalRequest
    controller: TerminationController
