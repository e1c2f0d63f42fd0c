# Slack Approval Gate

import asyncio
import sys

from slack_approval.app import main as _main


def main():
    """Entry point for the slack-approval CLI command."""
    sys.exit(asyncio.run(_main()))
