#!/usr/bin/env python3
"""Convenience script to run the Slack approval gate."""

import asyncio
import sys

from slack_approval.app import main as _main


def main():
    sys.exit(asyncio.run(_main()))

if __name__ == "__main__":
    main()
