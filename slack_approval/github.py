"""GitHub Actions workflow commands used to report results to the pipeline."""

import os
import sys
import uuid
from typing import Optional

from loguru import logger


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_output(name: str, value: str, output_path: Optional[str] = None) -> None:
    """Set a step output.

    Appends to the GITHUB_OUTPUT file when available, otherwise falls back to
    the legacy ``::set-output`` workflow command.

    Args:
        name: Output name
        value: Output value
        output_path: Override for the GITHUB_OUTPUT file path
    """
    path = output_path if output_path is not None else os.environ.get("GITHUB_OUTPUT", "")
    value = value or ""

    if not path:
        sys.stdout.write(f"::set-output name={name}::{_escape_data(value)}\n")
        sys.stdout.flush()
        return

    with open(path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")
    logger.debug(f"Set output {name}={value}")


def set_failed(message: str) -> None:
    """Report the step as failed with an error annotation."""
    logger.error(message)
    sys.stdout.write(f"::error::{_escape_data(message)}\n")
    sys.stdout.flush()
