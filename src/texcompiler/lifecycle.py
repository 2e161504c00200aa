"""Process lifecycle: exit codes, signal handling, and top-level failures."""

from __future__ import annotations

import logging
import signal
import sys
from enum import IntEnum
from types import FrameType
from typing import Callable

LOGGER = logging.getLogger(__name__)

UNHANDLED_MESSAGE = "An unhandled exception has occurred"
TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 1
    FILE_NOT_FOUND = 2


def _terminate(signum: int, _frame: FrameType | None) -> None:
    """Exit immediately with a success code; in-flight builds are dropped."""
    LOGGER.debug("Received signal %s; exiting.", signum)
    sys.exit(ExitCode.SUCCESS)


def install_signal_handlers() -> None:
    """Route SIGINT and SIGTERM to an immediate, successful exit."""
    for signum in TERMINATION_SIGNALS:
        signal.signal(signum, _terminate)


def run_supervised(body: Callable[[], int]) -> int:
    """Run ``body`` and map any uncaught exception to ``ExitCode.ERROR``."""
    try:
        return int(body())
    except Exception:
        LOGGER.exception(UNHANDLED_MESSAGE)
        return int(ExitCode.ERROR)
