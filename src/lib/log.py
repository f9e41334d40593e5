"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects either an explicitly
passed verbosity or the current ProgramState's verbosity level.

Features:
- Explicit verbosity for components that carry their own setting
  (DeclarationWrapper, ReferencePathRewriter)
- Context fallback tied to ProgramState verbosity for pipeline stages
- Rich formatting with timestamps, colors, and metadata
- Thread-safe using contextvars

Usage:
    from lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("This message appears if verbosity >= 1", level=1)

    # In a component holding its own verbosity:
    LOG("Rewrote reference path", level=2, verbosity=self.verbosity)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with ts-pkg-installer format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <24}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this once before running the pipeline to make the state's
    verbosity setting available to LOG() calls that do not pass one.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_current() -> int:
    """Verbosity of the connected ProgramState, or 0 if none is connected"""
    state = _program_state.get()
    if state is not None and hasattr(state, 'verbosity'):
        return state.verbosity
    return 0


def LOG(message: str, level: int = 1, verbosity: Optional[int] = None, **kwargs: Any) -> None:
    """
    Log message if the effective verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=progress, 2=details, 3=contents)
        verbosity: Explicit verbosity; falls back to the connected ProgramState
        **kwargs: Additional loguru metadata (e.g., exc_info=True for exceptions)

    Verbosity levels:
        0 = Silent (default for postinstall runs)
        1 = Progress (-v)
        2 = Details (-vv)
        3 = File contents and tracebacks (-vvv)
    """
    effective = verbosity if verbosity is not None else verbosity_current()

    if effective >= level:
        logger.opt(depth=1).debug(message, **kwargs)
