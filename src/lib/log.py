"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the verbosity of the
currently connected state without requiring explicit state passing. The CLI
connects its ProgramState; library callers may connect any object carrying a
``verbosity`` attribute.

Usage:
    from xmlui.lib.log import LOG, REPORT, state_connectToLogger

    # At start of a pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Compiling main-page.xml", level=1)
    LOG("Tag 'StackLayout' opened at index 3", level=3)

    # Compiler reports, at WARNING or ERROR:
    REPORT("views/main-page.xml", report)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold the state whose verbosity gates LOG()
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

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
    Connect a state object to the logging context.

    Args:
        state: Any object with a ``verbosity`` attribute

    Example:
        def xml_compile(inputstate: ProgramState) -> ProgramState:
            state = inputstate.copy()
            state_connectToLogger(state)
            LOG("Compiling sources...", level=1)
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output and abnormal-state reports
        2 = Compiler stage progress (-v)
        3 = Per-tag trace (-vv)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def REPORT(source: str, report: Any) -> None:
    """
    Log one compiler report at its own severity.

    Reports show from verbosity 1 up, as loguru WARNING or ERROR records
    prefixed with the document they belong to.

    Args:
        source: Document path or module name
        report: AbnormalStateReport (anything with ``state``, ``message``
                and ``source_range``)
    """
    state = _program_state.get()
    if not (state and hasattr(state, 'verbosity') and state.verbosity >= 1):
        return

    location = ''
    if report.source_range is not None:
        start = report.source_range.start
        location = f':{start.line}:{start.column}'
    logger.opt(depth=1).log(report.state.value.upper(), f"{source}{location}: {report.message}")
