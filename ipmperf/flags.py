"""Monitor states, task flags and message formatting."""

from __future__ import annotations

from enum import IntEnum, IntFlag


class State(IntEnum):
    """Lifecycle of the monitor."""

    NOTINIT = 0
    IN_INIT = 1
    ACTIVE = 2
    NOTACTIVE = 3
    IN_FINALIZE = 4
    FINALIZED = 5
    ERROR = 99


class TaskFlag(IntFlag):
    """Options of a monitored task."""

    DEBUG = 1 << 0
    REPORT_NONE = 1 << 1
    REPORT_TERSE = 1 << 2
    REPORT_FULL = 1 << 3
    LOG_NONE = 1 << 4
    LOG_TERSE = 1 << 5
    LOG_FULL = 1 << 6
    OUTFILE = 1 << 7
    LOGWRITER_POSIXIO = 1 << 8
    LOGWRITER_MPIIO = 1 << 9
    USING_ATEXIT = 1 << 10
    HPCNAME = 1 << 11
    NESTED_REGIONS = 1 << 12


_REPORT = TaskFlag.REPORT_NONE | TaskFlag.REPORT_TERSE | TaskFlag.REPORT_FULL
_LOG = TaskFlag.LOG_NONE | TaskFlag.LOG_TERSE | TaskFlag.LOG_FULL
_LOGWRITER = TaskFlag.LOGWRITER_MPIIO | TaskFlag.LOGWRITER_POSIXIO


def _without(flags: int, mask: TaskFlag) -> TaskFlag:
    return TaskFlag(int(flags) & ~int(mask))


def clear_report(flags: int) -> TaskFlag:
    """``flags`` with all report-level bits cleared."""
    return _without(flags, _REPORT)


def clear_log(flags: int) -> TaskFlag:
    """``flags`` with all log-level bits cleared."""
    return _without(flags, _LOG)


def clear_logwriter(flags: int) -> TaskFlag:
    """``flags`` with both log-writer bits cleared."""
    return _without(flags, _LOGWRITER)


def format_message(ident: int, message: str, error: bool = False,
                   with_rank: bool = True) -> str:
    """Prefix a message with the task rank (3 wide) or process id (6 wide)."""
    width = 3 if with_rank else 6
    marker = "ERROR " if error else ""
    return f"IPM{ident:{width}d}: {marker}{message}"