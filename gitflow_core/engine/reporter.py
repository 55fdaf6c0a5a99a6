"""Audit trail of workflow commands.

Commands emit one record when they are attempted and one when they succeed
or fail. Reporting is fire-and-forget: a reporter that raises is logged and
ignored, and never changes the outcome of the command.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

import structlog

from gitflow_core.enums import Outcome

log = structlog.get_logger(__name__)

DEFAULT_MAX_RECORDS = 1000


@dataclass(frozen=True)
class CommandRecord:
    """One audit entry.

    Attributes:
        command: Command name (e.g., 'release-finish')
        branch: Full workflow branch name
        outcome: attempted, succeeded or failed
        timestamp: When the record was created (UTC)
        error: Error message for failed commands
    """

    command: str
    branch: str
    outcome: Outcome
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None


class Reporter(Protocol):
    """Receives command records."""

    def record(self, entry: CommandRecord) -> None:
        """Accept one record.

        Args:
            entry: The record to store or forward
        """
        ...


class LogReporter:
    """Reporter that logs each record and keeps the most recent ones in memory.

    Attributes:
        records: The last ``max_records`` records received, oldest first
    """

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        """Create a reporter.

        Args:
            max_records: Records kept in memory; 0 keeps none (log only)
        """
        self.records: deque[CommandRecord] = deque(maxlen=max_records)

    def record(self, entry: CommandRecord) -> None:
        self.records.append(entry)
        log.info(
            "command_reported",
            command=entry.command,
            branch=entry.branch,
            outcome=str(entry.outcome),
            error=entry.error,
        )

    def for_command(self, command: str) -> list[CommandRecord]:
        return [r for r in self.records if r.command == command]


def report(reporter: Reporter | None, entry: CommandRecord) -> None:
    """Deliver ``entry`` to ``reporter``, logging and ignoring any failure."""
    if reporter is None:
        return
    try:
        reporter.record(entry)
    except Exception as e:
        log.warning("reporter_failed", command=entry.command, outcome=str(entry.outcome), error=str(e))
