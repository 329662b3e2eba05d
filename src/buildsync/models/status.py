"""Normalized PipelineActivity status vocabulary."""

from __future__ import annotations

import enum


class ActivityStatus(str, enum.Enum):
    UNSET = ""
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    ABORTED = "Aborted"
    UNSTABLE = "Unstable"
    NOT_EXECUTED = "NotExecuted"
    WAITING_FOR_APPROVAL = "WaitingForApproval"


# Statuses with no further transition
TERMINAL_STATUSES = frozenset({
    ActivityStatus.SUCCEEDED.value,
    ActivityStatus.FAILED.value,
    ActivityStatus.ABORTED.value,
    ActivityStatus.UNSTABLE.value,
    ActivityStatus.NOT_EXECUTED.value,
})


def is_terminal(status: ActivityStatus | str | None) -> bool:
    """True once a step or pipeline can no longer change status."""
    if status is None:
        return False
    value = status.value if isinstance(status, ActivityStatus) else status
    return value in TERMINAL_STATUSES
