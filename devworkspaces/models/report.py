"""Restore report models.

A restore run never aborts half-way on a broken repository; instead every
visited path gets a :class:`RestoreOutcome` and the caller receives the whole
:class:`RestoreReport` at the end.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from devworkspaces.models.enums import OutcomeStatus, PathKind, SkipReason


class RestoreOutcome(BaseModel):
    """What happened to a single workspace or project path."""

    path: Path
    kind: PathKind
    status: OutcomeStatus
    reason: str | None = None
    """Skip reason (``SkipReason`` value) or failure message."""

    @classmethod
    def created(cls, path: Path, kind: PathKind) -> RestoreOutcome:
        return cls(path=path, kind=kind, status=OutcomeStatus.CREATED)

    @classmethod
    def cloned(cls, path: Path) -> RestoreOutcome:
        return cls(path=path, kind=PathKind.PROJECT, status=OutcomeStatus.CLONED)

    @classmethod
    def skipped(cls, path: Path, kind: PathKind, reason: SkipReason) -> RestoreOutcome:
        return cls(path=path, kind=kind, status=OutcomeStatus.SKIPPED, reason=reason.value)

    @classmethod
    def failed(cls, path: Path, kind: PathKind, reason: str) -> RestoreOutcome:
        return cls(path=path, kind=kind, status=OutcomeStatus.FAILED, reason=reason)

    def describe(self) -> str:
        """Single human-readable line, e.g. ``skipped  /src/a (already-exists)``."""
        line = f"{self.status.value:<8} {self.path}"
        if self.reason:
            line += f" ({self.reason})"
        return line


class RestoreReport(BaseModel):
    """Ordered outcomes of one restore invocation."""

    outcomes: list[RestoreOutcome] = Field(default_factory=list)

    def add(self, outcome: RestoreOutcome) -> RestoreOutcome:
        self.outcomes.append(outcome)
        return outcome

    def with_status(self, status: OutcomeStatus) -> list[RestoreOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def created(self) -> list[RestoreOutcome]:
        return self.with_status(OutcomeStatus.CREATED)

    @property
    def cloned(self) -> list[RestoreOutcome]:
        return self.with_status(OutcomeStatus.CLONED)

    @property
    def skipped(self) -> list[RestoreOutcome]:
        return self.with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[RestoreOutcome]:
        return self.with_status(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def outcome_for(self, path: Path) -> RestoreOutcome | None:
        """Return the outcome recorded for *path*, if it was visited."""
        for outcome in self.outcomes:
            if outcome.path == path:
                return outcome
        return None

    def summary(self) -> str:
        counts = ", ".join(f"{len(self.with_status(status))} {status.value}" for status in OutcomeStatus)
        return f"Restore finished: {counts}"
