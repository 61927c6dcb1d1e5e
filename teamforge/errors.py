"""Structured error hierarchy for teamforge."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from teamforge.team import Team


class TeamForgeError(Exception):
    """Base for all teamforge errors."""

    pass


# ---------------------------------------------------------------------------
# Personality classification
# ---------------------------------------------------------------------------
class ClassificationError(TeamForgeError, ValueError):
    """Personality score or survey input could not be classified."""

    pass


class OutOfRangeScoreError(ClassificationError):
    """Personality score outside the accepted closed range."""

    def __init__(self, score: int, min_score: int, max_score: int):
        self.score = score
        self.min_score = min_score
        self.max_score = max_score
        super().__init__(
            f"Personality score must be between {min_score} and {max_score}. Received: {score}"
        )


class InvalidResponsesError(ClassificationError):
    """Survey responses malformed (wrong count or value out of 1-5)."""

    pass


# ---------------------------------------------------------------------------
# Team formation
# ---------------------------------------------------------------------------
class FormationError(TeamForgeError):
    """Team formation could not be carried out."""

    def __init__(
        self,
        message: str,
        required: int | None = None,
        available: int | None = None,
    ):
        self.required = required
        self.available = available
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.required is not None and self.available is not None:
            return f"{message} (required: {self.required}, available: {self.available})"
        return message


class EmptyPoolError(FormationError):
    """No participants supplied."""

    pass


class TeamSizeTooSmallError(FormationError):
    """Requested team size below the minimum."""

    pass


class InsufficientParticipantsError(FormationError):
    """Fewer participants than one team needs."""

    pass


class NoLeadersError(FormationError):
    """Pool holds no leader-tier participant to seed a team."""

    pass


class DuplicateParticipantError(FormationError):
    """The same participant id appears more than once in the input."""

    def __init__(self, message: str, duplicate_ids: list[str] | None = None):
        self.duplicate_ids = list(duplicate_ids or [])
        super().__init__(message)


class FormationCancelled(FormationError):
    """A formation task observed its cancellation token before claiming anyone."""

    pass


class TaskFailure:
    """Record of a discarded formation task."""

    def __init__(self, team_number: int, reason: str, error: BaseException | None = None):
        self.team_number = team_number
        self.reason = reason
        self.error = error

    def __repr__(self) -> str:
        return f"TaskFailure(team_number={self.team_number}, reason={self.reason!r})"


class ConcurrencyFailure(FormationError):
    """Concurrent work timed out, was interrupted, or raised.

    ``partial_teams`` holds the teams produced by tasks that did complete so
    callers can inspect them, but the run as a whole is not a success.
    """

    def __init__(
        self,
        message: str,
        partial_teams: list[Team] | None = None,
        failures: list[TaskFailure] | None = None,
    ):
        self.partial_teams = list(partial_teams or [])
        self.failures = list(failures or [])
        super().__init__(message)


# ---------------------------------------------------------------------------
# Data loading
# ---------------------------------------------------------------------------
class DataLoadError(TeamForgeError):
    """Participant data could not be read or written."""

    def __init__(self, message: str, source: str = "", line_number: int | None = None):
        self.source = source
        self.line_number = line_number
        super().__init__(message)
