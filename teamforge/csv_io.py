"""CSV import of participants and export of formed teams.

Malformed participant rows are skipped and logged; the file as a whole fails
only when it is missing, empty, or yields no valid participant.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
import re
from typing import Any

from pydantic import ValidationError

from teamforge.errors import DataLoadError
from teamforge.participant_models import (
    ACTIVITIES,
    DEFAULT_AGE,
    PLAYING_ROLES,
    Activity,
    Participant,
    PlayingRole,
)
from teamforge.team import Team


logger = logging.getLogger(__name__)

PARTICIPANT_COLUMNS = [
    "ID", "Name", "Email", "PreferredGame", "SkillLevel",
    "PreferredRole", "PersonalityScore", "PersonalityType",
]
TEAM_COLUMNS = [
    "TeamID", "TeamName", "TargetSize", "CurrentSize", "MemberIDs",
    "MemberNames", "DiversityScore", "BalanceScore", "OverallScore",
]

_REQUIRED = ["ID", "Name", "Email", "PreferredGame", "SkillLevel", "PreferredRole", "PersonalityScore"]


# ---------------------------------------------------------------------------
# Enum parsing
# ---------------------------------------------------------------------------
def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


_ACTIVITY_ALIASES: dict[str, str] = {}
for _aid, _activity in ACTIVITIES.items():
    _ACTIVITY_ALIASES[_normalize(_aid)] = _aid
    _ACTIVITY_ALIASES[_normalize(_activity.name)] = _aid

_ROLE_ALIASES: dict[str, str] = {}
for _rid, _role in PLAYING_ROLES.items():
    _ROLE_ALIASES[_normalize(_rid)] = _rid
    _ROLE_ALIASES[_normalize(_role.name)] = _rid


def parse_activity(text: str) -> Activity:
    """Case-insensitive activity lookup accepting display names (``"CS:GO"``)."""
    activity = _ACTIVITY_ALIASES.get(_normalize(text or ""))
    if activity is None:
        valid = ", ".join(a.name for a in ACTIVITIES.values())
        raise ValueError(f"Unknown game type: {text!r} (valid: {valid})")
    return activity  # type: ignore[return-value]


def parse_role(text: str) -> PlayingRole:
    """Case-insensitive role lookup."""
    role = _ROLE_ALIASES.get(_normalize(text or ""))
    if role is None:
        valid = ", ".join(r.name for r in PLAYING_ROLES.values())
        raise ValueError(f"Unknown role: {text!r} (valid: {valid})")
    return role  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------
def _row_to_participant(row: dict[str, Any]) -> Participant:
    missing = [c for c in _REQUIRED if not (row.get(c) or "").strip()]
    if missing:
        raise ValueError(f"Missing fields: {', '.join(missing)}")
    age_text = (row.get("Age") or "").strip()
    return Participant(
        id=row["ID"],
        name=row["Name"],
        email=row["Email"],
        age=int(age_text) if age_text else DEFAULT_AGE,
        preferred_activity=parse_activity(row["PreferredGame"]),
        skill_level=int(row["SkillLevel"].strip()),
        preferred_role=parse_role(row["PreferredRole"]),
        personality_score=int(row["PersonalityScore"].strip()),
    )


def load_participants(filepath: str | Path) -> list[Participant]:
    """Read participants from a CSV file.

    Raises:
        DataLoadError: File missing or unreadable, no header, or no valid rows.
    """
    path = Path(filepath)
    if not path.exists():
        raise DataLoadError(f"File not found: {path}", source=str(path))

    participants: list[Participant] = []
    seen_ids: set[str] = set()
    reader = None
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                raise DataLoadError("CSV is empty or has no header", source=str(path))
            for row in reader:
                line = reader.line_num
                if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
                    continue
                try:
                    participant = _row_to_participant(row)
                except (ValidationError, ValueError) as exc:
                    logger.warning("Skipping invalid line %d: %s", line, exc)
                    continue
                if participant.id in seen_ids:
                    logger.warning("Skipping line %d: duplicate participant id %s", line, participant.id)
                    continue
                seen_ids.add(participant.id)
                participants.append(participant)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        line = reader.line_num if reader is not None else None
        raise DataLoadError(
            f"Error reading file: {path}: {exc}", source=str(path), line_number=line
        ) from exc

    if not participants:
        raise DataLoadError("No valid participants found", source=str(path))
    logger.info("Successfully loaded %d participants from %s", len(participants), path)
    return participants


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------
def write_teams(teams: list[Team], filepath: str | Path) -> str:
    """Export teams to CSV; empty teams are skipped.

    Returns:
        The filepath written.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(TEAM_COLUMNS)
            for team in teams:
                if team.size == 0:
                    continue
                members = team.members
                writer.writerow([
                    team.id,
                    team.name,
                    team.target_size,
                    team.size,
                    ";".join(m.id for m in members),
                    ";".join(m.name for m in members),
                    f"{team.diversity_score:.4f}",
                    f"{team.balance_score:.4f}",
                    f"{team.overall_score:.4f}",
                ])
                written += 1
    except OSError as exc:
        raise DataLoadError(f"Error writing to file: {path}", source=str(path)) from exc

    logger.info("Successfully wrote %d teams to %s", written, path)
    return str(path)


def write_participants(participants: list[Participant], filepath: str | Path) -> str:
    """Export participants with their current team assignment."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    columns = [*PARTICIPANT_COLUMNS, "Age", "AssignedTeam"]
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=columns)
            writer.writeheader()
            for p in participants:
                writer.writerow({
                    "ID": p.id,
                    "Name": p.name,
                    "Email": p.email,
                    "PreferredGame": ACTIVITIES[p.preferred_activity].name,
                    "SkillLevel": p.skill_level,
                    "PreferredRole": PLAYING_ROLES[p.preferred_role].name,
                    "PersonalityScore": p.personality_score,
                    "PersonalityType": p.personality_type,
                    "Age": p.age,
                    "AssignedTeam": p.assigned_team,
                })
    except OSError as exc:
        raise DataLoadError(f"Error writing to file: {path}", source=str(path)) from exc

    logger.info("Participants CSV exported: %s", path)
    return str(path)
