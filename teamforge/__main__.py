"""Batch CLI for team formation.

Usage:
    python -m teamforge participants.csv --team-size 5
    python -m teamforge participants.csv --team-size 4 --output teams.csv --assignments out.csv
    python -m teamforge --sample 40 --team-size 5 --sequential
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from teamforge.config import EngineSettings
from teamforge.csv_io import load_participants, write_participants, write_teams
from teamforge.errors import DataLoadError, FormationError
from teamforge.personality_classifier import distribution_summary
from teamforge.sample_data import generate_participants
from teamforge.team_builder import TeamBuilder


logger = logging.getLogger("teamforge")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamforge",
        description="Form balanced teams from a participant CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="Participant CSV file")
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Use N generated participants instead of an input file",
    )
    parser.add_argument("--team-size", type=int, required=True, help="Target members per team (>= 3)")
    parser.add_argument("--output", help="Write formed teams to this CSV")
    parser.add_argument("--assignments", help="Write participants with their team to this CSV")
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Form teams on the calling thread instead of the worker pool",
    )
    parser.add_argument("--workers", type=int, help="Worker threads (default: CPU count)")
    parser.add_argument(
        "--lock-scope",
        choices=["team", "pick"],
        help="Hold the pool lock for a whole team, or only while claiming a drafted roster",
    )
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser


def configure_logging(verbose: bool, log_file: str | None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point; returns the process exit code."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.input is None) == (args.sample is None):
        parser.error("provide either an input CSV or --sample N")
    configure_logging(args.verbose, args.log_file)

    try:
        settings = EngineSettings.from_env(max_workers=args.workers, lock_scope=args.lock_scope)
    except ValidationError as e:
        parser.error(f"invalid settings: {e}")

    try:
        if args.sample is not None:
            participants = generate_participants(args.sample)
        else:
            participants = load_participants(args.input)

        print(distribution_summary(p.personality_score for p in participants))
        print()

        with TeamBuilder(settings) as builder:
            if args.sequential:
                teams = builder.form_teams_sequential(participants, args.team_size)
            else:
                teams = builder.form_teams(participants, args.team_size)

            for team in teams:
                print(team.detailed_summary())
                print()
            print(builder.statistics(teams).summary())

        if args.output:
            write_teams(teams, args.output)
            print(f"Teams saved to {args.output}")
        if args.assignments:
            write_participants(participants, args.assignments)
            print(f"Assignments saved to {args.assignments}")
    except (FormationError, DataLoadError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
