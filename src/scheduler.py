"""Gourmet Ratings scheduled jobs.

Runs one policy job once and exits, so cron (or any external scheduler) owns
the cadence. Intended schedule:

    */10 * * * *   python src/scheduler.py cooldown
    0 0 * * *      python src/scheduler.py time-decay
    0 2 * * *      python src/scheduler.py deviation
    0 4 * * *      python src/scheduler.py tier-evaluation

Only one instance of a job should run at a time; jobs are idempotent per
record, so a re-run after a failure is safe.

Usage:
    python src/scheduler.py <job> [--as-of 2024-01-31T00:00:00+00:00]
    python src/scheduler.py list
"""

import argparse
import sys
from datetime import datetime

CRON_SCHEDULE = {
    "cooldown": "*/10 * * * *",
    "time-decay": "0 0 * * *",
    "deviation": "0 2 * * *",
    "tier-evaluation": "0 4 * * *",
}


def run_job(name, as_of=None):
    """Run the named job inside the ratings domain context; returns its count."""
    from ratings.domain import ratings
    from ratings.policy.jobs import JOBS

    ratings.init()
    with ratings.domain_context():
        return JOBS[name](as_of=as_of)


def main():
    parser = argparse.ArgumentParser(description="Gourmet Ratings scheduled jobs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, cron in CRON_SCHEDULE.items():
        job_parser = subparsers.add_parser(name, help=f"Run the {name} job once (cron: {cron})")
        job_parser.add_argument(
            "--as-of",
            type=datetime.fromisoformat,
            default=None,
            help="Reference time in ISO 8601 (default: now)",
        )

    subparsers.add_parser("list", help="Show the jobs and their cron schedule")

    args = parser.parse_args()

    if args.command == "list":
        for name, cron in CRON_SCHEDULE.items():
            print(f"{cron:<16} {name}")
        return

    processed = run_job(args.command, as_of=args.as_of)
    print(f"{args.command}: {processed} item(s) processed")


if __name__ == "__main__":
    sys.exit(main())
