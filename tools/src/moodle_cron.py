#!/usr/bin/env python3
"""
moodle_cron.py - Register cron jobs under /etc/cron.d.

Each job file holds one line per command in the system crontab format
``<schedule> <user> <command>``, which is what the cron daemon of the image
expects in /etc/cron.d.
"""

import argparse
import os
import signal
import sys
from types import FrameType
from typing import List, Optional

CRON_DIR: str = "/etc/cron.d"
DEFAULT_SCHEDULE: str = "* * * * *"


def cron_line(command: str, run_as: str = "root", schedule: str = DEFAULT_SCHEDULE) -> str:
    """Return a single /etc/cron.d entry.

    Raises:
        ValueError: If the schedule does not have exactly five fields.
    """
    if len(schedule.split()) != 5:
        raise ValueError(f"Invalid cron schedule '{schedule}'")
    return f"{schedule} {run_as} {command}\n"


def generate_cron_conf(
    name: str,
    command: str,
    run_as: str = "root",
    schedule: str = DEFAULT_SCHEDULE,
    clean: bool = True,
    cron_dir: Optional[str] = None,
) -> str:
    """Write a cron job called *name*.

    Args:
        name (str): File name of the job inside *cron_dir*.
        command (str): Shell command executed by cron.
        run_as (str): User the command runs as. Defaults to root.
        schedule (str): Five-field cron schedule.
        clean (bool): Replace the file when True, append to it otherwise.
        cron_dir (Optional[str]): Directory holding the job files. Defaults to CRON_DIR.

    Returns:
        str: Path of the job file.
    """
    if cron_dir is None:
        cron_dir = CRON_DIR
    if not name or os.sep in name:
        raise ValueError(f"Invalid cron job name '{name}'")

    line = cron_line(command, run_as, schedule)
    os.makedirs(cron_dir, exist_ok=True)
    path = os.path.join(cron_dir, name)

    with open(path, "w" if clean else "a", encoding="utf-8") as job:
        job.write(line)
    os.chmod(path, 0o644)

    print(f"Cron job '{name}' written to {path}", file=sys.stderr)
    return path


def signal_handler(signum: int, frame: Optional[FrameType]) -> None:
    """Handle termination signals."""
    print(f"Received signal {signum}, exiting.", file=sys.stderr)
    sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Command line entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    parser = argparse.ArgumentParser(description="Generate a cron job under /etc/cron.d")
    parser.add_argument("name")
    parser.add_argument("command")
    parser.add_argument("--run-as", default="root")
    parser.add_argument("--schedule", default=DEFAULT_SCHEDULE)
    parser.add_argument("--append", action="store_true", help="Append instead of replacing the job file")
    parser.add_argument("--cron-dir", default=CRON_DIR)
    args = parser.parse_args(argv)

    try:
        generate_cron_conf(
            args.name,
            args.command,
            run_as=args.run_as,
            schedule=args.schedule,
            clean=not args.append,
            cron_dir=args.cron_dir,
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
