#!/usr/bin/env python3
"""
healthcheck.py - Probe the Moodle web front-end.

The check requests the login page, which is served without a session and
touches both PHP and the database, and reports healthy on any non-error
HTTP status.  Redirects are not followed so that a misconfigured wwwroot
pointing at another host does not mask a local failure.
"""

import argparse
import os
import signal
import sys
from typing import List, Optional

import requests

DEFAULT_PATH: str = "/login/index.php"
DEFAULT_TIMEOUT: int = 5


def signal_handler(signum: int, frame) -> None:
    """Handle termination signals and exit gracefully.

    Args:
        signum (int): The signal number.
        frame: The current stack frame.
    """
    print(f"Received signal {signum}, exiting.", file=sys.stderr)
    sys.exit(1)


def default_url() -> str:
    """Return the local login page URL for the configured HTTP port."""
    port = os.getenv("WEB_SERVER_HTTP_PORT_NUMBER") or os.getenv("WEB_SERVER_DEFAULT_HTTP_PORT_NUMBER", "8080")
    return f"http://127.0.0.1:{port}{DEFAULT_PATH}"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(description="Check that the Moodle site answers HTTP requests.")
    parser.add_argument("url", nargs="?", help="URL to probe (defaults to the local login page)")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT)
    return parser.parse_args(argv)


def check_moodle(url: str, timeout: int = DEFAULT_TIMEOUT) -> int:
    """Check the Moodle site health.

    Args:
        url (str): The URL to request.
        timeout (int): Request timeout in seconds.

    Returns:
        int: 0 if the health check passes, 1 otherwise.
    """
    try:
        response = requests.get(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        print(f"Failed to reach Moodle at {url}: {e}", file=sys.stderr)
        return 1

    if response.status_code >= 400:
        print(f"Moodle at {url} answered HTTP {response.status_code}.", file=sys.stderr)
        return 1
    print(f"Moodle at {url} is healthy (HTTP {response.status_code}).", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main function to execute the health check."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)
    args = parse_arguments(argv)
    sys.exit(check_moodle(args.url or default_url(), args.timeout))


if __name__ == "__main__":
    main()
