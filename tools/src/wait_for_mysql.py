#!/usr/bin/env python3
"""
wait_for_mysql.py - Wait for a MySQL or MariaDB server to accept connections.

The check opens a connection with the credentials Moodle is configured with
and runs ``SELECT 1`` against the target database, so a server that is up
but rejects the account (or lacks the schema) is reported as not ready.
"""

import os
import signal
import sys
import time
from typing import Optional

import pymysql
from pymysql.err import InternalError, OperationalError

# Same budget as the retry_while helper of the Bitnami shell libraries.
DEFAULT_MAX_ATTEMPTS: int = 12
DEFAULT_SLEEP_SECONDS: int = 5
DEFAULT_CONNECT_TIMEOUT: int = 10


def check_mysql_connection(
    user: str,
    password: str,
    host: str,
    port: int,
    dbname: str,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
) -> None:
    """Open a connection and run ``SELECT 1``.

    Raises:
        pymysql.err.OperationalError: When the server cannot be reached or
            refuses the credentials.
    """
    connection = pymysql.connect(
        host=host,
        port=port,
        user=user,
        password=password,
        database=dbname,
        connect_timeout=connect_timeout,
    )
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    finally:
        connection.close()


def wait_for_mysql(
    user: str,
    password: str,
    host: str,
    port: int,
    dbname: str,
    max_attempts: Optional[int] = None,
    sleep_seconds: Optional[int] = None
) -> None:
    """Wait for MySQL/MariaDB to become available.

    Args:
        user (str): The database user.
        password (str): The database password, may be empty.
        host (str): The database host.
        port (int): The database port.
        dbname (str): The database name.
        max_attempts (Optional[int]): Maximum number of attempts. Defaults to DEFAULT_MAX_ATTEMPTS.
        sleep_seconds (Optional[int]): Seconds to sleep between attempts. Defaults to DEFAULT_SLEEP_SECONDS.

    Raises:
        SystemExit: If the database is not available after the maximum attempts.
    """
    if max_attempts is None:
        max_attempts = DEFAULT_MAX_ATTEMPTS
    if sleep_seconds is None:
        sleep_seconds = DEFAULT_SLEEP_SECONDS

    attempt: int = 0
    while attempt < max_attempts:
        try:
            check_mysql_connection(user, password, host, port, dbname)
            print(f"Database is ready on {host}:{port}.", file=sys.stderr)
            break
        except (OperationalError, InternalError) as e:
            attempt += 1
            if attempt >= max_attempts:
                print(
                    f"Could not connect to the database after {max_attempts} attempts. Last error: {e}",
                    file=sys.stderr,
                )
                sys.exit(1)
            print(
                f"Attempt {attempt} of {max_attempts}: database is not up yet, waiting... Error: {e}",
                file=sys.stderr,
            )
            time.sleep(sleep_seconds)


def clean_up(exit_code: int = 0) -> None:
    """Clean up resources and exit with the given exit code.

    Args:
        exit_code (int): The exit code. Defaults to 0.
    """
    print(f"Exiting with code {exit_code}", file=sys.stderr)
    sys.exit(exit_code)


def signal_handler(signum: int, frame: Optional[str]) -> None:
    """Handle system signals for proper cleanup.

    Args:
        signum (int): The signal number.
        frame (Optional[str]): The current stack frame.
    """
    print(f"Received signal {signum}, initiating cleanup.", file=sys.stderr)
    clean_up(1)


def main() -> None:
    """Main function to wait for the Moodle database."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    db_user: str = os.getenv("MOODLE_DATABASE_USER", "")
    db_password: str = os.getenv("MOODLE_DATABASE_PASSWORD", "")
    db_host: str = os.getenv("MOODLE_DATABASE_HOST", "")
    db_port: int = int(os.getenv("MOODLE_DATABASE_PORT_NUMBER", "3306"))
    db_name: str = os.getenv("MOODLE_DATABASE_NAME", "")

    if not all([db_user, db_host, db_name]):
        print("Required environment variables for the database are missing.", file=sys.stderr)
        sys.exit(1)

    max_attempts: int = int(os.getenv('MAX_ATTEMPTS', str(DEFAULT_MAX_ATTEMPTS)))
    sleep_seconds: int = int(os.getenv('SLEEP_SECONDS', str(DEFAULT_SLEEP_SECONDS)))

    print(
        f"Waiting for database '{db_name}' to become available for user '{db_user}' at host '{db_host}:{db_port}'...",
        file=sys.stderr,
    )
    wait_for_mysql(
        user=db_user,
        password=db_password,
        host=db_host,
        port=db_port,
        dbname=db_name,
        max_attempts=max_attempts,
        sleep_seconds=sleep_seconds
    )


if __name__ == "__main__":
    main()
