#!/usr/bin/env python3
"""Read and patch the Moodle ``config.php`` file.

Moodle's configuration is a PHP script, not an INI file, therefore this
helper never parses it.  It treats the file as opaque text: values are
extracted with a line-oriented regular expression and changes are applied
as regex find/replace.  All writes go through a temporary file, an
``fcntl`` lock and ``os.replace`` so that a crash never leaves a truncated
``config.php`` on the persistent volume.
"""

from __future__ import annotations

import argparse
import fcntl
import os
import re
import signal
import sys
import tempfile
from types import FrameType
from typing import List, Optional


CONFIG_FILE_PATH: str = "/bitnami/moodle/config.php"

# Marker line written by configure_wwwroot(); used to detect a patched file.
WWWROOT_MARKER: str = "if (empty($_SERVER['HTTP_HOST'])) {"

WWWROOT_PATTERN: str = r"\$CFG->wwwroot\s*=.*"

LOCK_DIR: str = os.environ.get("MOODLE_CONFIG_LOCK_DIR", tempfile.gettempdir())


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def _log(message: str) -> None:
    """Print *message* to stderr."""

    print(message, file=sys.stderr)


def signal_handler(signum: int, frame: Optional[FrameType]) -> None:
    """Handle termination signals."""

    _log(f"Received signal {signum}, terminating gracefully.")
    sys.exit(1)


def _lock_path(path: str) -> str:
    """Return the lock file guarding *path*.

    Locks live in ``LOCK_DIR`` because ``config.php`` sits in the web
    docroot, where a stray ``.lock`` file would be served.
    """

    name = os.path.abspath(path).strip(os.sep).replace(os.sep, "_")
    return os.path.join(LOCK_DIR, f"moodle-config-{name}.lock")


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------

def read_config_text(path: str = CONFIG_FILE_PATH) -> str:
    """Return the content of *path* read under a shared lock."""

    with open(_lock_path(path), "a", encoding="utf-8") as lock:
        fcntl.flock(lock.fileno(), fcntl.LOCK_SH)
        try:
            with open(path, "r", encoding="utf-8") as cfg:
                return cfg.read()
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)


def write_config_text(path: str, content: str) -> None:
    """Atomically replace *path* with *content*.

    The permission bits survive the replacement.  Owner and group survive as
    well when running as root; an unprivileged caller cannot give the file
    away, so the new file then belongs to the caller like any other write.
    """

    directory = os.path.dirname(path) or "."
    try:
        st: Optional[os.stat_result] = os.stat(path)
    except FileNotFoundError:
        st = None

    fd, tmp_path = tempfile.mkstemp(dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        with open(_lock_path(path), "a", encoding="utf-8") as lock:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                os.replace(tmp_path, path)
                if st is not None:
                    if os.geteuid() == 0:
                        os.chown(path, st.st_uid, st.st_gid)
                    os.chmod(path, st.st_mode & 0o7777)
                dir_fd = os.open(directory, os.O_DIRECTORY)
                try:
                    os.fsync(dir_fd)
                finally:
                    os.close(dir_fd)
            finally:
                fcntl.flock(lock.fileno(), fcntl.LOCK_UN)
    finally:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass


# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------

def sanitize_key(key: str) -> str:
    """Return the regex matching an assignment of *key*.

    Both PHP assignment styles are recognised: ``$CFG->dbhost = 'x';`` and
    array entries such as ``'dbport' => 3306,``.  Commented-out lines
    (``// $CFG->...``) are matched as well.  Group 2 holds the raw value.
    """

    return rf"^\s*(//\s*)?{re.escape(key)}\s*=>?([^;,]+)[;,]"


def conf_get(key: str, path: str = CONFIG_FILE_PATH) -> str:
    """Return the value assigned to *key* in the configuration file.

    Quotes and whitespace are removed from the value.  When the key appears
    several times the first occurrence wins; an absent key yields ``""``.
    """

    if not key:
        raise ValueError("key missing")

    pattern = re.compile(sanitize_key(key))
    for line in read_config_text(path).splitlines():
        match = pattern.match(line)
        if match:
            return re.sub(r"[\"' ]", "", match.group(2))
    return ""


def replace_in_file(path: str, pattern: str, replacement: str, count: int = 0) -> int:
    """Substitute *pattern* with the literal *replacement* in *path*.

    Matching is performed per line (``.`` never crosses a newline) and every
    occurrence is replaced unless *count* is positive.  The replacement is
    inserted verbatim so PHP code containing ``$``, ``&`` or backslashes
    needs no escaping.  Returns the number of substitutions; the file is only
    rewritten when that number is non-zero.
    """

    content = read_config_text(path)
    new_content, replaced = re.subn(
        pattern, lambda _m: replacement, content, count=count, flags=re.MULTILINE
    )
    if replaced:
        write_config_text(path, new_content)
    return replaced


def build_wwwroot_block(port: int | str) -> str:
    """Return the PHP snippet deriving ``$CFG->wwwroot`` from the request."""

    lines: List[str] = [
        WWWROOT_MARKER,
        f"  $_SERVER['HTTP_HOST'] = '127.0.0.1:{port}';",
        "}",
        "if (isset($_SERVER['HTTPS']) && $_SERVER['HTTPS'] == 'on') {",
        "  $CFG->wwwroot   = 'https://' . $_SERVER['HTTP_HOST'];",
        "} else {",
        "  $CFG->wwwroot   = 'http://' . $_SERVER['HTTP_HOST'];",
        "}",
    ]
    return "\n".join(lines)


def configure_wwwroot(path: str = CONFIG_FILE_PATH, port: int | str = 8080) -> bool:
    """Replace the static ``$CFG->wwwroot`` assignment with the dynamic block.

    Returns *True* when the file was changed.  A file that already contains
    the block is left alone, otherwise the ``wwwroot`` lines inside the
    block would be expanded a second time.
    """

    if WWWROOT_MARKER in read_config_text(path):
        _log(f"wwwroot already configured in {path}")
        return False

    replaced = replace_in_file(path, WWWROOT_PATTERN, build_wwwroot_block(port))
    if replaced:
        _log(f"Configured dynamic wwwroot in {path}")
    else:
        _log(f"No $CFG->wwwroot assignment found in {path}")
    return bool(replaced)


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(description="Inspect or patch the Moodle config.php file")
    parser.add_argument("--file", default=CONFIG_FILE_PATH, help="Path to config.php")

    subparsers = parser.add_subparsers(dest="command")

    get_parser = subparsers.add_parser("get", help="Print a configuration value")
    get_parser.add_argument("key", type=str, help="e.g. '$CFG->dbhost' or \"'dbport'\"")

    wwwroot_parser = subparsers.add_parser("wwwroot", help="Configure a request-derived wwwroot")
    wwwroot_parser.add_argument("--port", type=int, default=8080)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the command line tool."""

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_args(argv)

    if not os.path.isfile(args.file):
        _log(f"Error: Config file '{args.file}' does not exist.")
        sys.exit(1)

    try:
        if args.command == "get":
            print(conf_get(args.key, args.file))
        elif args.command == "wwwroot":
            configure_wwwroot(args.file, args.port)
        else:
            print(read_config_text(args.file))
    except OSError as exc:
        _log(f"Error accessing config file: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
