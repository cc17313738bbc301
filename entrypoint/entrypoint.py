#!/usr/bin/env python3
"""Moodle Docker image - **Python setup entry-point**
======================================================================

This file is the Python port of the Bitnami ``libmoodle.sh`` library and the
wrapper that used to source it.  It prepares a Moodle instance before the
web server starts: the environment is validated, the database is awaited,
the PHP CLI installer or upgrader is invoked and ``config.php`` is patched
so that the site answers on whatever host name the request carries.

The control-flow is a single linear sequence.  Every step is idempotent and
the only persisted state is the ``config.php`` file living on the Moodle
volume: when it exists the volume is considered *initialised* and the
instance is restored (upgrade) instead of installed.

```
Concern (Bash)                    | Python helper              | Status
----------------------------------+----------------------------+-------
Env defaults (moodle-env.sh)      | gather_env                 | ✓
moodle_validate                   | validate                   | ✓
web_server_validate               | validate_web_server        | ✓ (type + ports only)
moodle_fix_manageddb_check        | fix_manageddb_check        | ✓
moodle_conf_get                   | conf_get                   | ✓ (tools.src.moodle_config)
moodle_wait_for_mysql_db_connection | wait_for_database        | ✓ (tools.src.wait_for_mysql)
moodle_install                    | install                    | ✓
moodle_upgrade                    | upgrade                    | ✓
moodle_configure_wwwroot          | configure_wwwroot          | ✓ (idempotent)
moodle_initialize                 | initialize                 | ✓
generate_cron_conf                | configure_cron             | ✓ (tools.src.moodle_cron)
is_app_initialized                | is_app_initialized         | ✓ (config.php presence)
Setup wrapper                     | setup / main               | ✓
```

Running as *root* (the default for the image) the PHP scripts are executed
as the web-server daemon account so that files they create on the volumes do
not need an ownership fix afterwards; this replaces the historical ``gosu``
wrapper.
"""

from __future__ import annotations
from typing import TypedDict
from os import environ

import os
import sys
from pathlib import Path
from typing import Mapping, Sequence

__all__ = [
    "MoodleEnv",
    "gather_env",
    "is_boolean_yes",
    "is_dir_empty",
    "http_port",
    "validate",
    "validate_web_server",
    "fix_manageddb_check",
    "conf_get",
    "wait_for_database",
    "database_install_args",
    "build_install_command",
    "build_upgrade_command",
    "install",
    "upgrade",
    "configure_wwwroot",
    "clear_sessions",
    "configure_cron",
    "initialize",
    "is_app_initialized",
    "setup",
    "main",
    "SUPPORTED_DATABASE_TYPES",
    "SUPPORTED_WEB_SERVERS",
]


SUPPORTED_DATABASE_TYPES = ("mysqli", "mariadb")
SUPPORTED_WEB_SERVERS = ("apache", "nginx")

_TRUTHY = {"1", "yes", "true"}


# ---------------------------------------------------------------------------
#  Logging - same format as the historical Bash helpers (info / warn / error)
# ---------------------------------------------------------------------------


def _log(message: str, level: str = "INFO") -> None:
    print(f"[entrypoint] {level}: {message}", file=sys.stderr)


def _debug(message: str, env: Mapping[str, str] | None = None) -> None:
    src = environ if env is None else env
    if is_boolean_yes(src.get("BITNAMI_DEBUG", "")):
        _log(message, "DEBUG")


# ---------------------------------------------------------------------------
#  Environment
# ---------------------------------------------------------------------------


class MoodleEnv(TypedDict):
    """Environment consumed by the entry-point.

    Every key is always present because :pyfunc:`gather_env` fills the
    defaults documented for the Bitnami image, so call-sites may use the
    subscription syntax without guarding against ``KeyError``.
    """

    # Paths
    MOODLE_VOLUME_DIR: str
    MOODLE_DATA_DIR: str
    MOODLE_CONF_FILE: str

    # Site & administrator account
    MOODLE_USERNAME: str
    MOODLE_PASSWORD: str
    MOODLE_EMAIL: str
    MOODLE_SITE_NAME: str
    MOODLE_CRON_MINUTES: str

    # Database
    MOODLE_DATABASE_TYPE: str
    MOODLE_DATABASE_HOST: str
    MOODLE_DATABASE_PORT_NUMBER: str
    MOODLE_DATABASE_NAME: str
    MOODLE_DATABASE_USER: str
    MOODLE_DATABASE_PASSWORD: str
    MOODLE_DATABASE_MIN_VERSION: str
    ALLOW_EMPTY_PASSWORD: str

    # SMTP (validated only - configured from the Moodle admin UI)
    MOODLE_SMTP_HOST: str
    MOODLE_SMTP_PORT_NUMBER: str
    MOODLE_SMTP_USER: str
    MOODLE_SMTP_PASSWORD: str

    # PHP & web server
    PHP_BIN_DIR: str
    WEB_SERVER_TYPE: str
    WEB_SERVER_DAEMON_USER: str
    WEB_SERVER_DAEMON_GROUP: str
    WEB_SERVER_HTTP_PORT_NUMBER: str
    WEB_SERVER_HTTPS_PORT_NUMBER: str
    WEB_SERVER_DEFAULT_HTTP_PORT_NUMBER: str

    # Database wait budget
    DB_WAIT_MAX_ATTEMPTS: str
    DB_WAIT_SLEEP_SECONDS: str

    BITNAMI_DEBUG: str


def gather_env(
    env: Mapping[str, str] | MoodleEnv | None = None,
) -> MoodleEnv:
    """Return a mapping holding *all* entrypoint variables with defaults.

    Unknown keys are ignored, so callers may pass ``os.environ`` directly or
    the result of a previous call.
    """

    src = environ if env is None else env

    def _get(key: str, default: str = "") -> str:
        value = src.get(key)
        return default if value is None else str(value)

    volume_dir = _get("MOODLE_VOLUME_DIR", "/bitnami/moodle")

    return MoodleEnv(
        MOODLE_VOLUME_DIR=volume_dir,
        MOODLE_DATA_DIR=_get("MOODLE_DATA_DIR", "/bitnami/moodledata"),
        MOODLE_CONF_FILE=_get("MOODLE_CONF_FILE", f"{volume_dir}/config.php"),
        MOODLE_USERNAME=_get("MOODLE_USERNAME", "user"),
        MOODLE_PASSWORD=_get("MOODLE_PASSWORD", "bitnami"),
        MOODLE_EMAIL=_get("MOODLE_EMAIL", "user@example.com"),
        MOODLE_SITE_NAME=_get("MOODLE_SITE_NAME", "New Site"),
        MOODLE_CRON_MINUTES=_get("MOODLE_CRON_MINUTES", "1"),
        MOODLE_DATABASE_TYPE=_get("MOODLE_DATABASE_TYPE", "mariadb"),
        MOODLE_DATABASE_HOST=_get("MOODLE_DATABASE_HOST", "mariadb"),
        MOODLE_DATABASE_PORT_NUMBER=_get("MOODLE_DATABASE_PORT_NUMBER", "3306"),
        MOODLE_DATABASE_NAME=_get("MOODLE_DATABASE_NAME", "bitnami_moodle"),
        MOODLE_DATABASE_USER=_get("MOODLE_DATABASE_USER", "bn_moodle"),
        MOODLE_DATABASE_PASSWORD=_get("MOODLE_DATABASE_PASSWORD"),
        MOODLE_DATABASE_MIN_VERSION=_get("MOODLE_DATABASE_MIN_VERSION"),
        ALLOW_EMPTY_PASSWORD=_get("ALLOW_EMPTY_PASSWORD", "no"),
        MOODLE_SMTP_HOST=_get("MOODLE_SMTP_HOST"),
        MOODLE_SMTP_PORT_NUMBER=_get("MOODLE_SMTP_PORT_NUMBER"),
        MOODLE_SMTP_USER=_get("MOODLE_SMTP_USER"),
        MOODLE_SMTP_PASSWORD=_get("MOODLE_SMTP_PASSWORD"),
        PHP_BIN_DIR=_get("PHP_BIN_DIR", "/opt/bitnami/php/bin"),
        WEB_SERVER_TYPE=_get("WEB_SERVER_TYPE", "apache"),
        WEB_SERVER_DAEMON_USER=_get("WEB_SERVER_DAEMON_USER", "daemon"),
        WEB_SERVER_DAEMON_GROUP=_get("WEB_SERVER_DAEMON_GROUP", "daemon"),
        WEB_SERVER_HTTP_PORT_NUMBER=_get("WEB_SERVER_HTTP_PORT_NUMBER"),
        WEB_SERVER_HTTPS_PORT_NUMBER=_get("WEB_SERVER_HTTPS_PORT_NUMBER"),
        WEB_SERVER_DEFAULT_HTTP_PORT_NUMBER=_get("WEB_SERVER_DEFAULT_HTTP_PORT_NUMBER", "8080"),
        DB_WAIT_MAX_ATTEMPTS=_get("DB_WAIT_MAX_ATTEMPTS", "12"),
        DB_WAIT_SLEEP_SECONDS=_get("DB_WAIT_SLEEP_SECONDS", "5"),
        BITNAMI_DEBUG=_get("BITNAMI_DEBUG", "false"),
    )


# ---------------------------------------------------------------------------
#  Generic helpers - previously provided by libvalidations.sh / libfs.sh
# ---------------------------------------------------------------------------


def is_boolean_yes(value: str | None) -> bool:
    """Return *True* for ``1``, ``yes`` or ``true`` (case-insensitive)."""

    return bool(value) and str(value).strip().lower() in _TRUTHY


def is_dir_empty(path: Path | str) -> bool:
    """Return *True* when *path* is missing or contains no entries.

    Mounted volumes are treated the same way: an empty mount point is as
    good as an absent directory for the purpose of the setup logic.
    """

    p = Path(path)
    if not p.is_dir():
        return True
    return not any(p.iterdir())


def http_port(env: MoodleEnv | None = None) -> str:
    """Return the HTTP port the site is reachable on inside the container."""

    env = gather_env(env)
    return env["WEB_SERVER_HTTP_PORT_NUMBER"] or env["WEB_SERVER_DEFAULT_HTTP_PORT_NUMBER"]


def _is_root() -> bool:
    return os.geteuid() == 0


# ---------------------------------------------------------------------------
#  Validation
# ---------------------------------------------------------------------------


def validate_web_server(env: MoodleEnv | None = None) -> bool:
    """Return *True* when the web-server settings are usable.

    Only the settings that the Moodle setup depends on are checked: the
    server flavour and the HTTP/HTTPS port numbers.  Each problem is logged
    so that operators see every mistake in a single run.
    """

    env = gather_env(env)
    ok = True

    if env["WEB_SERVER_TYPE"] not in SUPPORTED_WEB_SERVERS:
        _log(
            f"The allowed values for WEB_SERVER_TYPE are: {' '.join(SUPPORTED_WEB_SERVERS)}",
            "ERROR",
        )
        ok = False

    ports: dict[str, int] = {}
    for key in ("WEB_SERVER_HTTP_PORT_NUMBER", "WEB_SERVER_HTTPS_PORT_NUMBER"):
        raw = env[key]  # type: ignore[literal-required]
        if not raw:
            continue
        try:
            port = int(raw)
        except ValueError:
            port = 0
        if not 1 <= port <= 65535:
            _log(f"An invalid port was specified in the environment variable {key}: {raw}", "ERROR")
            ok = False
            continue
        ports[key] = port

    if len(ports) == 2 and len(set(ports.values())) == 1:
        _log(
            "WEB_SERVER_HTTP_PORT_NUMBER and WEB_SERVER_HTTPS_PORT_NUMBER are bound to the same port",
            "ERROR",
        )
        ok = False

    return ok


def validate(env: MoodleEnv | None = None) -> bool:
    """Validate settings in the ``MOODLE_*`` environment variables.

    Rules inherited from ``moodle_validate``:

    1. Empty passwords are rejected unless ``ALLOW_EMPTY_PASSWORD`` is set,
       in which case a warning reminds operators not to do so in production.
    2. When an SMTP host is configured the credentials are *recommended*
       (warning) while the port is *required* (error).
    3. A ``moodledata`` directory inside the Moodle volume (layout of older
       images) triggers a deprecation warning when the dedicated data volume
       is empty.
    4. Only MySQL (``mysqli``) and MariaDB are supported.
    5. The web server settings must validate.

    Errors are accumulated rather than raised; the caller decides whether a
    ``False`` return aborts the container.
    """

    env = gather_env(env)
    _debug("Validating settings in MOODLE_* environment variables...", env)
    errors = 0

    def _error(message: str) -> None:
        nonlocal errors
        _log(message, "ERROR")
        errors += 1

    # Credentials
    if is_boolean_yes(env["ALLOW_EMPTY_PASSWORD"]):
        _log(
            f"You set the environment variable ALLOW_EMPTY_PASSWORD={env['ALLOW_EMPTY_PASSWORD']}. "
            "For safety reasons, do not use this flag in a production environment.",
            "WARNING",
        )
    else:
        for key in ("MOODLE_DATABASE_PASSWORD", "MOODLE_PASSWORD"):
            if not env[key]:  # type: ignore[literal-required]
                _error(
                    f"The {key} environment variable is empty or not set. Set the environment "
                    "variable ALLOW_EMPTY_PASSWORD=yes to allow a blank password. This is only "
                    "recommended for development environments."
                )

    # SMTP
    if env["MOODLE_SMTP_HOST"]:
        for key in ("MOODLE_SMTP_USER", "MOODLE_SMTP_PASSWORD"):
            if not env[key]:  # type: ignore[literal-required]
                _log(f"The {key} environment variable is empty or not set.", "WARNING")
        if not env["MOODLE_SMTP_PORT_NUMBER"]:
            _error("The MOODLE_SMTP_PORT_NUMBER environment variable is empty or not set.")

    # Legacy 'moodledata' inside the htdocs volume
    legacy_data = Path(env["MOODLE_VOLUME_DIR"]) / "moodledata"
    if is_dir_empty(env["MOODLE_DATA_DIR"]) and legacy_data.is_dir():
        _log(
            f"Found 'moodledata' directory inside {env['MOODLE_VOLUME_DIR']}. Support for this "
            "configuration is deprecated and will be removed soon. Please create a new volume "
            f"mountpoint at {env['MOODLE_DATA_DIR']}, and copy all its files there.",
            "WARNING",
        )

    if env["MOODLE_DATABASE_TYPE"] not in SUPPORTED_DATABASE_TYPES:
        _error(
            "The allowed values for MOODLE_DATABASE_TYPE are: "
            + " ".join(SUPPORTED_DATABASE_TYPES)
        )

    if not validate_web_server(env):
        _error("Web server validation failed")

    return errors == 0


# ---------------------------------------------------------------------------
#  config.php / environment.xml helpers
# ---------------------------------------------------------------------------


def fix_manageddb_check(env: MoodleEnv | None = None) -> None:
    """Lower the minimum MySQL/MariaDB version required by the installer.

    Managed database offerings (Azure Database for MariaDB in particular)
    report a version string that Moodle's environment check misreads, which
    makes ``install.php`` refuse to continue.  The requirement in
    ``admin/environment.xml`` is rewritten to ``MOODLE_DATABASE_MIN_VERSION``
    for both vendors.
    """

    from tools.src import moodle_config

    env = gather_env(env)
    version = env["MOODLE_DATABASE_MIN_VERSION"]
    _log(f"Changing minimum required MariaDB version to {version}")

    env_xml = str(Path(env["MOODLE_VOLUME_DIR"]) / "admin" / "environment.xml")
    for vendor in ("mariadb", "mysql"):
        moodle_config.replace_in_file(
            env_xml,
            rf'name="{vendor}" version="[^"]+"',
            f'name="{vendor}" version="{version}"',
        )


def conf_get(key: str, env: MoodleEnv | None = None) -> str:
    """Return the value of *key* from ``config.php`` (see moodle_config.conf_get)."""

    from tools.src import moodle_config

    env = gather_env(env)
    _debug(f"Getting {key} from Moodle configuration", env)
    return moodle_config.conf_get(key, env["MOODLE_CONF_FILE"])


def configure_wwwroot(env: MoodleEnv | None = None) -> bool:
    """Make ``$CFG->wwwroot`` follow the ``Host`` header of each request.

    The installer writes a static ``http://localhost:<port>`` URL which only
    works from inside the container.  The assignment is replaced with a PHP
    block deriving the URL (and scheme) from the incoming request.
    """

    from tools.src import moodle_config

    env = gather_env(env)
    return moodle_config.configure_wwwroot(env["MOODLE_CONF_FILE"], http_port(env))


# ---------------------------------------------------------------------------
#  Database
# ---------------------------------------------------------------------------


def wait_for_database(
    host: str,
    port: int | str,
    name: str,
    user: str,
    password: str = "",
    env: MoodleEnv | None = None,
) -> None:
    """Block until the MySQL/MariaDB database accepts the given credentials.

    The polling itself lives in ``tools/src/wait_for_mysql.py`` which exits
    the process with status 1 once the retry budget is exhausted.
    """

    from tools.src import wait_for_mysql as _wfm

    for label, value in (("host", host), ("port", port), ("name", name), ("user", user)):
        if not value:
            raise ValueError(f"missing database {label}")

    env = gather_env(env)
    _log("Trying to connect to the database server")
    _wfm.wait_for_mysql(
        user=user,
        password=password,
        host=host,
        port=int(port),
        dbname=name,
        max_attempts=int(env["DB_WAIT_MAX_ATTEMPTS"]),
        sleep_seconds=int(env["DB_WAIT_SLEEP_SECONDS"]),
    )


# ---------------------------------------------------------------------------
#  PHP CLI scripts
# ---------------------------------------------------------------------------


def database_install_args(env: MoodleEnv | None = None) -> list[str]:
    """Return the ``install.php`` database switches derived from the env."""

    env = gather_env(env)
    return [
        f"--dbtype={env['MOODLE_DATABASE_TYPE']}",
        f"--dbhost={env['MOODLE_DATABASE_HOST']}",
        f"--dbport={env['MOODLE_DATABASE_PORT_NUMBER']}",
        f"--dbname={env['MOODLE_DATABASE_NAME']}",
        f"--dbuser={env['MOODLE_DATABASE_USER']}",
        f"--dbpass={env['MOODLE_DATABASE_PASSWORD']}",
    ]


def build_install_command(env: MoodleEnv | None = None, extra_args: Sequence[str] = ()) -> list[str]:
    """Return the ``admin/cli/install.php`` command line."""

    env = gather_env(env)
    return [
        f"{env['PHP_BIN_DIR']}/php",
        "admin/cli/install.php",
        "--lang=en",
        "--chmod=2775",
        f"--wwwroot=http://localhost:{http_port(env)}",
        f"--dataroot={env['MOODLE_DATA_DIR']}",
        f"--adminuser={env['MOODLE_USERNAME']}",
        f"--adminpass={env['MOODLE_PASSWORD']}",
        f"--adminemail={env['MOODLE_EMAIL']}",
        f"--fullname={env['MOODLE_SITE_NAME']}",
        f"--shortname={env['MOODLE_SITE_NAME']}",
        "--non-interactive",
        "--allow-unstable",
        "--agree-license",
        *extra_args,
    ]


def build_upgrade_command(env: MoodleEnv | None = None) -> list[str]:
    """Return the ``admin/cli/upgrade.php`` command line."""

    env = gather_env(env)
    return [
        f"{env['PHP_BIN_DIR']}/php",
        "admin/cli/upgrade.php",
        "--non-interactive",
        "--allow-unstable",
    ]


def _run_php(cmd: list[str], env: MoodleEnv) -> None:
    """Run *cmd* inside the Moodle volume, as the daemon user when root."""

    import subprocess

    _debug(f"Executing: {' '.join(cmd)}", env)
    kwargs: dict[str, str] = {}
    if _is_root():
        kwargs = {
            "user": env["WEB_SERVER_DAEMON_USER"],
            "group": env["WEB_SERVER_DAEMON_GROUP"],
        }
    subprocess.run(cmd, check=True, cwd=env["MOODLE_VOLUME_DIR"], **kwargs)


def install(env: MoodleEnv | None = None, extra_args: Sequence[str] = ()) -> None:
    """Run the Moodle CLI installer.

    *extra_args* are appended verbatim; :pyfunc:`setup` passes the database
    switches from :pyfunc:`database_install_args`.  When running as root the
    freshly written ``config.php`` is handed back to *root* with the daemon
    group and mode ``644`` so that the web server can read but not modify it.
    """

    import shutil

    env = gather_env(env)

    if env["MOODLE_DATABASE_MIN_VERSION"]:
        fix_manageddb_check(env)

    _log("Running Moodle installer")
    _run_php(build_install_command(env, extra_args), env)

    if _is_root():
        conf = env["MOODLE_CONF_FILE"]
        os.chmod(conf, 0o644)
        shutil.chown(conf, user="root", group=env["WEB_SERVER_DAEMON_GROUP"])


def upgrade(env: MoodleEnv | None = None) -> None:
    """Run the Moodle database schema upgrade script."""

    env = gather_env(env)
    _run_php(build_upgrade_command(env), env)


# ---------------------------------------------------------------------------
#  Restore helpers
# ---------------------------------------------------------------------------


def clear_sessions(env: MoodleEnv | None = None) -> int:
    """Delete file sessions left over by a previous container run.

    Sessions persisted on the data volume are considered closed by the new
    server process, which locks users out until they clear their cookies.
    Returns the number of removed files.  Legacy installs without a
    ``sessions`` directory are skipped.
    """

    env = gather_env(env)
    sessions = Path(env["MOODLE_DATA_DIR"]) / "sessions"
    if is_dir_empty(sessions):
        return 0

    removed = 0
    for entry in sessions.rglob("sess_*"):
        if entry.is_file():
            entry.unlink()
            removed += 1
    _debug(f"Removed {removed} stale session file(s) from {sessions}", env)
    return removed


def configure_cron(env: MoodleEnv | None = None) -> bool:
    """Register the Moodle cron job; returns *False* when skipped.

    Writing to ``/etc/cron.d`` requires root, so unprivileged containers
    only get a warning.
    """

    from tools.src import moodle_cron

    env = gather_env(env)
    if not _is_root():
        _log("Skipping cron configuration for Moodle because of running as a non-root user", "WARNING")
        return False

    command = (
        f"{env['PHP_BIN_DIR']}/php {env['MOODLE_VOLUME_DIR']}/admin/cli/cron.php"
        f" > /dev/null 2>> {env['MOODLE_DATA_DIR']}/moodle-cron.log"
    )
    moodle_cron.generate_cron_conf(
        "moodle",
        command,
        run_as=env["WEB_SERVER_DAEMON_USER"],
        schedule=f"*/{env['MOODLE_CRON_MINUTES']} * * * *",
    )
    return True


def is_app_initialized(env: MoodleEnv | None = None) -> bool:
    """Return *True* when the Moodle volume holds a previous installation."""

    env = gather_env(env)
    return Path(env["MOODLE_CONF_FILE"]).is_file()


def initialize(env: MoodleEnv | None = None) -> None:
    """Restore a persisted Moodle installation.

    Database coordinates are read back from ``config.php`` rather than from
    the environment because the persisted file is authoritative once the
    site has been installed.
    """

    env = gather_env(env)
    _log("Restoring persisted Moodle installation")

    db_type = conf_get("$CFG->dbtype", env)
    if db_type in SUPPORTED_DATABASE_TYPES:
        wait_for_database(
            conf_get("$CFG->dbhost", env),
            conf_get("'dbport'", env) or env["MOODLE_DATABASE_PORT_NUMBER"],
            conf_get("$CFG->dbname", env),
            conf_get("$CFG->dbuser", env),
            conf_get("$CFG->dbpass", env),
            env=env,
        )

    _log("Running database upgrade")
    upgrade(env)

    clear_sessions(env)
    configure_cron(env)


# ---------------------------------------------------------------------------
#  Top-level flow
# ---------------------------------------------------------------------------


def setup(env: MoodleEnv | None = None) -> None:
    """Run the complete, idempotent setup sequence.

    1. Validate the environment - abort with exit status 1 on error.
    2. Persisted volume → :pyfunc:`initialize` (wait, upgrade, sessions,
       cron).
    3. Fresh volume → wait for the database configured in the environment,
       install, patch ``wwwroot`` and register cron.
    """

    env = gather_env(env)

    if not validate(env):
        _log("Environment validation failed, aborting", "FATAL")
        sys.exit(1)

    if is_app_initialized(env):
        initialize(env)
        return

    _log("Installing Moodle for the first time")
    wait_for_database(
        env["MOODLE_DATABASE_HOST"],
        env["MOODLE_DATABASE_PORT_NUMBER"],
        env["MOODLE_DATABASE_NAME"],
        env["MOODLE_DATABASE_USER"],
        env["MOODLE_DATABASE_PASSWORD"],
        env=env,
    )
    install(env, database_install_args(env))
    configure_wwwroot(env)
    configure_cron(env)
    _log("Moodle setup finished")


def main(argv: Sequence[str] | None = None) -> None:
    """Run :pyfunc:`setup` then ``exec`` the remaining arguments, if any.

    The container passes the web-server start command as arguments so that
    it replaces this process and becomes *PID 1*, exactly like the
    ``exec "$@"`` at the end of the historical shell entry-point.
    """

    args = list(sys.argv[1:] if argv is None else argv)

    try:
        setup(gather_env())
    except SystemExit:
        raise
    except Exception as exc:
        _log(str(exc), "FATAL")
        sys.exit(1)

    if args:
        os.execvp(args[0], args)


if __name__ == "__main__":  # pragma: no cover
    main()
