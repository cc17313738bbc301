"""Unit-tests covering the PHP CLI wrappers: install, upgrade and the
managed-database version hack.

No PHP binary is required - :pyfunc:`subprocess.run` is replaced by a spy.
"""

from __future__ import annotations

import stat
import subprocess
from pathlib import Path
from typing import Any

import pytest

import entrypoint.entrypoint as ep


class _RunRecorder:
    """Spy replacement for :pyfunc:`subprocess.run`."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:  # noqa: D401
        self.calls.append((list(cmd), kwargs))
        return subprocess.CompletedProcess(cmd, 0)


@pytest.fixture()
def moodle_env(tmp_path: Path) -> dict[str, str]:  # noqa: D103 – pytest fixture
    volume = tmp_path / "moodle"
    volume.mkdir()
    return ep.gather_env(
        {
            "MOODLE_VOLUME_DIR": str(volume),
            "MOODLE_DATA_DIR": str(tmp_path / "moodledata"),
            "MOODLE_USERNAME": "admin",
            "MOODLE_PASSWORD": "s3cret",
            "MOODLE_EMAIL": "admin@example.org",
            "MOODLE_SITE_NAME": "Campus",
            "MOODLE_DATABASE_PASSWORD": "dbpw",
            "PHP_BIN_DIR": "/opt/php/bin",
        }
    )


@pytest.fixture()
def recorder(monkeypatch: pytest.MonkeyPatch) -> _RunRecorder:  # noqa: D103
    rec = _RunRecorder()
    monkeypatch.setattr(subprocess, "run", rec)
    return rec


def test_build_install_command(moodle_env: dict[str, str]) -> None:
    cmd = ep.build_install_command(moodle_env, ["--dbtype=mariadb"])

    assert cmd == [
        "/opt/php/bin/php",
        "admin/cli/install.php",
        "--lang=en",
        "--chmod=2775",
        "--wwwroot=http://localhost:8080",
        f"--dataroot={moodle_env['MOODLE_DATA_DIR']}",
        "--adminuser=admin",
        "--adminpass=s3cret",
        "--adminemail=admin@example.org",
        "--fullname=Campus",
        "--shortname=Campus",
        "--non-interactive",
        "--allow-unstable",
        "--agree-license",
        "--dbtype=mariadb",
    ]


def test_install_command_uses_configured_port(moodle_env: dict[str, str]) -> None:
    env = ep.gather_env({**moodle_env, "WEB_SERVER_HTTP_PORT_NUMBER": "80"})

    assert "--wwwroot=http://localhost:80" in ep.build_install_command(env)


def test_database_install_args(moodle_env: dict[str, str]) -> None:
    assert ep.database_install_args(moodle_env) == [
        "--dbtype=mariadb",
        "--dbhost=mariadb",
        "--dbport=3306",
        "--dbname=bitnami_moodle",
        "--dbuser=bn_moodle",
        "--dbpass=dbpw",
    ]


def test_install_as_unprivileged_user(monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str], recorder: _RunRecorder) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: False)

    ep.install(moodle_env)

    assert len(recorder.calls) == 1
    cmd, kwargs = recorder.calls[0]
    assert cmd[1] == "admin/cli/install.php"
    assert kwargs == {"check": True, "cwd": moodle_env["MOODLE_VOLUME_DIR"]}


def test_install_as_root_runs_as_daemon_and_locks_config(
    monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str], recorder: _RunRecorder
) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: True)
    conf = Path(moodle_env["MOODLE_CONF_FILE"])
    conf.write_text("<?php\n", encoding="utf-8")
    conf.chmod(0o666)

    chowns: list[tuple[str, str, str]] = []
    monkeypatch.setattr("shutil.chown", lambda path, user, group: chowns.append((path, user, group)))

    ep.install(moodle_env)

    _, kwargs = recorder.calls[0]
    assert kwargs["user"] == "daemon"
    assert kwargs["group"] == "daemon"
    assert stat.S_IMODE(conf.stat().st_mode) == 0o644
    assert chowns == [(str(conf), "root", "daemon")]


def test_install_applies_manageddb_hack(
    monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str], recorder: _RunRecorder
) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: False)
    env_xml = Path(moodle_env["MOODLE_VOLUME_DIR"]) / "admin" / "environment.xml"
    env_xml.parent.mkdir(parents=True)
    env_xml.write_text(
        '<DATABASE level="required">\n'
        '  <VENDOR name="mariadb" version="10.6.7" />\n'
        '  <VENDOR name="mysql" version="8.0" />\n'
        '  <VENDOR name="postgres" version="13" />\n'
        "</DATABASE>\n",
        encoding="utf-8",
    )

    ep.install(ep.gather_env({**moodle_env, "MOODLE_DATABASE_MIN_VERSION": "5.6"}))

    content = env_xml.read_text(encoding="utf-8")
    assert '<VENDOR name="mariadb" version="5.6" />' in content
    assert '<VENDOR name="mysql" version="5.6" />' in content
    assert '<VENDOR name="postgres" version="13" />' in content
    assert len(recorder.calls) == 1


def test_install_skips_manageddb_hack_by_default(
    monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str], recorder: _RunRecorder
) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: False)
    monkeypatch.setattr(ep, "fix_manageddb_check", lambda _env=None: pytest.fail("hack must not run"))

    ep.install(moodle_env)


def test_install_failure_propagates(monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str]) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: False)

    def _fail(cmd: list[str], **_kw: Any) -> None:
        raise subprocess.CalledProcessError(returncode=1, cmd=cmd)

    monkeypatch.setattr(subprocess, "run", _fail)

    with pytest.raises(subprocess.CalledProcessError):
        ep.install(moodle_env)


def test_upgrade_command(moodle_env: dict[str, str]) -> None:
    assert ep.build_upgrade_command(moodle_env) == [
        "/opt/php/bin/php",
        "admin/cli/upgrade.php",
        "--non-interactive",
        "--allow-unstable",
    ]


@pytest.mark.parametrize("root", [True, False])
def test_upgrade_runs_in_volume(
    monkeypatch: pytest.MonkeyPatch, moodle_env: dict[str, str], recorder: _RunRecorder, root: bool
) -> None:
    monkeypatch.setattr(ep, "_is_root", lambda: root)

    ep.upgrade(moodle_env)

    cmd, kwargs = recorder.calls[0]
    assert cmd == ep.build_upgrade_command(moodle_env)
    assert kwargs["cwd"] == moodle_env["MOODLE_VOLUME_DIR"]
    assert ("user" in kwargs) is root
