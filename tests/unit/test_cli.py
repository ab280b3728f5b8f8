import json
from pathlib import Path

import pytest
import yaml

from hbac.cli import main


@pytest.fixture(autouse=True)
def _fixed_host_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("socket.gethostname", lambda: "cli-host.example.com")
    monkeypatch.delenv("HBAC_CONFIG", raising=False)
    monkeypatch.delenv("HBAC_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HBAC_LOG_FILE", raising=False)


def test_init_command_writes_config(tmp_path: Path) -> None:
    config_path = tmp_path / "pam_hbac.conf"
    rc = main(["init", "--config", str(config_path)])
    assert rc == 0
    assert config_path.exists()
    assert main(["init", "--config", str(config_path)]) == 1
    assert main(["init", "--config", str(config_path), "--force"]) == 0


def test_show_command_prints_redacted_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "pam_hbac.conf"
    config_path.write_text("uri = ldap://dc1\nbind_dn = uid=svc\nbind_pw = hunter2\n", encoding="utf-8")
    rc = main(["show", "--config", str(config_path)])
    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["uri"] == "ldap://dc1"
    assert payload["bind_dn"] == "uid=svc"
    assert payload["bind_pw"] != "hunter2"
    assert payload["host_name"] == "cli-host.example.com"
    assert payload["timeout"] == 5


def test_show_command_supports_yaml_and_secrets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "pam_hbac.conf"
    config_path.write_text("bind_pw = hunter2\n", encoding="utf-8")
    rc = main(["show", "--config", str(config_path), "--format", "yaml", "--show-secrets"])
    assert rc == 0
    payload = yaml.safe_load(capsys.readouterr().out)
    assert payload["bind_pw"] == "hunter2"
    assert payload["uri"] == "ldap://localhost"


def test_show_command_reads_path_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = tmp_path / "env.conf"
    config_path.write_text("search_base = dc=env\n", encoding="utf-8")
    monkeypatch.setenv("HBAC_CONFIG", str(config_path))
    assert main(["show"]) == 0
    assert json.loads(capsys.readouterr().out)["search_base"] == "dc=env"


def test_check_command_reports_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "pam_hbac.conf"
    config_path.write_text("# nothing but comments\n", encoding="utf-8")
    rc = main(["check", "--config", str(config_path)])
    assert rc == 0
    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is True
    assert result["error"] is None


def test_check_command_reports_malformed_line(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "pam_hbac.conf"
    config_path.write_text("uri = ldap://dc1\nno_equals_sign_here\n", encoding="utf-8")
    rc = main(["check", "--config", str(config_path)])
    assert rc == 1
    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is False
    assert result["error"] == "malformed_line"
    assert result["line_number"] == 2


def test_check_command_reports_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["check", "--config", str(tmp_path / "missing.conf")])
    assert rc == 1
    result = json.loads(capsys.readouterr().out)
    assert result["error"] == "cannot_open_file"


def test_log_file_option_receives_diagnostics(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "hbac.log"
    missing = tmp_path / "missing.conf"
    rc = main(["--log-file", str(log_file), "--log-level", "DEBUG", "check", "--config", str(missing)])
    assert rc == 1
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    critical = [record for record in records if record["log"]["level"] == "critical"]
    assert len(critical) == 1
    assert critical[0]["file"]["path"] == str(missing)
    assert critical[0]["event"]["outcome"] == "failure"


def test_log_file_never_contains_bind_password(tmp_path: Path) -> None:
    log_file = tmp_path / "hbac.log"
    config_path = tmp_path / "pam_hbac.conf"
    config_path.write_text("bind_dn = uid=svc\nbind_pw = hunter2\n", encoding="utf-8")
    rc = main(["--log-file", str(log_file), "--log-level", "DEBUG", "show", "--config", str(config_path)])
    assert rc == 0
    content = log_file.read_text(encoding="utf-8")
    assert "bind_dn: uid=svc" in content
    assert "hunter2" not in content


def test_invalid_log_level_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main(["--log-level", "verbose", "check"])
