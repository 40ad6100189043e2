"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from recruit_portal import __version__
from recruit_portal.cli import app, parse_skills
from recruit_portal.config import settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def keep_logging_config(monkeypatch):
    # Logging set up inside CliRunner would point at its temporary streams
    monkeypatch.setattr("recruit_portal.cli.configure_logging", lambda level=None: None)


class TestCLI:
    """Test suite for the recruit CLI."""

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_config_hides_anon_key(self, monkeypatch):
        monkeypatch.setattr(settings, "anon_key", "very-secret-key")
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "very-secret-key" not in result.stdout
        assert "configured" in result.stdout

    def test_whoami_logged_out(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "session_file", str(tmp_path / "session.json"))
        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 1
        assert "Not logged in" in result.stdout

    def test_rank_requires_login(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "session_file", str(tmp_path / "session.json"))
        result = runner.invoke(app, ["rank", "job-1"])

        assert result.exit_code == 1

    def test_create_job_requires_login(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "session_file", str(tmp_path / "session.json"))
        result = runner.invoke(app, ["create-job", "--title", "Data Engineer", "--skills", "Python, SQL"])

        assert result.exit_code == 1
        assert "Not logged in" in result.stdout

    def test_edit_job_requires_login(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "session_file", str(tmp_path / "session.json"))
        result = runner.invoke(app, ["edit-job", "job-1", "--status", "closed"])

        assert result.exit_code == 1
        assert "Not logged in" in result.stdout

    def test_parse_skills(self):
        assert parse_skills(" Python, ,SQL ,") == ["Python", "SQL"]
