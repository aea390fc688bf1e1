"""Tests for the command-line interface."""

from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from adihunt import cli as cli_module
from adihunt.cli import cli, split_list
from adihunt.database import get_db_session, get_session_factory
from adihunt.models import Project


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Point the CLI at a scratch database and log file with a signed-in user."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "adihunt.log"))
    monkeypatch.setenv("ADIHUNT_USER_ID", "cli-user")
    monkeypatch.setenv("ADIHUNT_USER_EMAIL", "cli@example.com")
    monkeypatch.setattr(cli_module.console, "width", 200)
    return tmp_path


def test_split_list():
    assert split_list("seo, notary ,,apostille") == ["seo", "notary", "apostille"]
    assert split_list(None) == []


def test_analyze_file(runner, env):
    page = env / "page.html"
    page.write_text("<h1>SEO Guide</h1><p>SEO SEO SEO</p>", encoding="utf-8")

    result = runner.invoke(cli, ["analyze", str(page), "-k", "SEO"])

    assert result.exit_code == 0, result.output
    assert "SEO Score" in result.output
    assert "80.00%" in result.output
    assert "Increase Content Length" in result.output


def test_insights(runner, env):
    result = runner.invoke(cli, [
        "insights", "--bounce-rate", "55", "--session-minutes", "1.5", "--conversion-rate", "5",
    ])

    assert result.exit_code == 0, result.output
    assert "High bounce rate detected" in result.output
    assert "Low session duration" in result.output
    assert "Conversion rate below" not in result.output


def test_project_create_and_list(runner, env):
    created = runner.invoke(cli, ["project", "create", "Blog", "--industry", "Legal"])
    assert created.exit_code == 0, created.output
    assert "Created project Blog" in created.output

    listed = runner.invoke(cli, ["project", "list"])
    assert listed.exit_code == 0, listed.output
    assert "Blog" in listed.output
    assert "Legal" in listed.output


def test_missing_identity_is_reported(runner, env, monkeypatch):
    monkeypatch.delenv("ADIHUNT_USER_ID")

    result = runner.invoke(cli, ["project", "list"])

    assert result.exit_code == 1
    assert "ADIHUNT_USER_ID" in result.output


def test_missing_article_is_reported(runner, env):
    result = runner.invoke(cli, ["article", "show", "no-such-article"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_workflow_round_trip(runner, env):
    assert runner.invoke(cli, ["project", "create", "Blog"]).exit_code == 0

    with get_db_session(get_session_factory()) as session:
        project_id = session.query(Project).one().id

    created = runner.invoke(cli, ["workflow", "create", project_id, "--complexity", "simple"])
    assert created.exit_code == 0, created.output
    assert "Created 6 steps (7.5 hours estimated)" in created.output


def test_assistant_guidance_needs_no_api(runner, env):
    result = runner.invoke(cli, ["assistant", "--action", "researching"])

    assert result.exit_code == 0, result.output
    assert "search intent" in result.output


def test_assistant_requires_message(runner, env):
    result = runner.invoke(cli, ["assistant"])
    assert result.exit_code == 2


def test_workflow_suggest(runner, env, monkeypatch):
    assert runner.invoke(cli, ["project", "create", "Blog", "--industry", "Legal"]).exit_code == 0
    with get_db_session(get_session_factory()) as session:
        project_id = session.query(Project).one().id

    helper = MagicMock()
    helper.workflow_suggestion.return_value = {
        "steps": [{"name": "Research", "duration": "1 day", "tasks": ["Keyword research"]}],
        "totalDuration": "1 day",
    }
    monkeypatch.setattr(cli_module, "SEOAssistant", MagicMock(return_value=helper))

    result = runner.invoke(cli, ["workflow", "suggest", project_id])

    assert result.exit_code == 0, result.output
    assert "Research" in result.output
    assert "Keyword research" in result.output
    assert "Total: 1 day" in result.output
    assert helper.workflow_suggestion.call_args.args[0]["industry"] == "Legal"


def test_workflow_suggest_unknown_project(runner, env):
    result = runner.invoke(cli, ["workflow", "suggest", "no-such-project"])

    assert result.exit_code == 1
    assert "not found" in result.output
