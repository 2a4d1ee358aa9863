import json

from click.testing import CliRunner

from portfolio_github import cli as root_cli

API = "https://api.github.com"


def test_cli_help_shows_without_args():
    runner = CliRunner()
    result = runner.invoke(root_cli, ["--help"])
    assert result.exit_code == 0
    assert "portfolio-github" in result.output


def test_missing_token_shows_friendly_error(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    runner = CliRunner()
    result = runner.invoke(root_cli, ["repo", "octo/hello"])
    assert result.exit_code != 0
    assert "GITHUB_TOKEN is required" in result.output


def test_repo_json(httpx_mock, monkeypatch, repo_payload):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    httpx_mock.add_response(method="GET", url=f"{API}/repos/octo/hello", json=repo_payload())

    runner = CliRunner()
    result = runner.invoke(
        root_cli, ["repo", "octo/hello", "--format", "json"], catch_exceptions=False
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["full_name"] == "octo/hello"
    assert data["stargazers_count"] == 42


def test_repo_table(httpx_mock, monkeypatch, repo_payload):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    httpx_mock.add_response(method="GET", url=f"{API}/repos/octo/hello", json=repo_payload())

    runner = CliRunner()
    result = runner.invoke(root_cli, ["repo", "octo/hello"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "octo/hello" in result.output
    assert "Hello world" in result.output


def test_repo_not_found(httpx_mock, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    httpx_mock.add_response(
        method="GET",
        url=f"{API}/repos/octo/missing",
        status_code=404,
        json={"message": "Not Found"},
    )

    runner = CliRunner()
    result = runner.invoke(root_cli, ["repo", "octo/missing"])

    assert result.exit_code == 1
    assert "404" in result.output


def test_languages_failure_prints_empty_mapping(httpx_mock, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    httpx_mock.add_response(method="GET", url=f"{API}/repos/octo/hello/languages", status_code=500)

    runner = CliRunner()
    result = runner.invoke(
        root_cli, ["--log-level", "CRITICAL", "languages", "octo/hello", "--format", "json"]
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {}


def test_rate_limit_table(httpx_mock, monkeypatch, rate_limit_payload):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    httpx_mock.add_response(method="GET", url=f"{API}/rate_limit", json=rate_limit_payload)

    runner = CliRunner()
    result = runner.invoke(root_cli, ["rate-limit"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "GitHub Rate Limit" in result.output
    assert "4990" in result.output


def test_repos_report_uses_configured_repositories(httpx_mock, monkeypatch, repo_payload):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("GITHUB_REPOS", "octo/hello,octo/gone")
    httpx_mock.add_response(method="GET", url=f"{API}/repos/octo/hello", json=repo_payload())
    httpx_mock.add_response(method="GET", url=f"{API}/repos/octo/gone", status_code=404)

    runner = CliRunner()
    result = runner.invoke(
        root_cli, ["--log-level", "CRITICAL", "repos", "--format", "json"], catch_exceptions=False
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["summary"]["successful"] == 1
    assert data["summary"]["failed"] == 1
    assert data["results"]["octo/gone"] is None


def test_repos_without_targets(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.delenv("GITHUB_REPOS", raising=False)

    runner = CliRunner()
    result = runner.invoke(root_cli, ["repos"])

    assert result.exit_code == 2
    assert "GITHUB_REPOS" in result.output
