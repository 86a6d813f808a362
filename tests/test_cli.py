"""Tests for the command line entrypoint."""

import json

import pytest

from conftest import TOKEN_PATH, envelope, token_body
from learnworlds.cli import build_parser, main, run_command

ENV = {
    "LEARNWORLDS_SCHOOL_DOMAIN": "testschool",
    "LEARNWORLDS_API_HOST": "api.testschool.learnworlds.com",
    "LEARNWORLDS_CLIENT_ID": "cid",
    "LEARNWORLDS_CLIENT_SECRET": "secret",
}


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Environment for main(), isolated from any local .env file."""
    monkeypatch.chdir(tmp_path)
    for name in list(ENV) + [
        "LEARNWORLDS_REDIRECT_URI",
        "LEARNWORLDS_ACCESS_TOKEN",
        "LEARNWORLDS_REFRESH_TOKEN",
    ]:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestRunCommand:
    """Tests for command dispatch."""

    @pytest.mark.asyncio
    async def test_authorize_url(self, config, server):
        args = build_parser().parse_args(["authorize-url", "--state", "xyz"])

        url = await run_command(args, config, transport=server.transport)

        assert url.startswith("https://testschool.learnworlds.com/oauth2/authorize?")
        assert "state=xyz" in url
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_token(self, config, server):
        server.add("POST", TOKEN_PATH, (200, token_body("a1")))
        args = build_parser().parse_args(["token"])

        result = await run_command(args, config, transport=server.transport)

        assert result["access_token"] == "a1"
        assert "scope=" not in server.requests[0].text

    @pytest.mark.asyncio
    async def test_courses_authenticates_first(self, config, server):
        server.add("POST", TOKEN_PATH, (200, token_body("a1")))
        server.add("GET", "/v2/courses", (200, envelope([{"id": "c1"}])))
        args = build_parser().parse_args(["courses", "--per-page", "5"])

        result = await run_command(args, config, transport=server.transport)

        assert result == [{"id": "c1"}]
        request = server.calls("GET", "/v2/courses")[0]
        assert request.headers["authorization"] == "Bearer a1"
        assert request.params == {"per_page": "5"}

    @pytest.mark.asyncio
    async def test_enrollments(self, config, server):
        server.add("POST", TOKEN_PATH, (200, token_body("a1")))
        server.add("GET", "/v2/users/u1/enrollments", (200, envelope([])))
        args = build_parser().parse_args(["enrollments", "u1"])

        assert await run_command(args, config, transport=server.transport) == []


class TestMain:
    """Tests for the CLI entrypoint."""

    def test_missing_config(self, cli_env, capsys):
        assert main(["authorize-url"]) == 1
        assert "LEARNWORLDS_SCHOOL_DOMAIN is required" in capsys.readouterr().err

    def test_authorize_url(self, cli_env, capsys):
        for name, value in ENV.items():
            cli_env.setenv(name, value)
        cli_env.setenv("LEARNWORLDS_REDIRECT_URI", "https://app.com/cb")

        assert main(["authorize-url", "--scope", "read_user_profile"]) == 0

        out = capsys.readouterr().out.strip()
        assert out.startswith("https://testschool.learnworlds.com/oauth2/authorize?")
        assert "redirect_uri=https%3A%2F%2Fapp.com%2Fcb" in out

    def test_api_error_reported(self, cli_env, capsys, monkeypatch):
        for name, value in ENV.items():
            cli_env.setenv(name, value)

        async def failing(args, config, transport=None):
            from learnworlds.exceptions import ApiError, ErrorCode

            raise ApiError(ErrorCode.NOT_FOUND, "Resource not found", status=404)

        monkeypatch.setattr("learnworlds.cli.run_command", failing)

        assert main(["course", "missing"]) == 1
        error = json.loads(capsys.readouterr().err)
        assert error["code"] == "NOT_FOUND"
        assert error["status"] == 404
