"""Tests for apiforge CLI commands."""

import textwrap

import pytest
from click.testing import CliRunner

from apiforge.cli.main import cli

VALID_DESIGN = """
def design(d):
    def api_body(d):
        d.title("Calculator")
        d.http(lambda d: d.path("/api"))

    d.api("calc", api_body)

    def accounts(d):
        d.server("https://calc.example.com")
        d.server("http://calc.example.com")
        d.http(lambda d: d.path("/accounts"))
        d.method("show", lambda d: d.http(lambda d: d.get("/{id}")))

    d.service("accounts", accounts)

    def users(d):
        def transport(d):
            d.path("/users")
            d.parent("accounts")

        d.http(transport)
        d.method("show", lambda d: d.http(lambda d: d.get("/{user_id}")))
        d.method("list", lambda d: d.http(lambda d: d.get("")))

    d.service("users", users)
"""

INVALID_DESIGN = """
def design(d):
    d.title("misplaced")
    d.api("calc")
    d.service("users", lambda d: d.http(lambda d: d.parent("missing")))
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def write_design(tmp_path):
    def write(source, name="design.py"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(source))
        return str(path)

    return write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("APIFORGE_ROOT_PATH", "APIFORGE_CANONICAL_ENDPOINT", "APIFORGE_SCHEME_MODE"):
        monkeypatch.delenv(var, raising=False)


class TestCLI:
    def test_help_describes_tool(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Evaluate Python API designs" in result.output
        assert "--verbose" in result.output

    def test_verbose_flag(self, runner, write_design):
        result = runner.invoke(cli, ["-v", "design", "validate", write_design(VALID_DESIGN)])
        assert result.exit_code == 0
        assert "Design is valid." in result.output


class TestDesignValidate:
    def test_valid_design(self, runner, write_design):
        result = runner.invoke(cli, ["design", "validate", write_design(VALID_DESIGN)])
        assert result.exit_code == 0
        assert "API calc: 2 service(s)" in result.output
        assert "accounts (1 endpoints)" in result.output
        assert "users (2 endpoints)" in result.output
        assert "Design is valid." in result.output

    def test_invalid_design(self, runner, write_design):
        result = runner.invoke(cli, ["design", "validate", write_design(INVALID_DESIGN)])
        assert result.exit_code == 1
        assert "invalid use of title() in TopExpr" in result.output
        assert "Parent service missing not found" in result.output
        assert "2 problem(s) found (1 structural, 1 validation)" in result.output

    def test_custom_entry(self, runner, write_design):
        path = write_design("def build(d):\n    d.api('calc')\n")
        result = runner.invoke(cli, ["design", "validate", path, "--entry", "build"])
        assert result.exit_code == 0
        assert "API calc: 0 service(s)" in result.output

    def test_missing_entry(self, runner, write_design):
        path = write_design("x = 1\n")
        result = runner.invoke(cli, ["design", "validate", path])
        assert result.exit_code == 1
        assert "does not define a callable 'design'" in result.output

    def test_import_error(self, runner, write_design):
        path = write_design("raise RuntimeError('broken file')\n")
        result = runner.invoke(cli, ["design", "validate", path])
        assert result.exit_code == 1
        assert "failed to import" in result.output
        assert "broken file" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["design", "validate", str(tmp_path / "nope.py")])
        assert result.exit_code != 0

    def test_invalid_config(self, runner, write_design, tmp_path):
        config = tmp_path / "apiforge.yaml"
        config.write_text("apiforge:\n  schemeMode: never\n")
        result = runner.invoke(
            cli,
            ["design", "validate", write_design(VALID_DESIGN), "--config", str(config)],
        )
        assert result.exit_code == 1
        assert "Unknown scheme mode 'never'" in result.output


class TestDesignPaths:
    def test_shows_paths(self, runner, write_design):
        result = runner.invoke(cli, ["design", "paths", write_design(VALID_DESIGN)])
        assert result.exit_code == 0
        assert "  path: /api/accounts" in result.output
        assert "  href: /api/accounts/{id}" in result.output
        assert "  schemes: http, https" in result.output
        assert "  path: /api/accounts/{id}/users" in result.output
        assert "  href: /api/accounts/{id}/users/{user_id}" in result.output

    def test_config_file_sets_root_path(self, runner, write_design, tmp_path):
        config = tmp_path / "apiforge.yaml"
        config.write_text("apiforge:\n  rootPath: /v1\n")
        source = """
        def design(d):
            d.api("calc")
            d.service("users", lambda d: d.http(lambda d: d.path("/users")))
        """
        result = runner.invoke(
            cli, ["design", "paths", write_design(source), "--config", str(config)]
        )
        assert result.exit_code == 0
        assert "  path: /v1/users" in result.output
        assert "href" not in result.output

    def test_no_services(self, runner, write_design):
        path = write_design("def design(d):\n    d.api('calc')\n")
        result = runner.invoke(cli, ["design", "paths", path])
        assert result.exit_code == 0
        assert "No services defined." in result.output

    def test_structural_errors_fail(self, runner, write_design):
        result = runner.invoke(cli, ["design", "paths", write_design(INVALID_DESIGN)])
        assert result.exit_code == 1
        assert "invalid use of title() in TopExpr" in result.output

    def test_validation_errors_do_not_fail(self, runner, write_design):
        source = """
        def design(d):
            d.service("users", lambda d: d.http(lambda d: d.path("/users")))
        """
        result = runner.invoke(cli, ["design", "paths", write_design(source)])
        assert result.exit_code == 0
        assert "  path: /users" in result.output
