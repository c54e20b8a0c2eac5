"""Tests for the `sqlid` command line."""

import pytest
from click.testing import CliRunner

from sqlidentity.cli.main import cli


@pytest.fixture
def run(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}"
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, ["--database-url", url, *args], catch_exceptions=False)

    result = _run("init-db")
    assert result.exit_code == 0, result.output
    return _run


def test_create_user_and_assign_role(run):
    assert run("roles", "create", "Admin").exit_code == 0
    assert run("users", "create", "alice", "--email", "alice@example.com").exit_code == 0
    assert run("users", "add-role", "alice", "admin").exit_code == 0

    shown = run("users", "show", "alice")
    assert shown.exit_code == 0
    assert "alice@example.com" in shown.output
    assert "Admin" in shown.output


def test_add_role_for_missing_role_fails(run):
    run("users", "create", "bob")
    result = run("users", "add-role", "bob", "Ghost")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_remove_unknown_role_succeeds(run):
    run("users", "create", "bob")
    assert run("users", "remove-role", "bob", "Ghost").exit_code == 0


def test_duplicate_user_is_reported(run):
    assert run("users", "create", "carol").exit_code == 0
    result = run("users", "create", "carol")
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_claims_commands(run):
    run("users", "create", "dave")
    assert run("users", "add-claim", "dave", "department", "eng").exit_code == 0
    result = run("users", "claims", "dave")
    assert result.exit_code == 0
    assert "department" in result.output


def test_roles_list_and_delete(run):
    run("roles", "create", "Viewer")
    assert "Viewer" in run("roles", "list").output
    assert run("roles", "delete", "viewer").exit_code == 0
    assert run("roles", "delete", "viewer").exit_code == 1


def test_show_missing_user(run):
    result = run("users", "show", "nobody")
    assert result.exit_code == 1
    assert "not found" in result.output
