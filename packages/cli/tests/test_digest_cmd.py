"""
Tests for CLI digest commands.

Tests cover:
- digest command
- check command
- version command
"""

import hashlib

import pytest
from typer.testing import CliRunner

from buildprint_cli.main import app

runner = CliRunner()

RECIPE = "FROM alpine\nCOPY app.go /app/\nADD https://example.com/tool.tgz /opt/\n"


@pytest.fixture
def recipe(tmp_path):
    """Create a build context with one local and one remote source."""
    (tmp_path / "app.go").write_text("package main\n")
    dockerfile = tmp_path / "Dockerfile"
    dockerfile.write_text(RECIPE)
    return dockerfile


def _expected_digest(recipe) -> str:
    url = b"https://example.com/tool.tgz"
    return hashlib.sha512(
        recipe.read_bytes()
        + b"app.go\0"
        + (recipe.parent / "app.go").read_bytes()
        + url
        + b"\0"
        + url
    ).hexdigest()


class TestDigestCommand:
    """Test digest command."""

    def test_prints_hex_digest(self, recipe):
        result = runner.invoke(app, ["digest", str(recipe)])

        assert result.exit_code == 0
        assert result.stdout.strip() == _expected_digest(recipe)

    def test_workers_option(self, recipe):
        one = runner.invoke(app, ["digest", str(recipe), "--workers", "1"])
        eight = runner.invoke(app, ["digest", str(recipe), "--workers", "8"])

        assert one.exit_code == eight.exit_code == 0
        assert one.stdout == eight.stdout

    def test_always_changed(self, recipe):
        result = runner.invoke(app, ["digest", str(recipe), "--remote", "always_changed"])

        assert result.exit_code == 0
        assert result.stdout.strip() != _expected_digest(recipe)
        assert len(result.stdout.strip()) == 128

    def test_config_file(self, recipe, tmp_path):
        config = tmp_path / "buildprint.yaml"
        config.write_text("remote_treatment: unchanged\n")

        result = runner.invoke(app, ["digest", str(recipe), "--config", str(config)])

        assert result.exit_code == 0
        assert result.stdout.strip() == _expected_digest(recipe)

    def test_invalid_remote_option(self, recipe):
        result = runner.invoke(app, ["digest", str(recipe), "--remote", "sometimes"])

        assert result.exit_code == 1
        assert "Unsupported remote treatment" in result.output

    def test_missing_reference(self, tmp_path):
        dockerfile = tmp_path / "Dockerfile"
        dockerfile.write_text("FROM alpine\nCOPY missing.go /app/\n")

        result = runner.invoke(app, ["digest", str(dockerfile)])

        assert result.exit_code == 1
        assert "missing.go" in result.output

    def test_parse_error(self, tmp_path):
        dockerfile = tmp_path / "Dockerfile"
        dockerfile.write_text("FROM alpine\nCOPPY a /b\n")

        result = runner.invoke(app, ["digest", str(dockerfile)])

        assert result.exit_code == 1
        assert "COPPY" in result.output

    def test_context_option(self, tmp_path):
        build = tmp_path / "build"
        build.mkdir()
        (tmp_path / "app.go").write_text("package main\n")
        (build / "Dockerfile").write_text("FROM alpine\nCOPY app.go /app/\n")

        result = runner.invoke(app, ["digest", str(build / "Dockerfile"), "--context", str(tmp_path)])

        assert result.exit_code == 0
        assert len(result.stdout.strip()) == 128


class TestCheckCommand:
    """Test check command."""

    def test_up_to_date(self, recipe):
        result = runner.invoke(app, ["check", str(recipe), "--expected", _expected_digest(recipe)])

        assert result.exit_code == 0
        assert "Up to date" in result.output

    def test_changed(self, recipe):
        expected = _expected_digest(recipe)
        (recipe.parent / "app.go").write_text("package main // edited\n")

        result = runner.invoke(app, ["check", str(recipe), "--expected", expected])

        assert result.exit_code == 1
        assert "Stale" in result.output

    def test_failure_is_stale(self, tmp_path):
        """A recipe that cannot be fingerprinted is reported as stale"""
        dockerfile = tmp_path / "Dockerfile"
        dockerfile.write_text("FROM alpine\nCOPY missing.go /app/\n")

        result = runner.invoke(app, ["check", str(dockerfile), "--expected", "00" * 64])

        assert result.exit_code == 1

    def test_invalid_hex(self, recipe):
        result = runner.invoke(app, ["check", str(recipe), "--expected", "not-hex"])

        assert result.exit_code == 1
        assert "not valid hex" in result.output

    def test_always_changed_is_always_stale(self, recipe):
        result = runner.invoke(
            app,
            ["check", str(recipe), "--expected", _expected_digest(recipe), "--remote", "always_changed"],
        )

        assert result.exit_code == 1


class TestVersionCommand:
    """Test version command."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "buildprint" in result.stdout
