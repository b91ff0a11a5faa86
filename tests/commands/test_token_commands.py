"""Tests for the token CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lazyfrag.cli import cli
from lazyfrag.infrastructure.signing import PURPOSE_SGID, MessageVerifier
from tests.conftest import SECRET


@pytest.fixture
def verifier() -> MessageVerifier:
    return MessageVerifier(SECRET)


@pytest.mark.usefixtures("_cli_env")
class TestInspectCommand:
    def test_inspect_json(self, cli_runner: CliRunner, verifier: MessageVerifier) -> None:
        token = verifier.generate("gid://dummy/Post/1", purpose=PURPOSE_SGID)
        result = cli_runner.invoke(cli, ["--json", "inspect", token])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["data"]["reference"]["model_name"] == "Post"

    def test_inspect_human(self, cli_runner: CliRunner, verifier: MessageVerifier) -> None:
        token = verifier.generate({"partial": "posts/card", "locals": {}})
        result = cli_runner.invoke(cli, ["inspect", token])
        assert result.exit_code == 0
        assert "purpose: signed_params" in result.stdout
        assert "kind: partial" in result.stdout

    def test_inspect_forged(self, cli_runner: CliRunner) -> None:
        token = MessageVerifier("another-secret-0123456789").generate("x")
        result = cli_runner.invoke(cli, ["inspect", token])
        assert result.exit_code == 1
        assert "INVALID_SIGNATURE" in result.output

    def test_inspect_markup_attribute(self, cli_runner: CliRunner, verifier: MessageVerifier) -> None:
        token = verifier.generate("gid://dummy/Post/1", purpose=PURPOSE_SGID)
        result = cli_runner.invoke(cli, ["--json", "inspect", f' data-sgid="{token}" '])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["purpose"] == "sgid"

    def test_inspect_rejects_non_token(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["inspect", "not-a-token"])
        assert result.exit_code == 2
        assert "base64" in result.output

    def test_inspect_purpose_choice(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["inspect", "--purpose", "session", "abc--def"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_cli_env")
class TestSignCommands:
    def test_sign_partial(self, cli_runner: CliRunner, verifier: MessageVerifier) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "sign", "partial", "posts/card", "-l", "post=gid://dummy/Post/1", "-l", "n=2"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        descriptor = verifier.verify_descriptor(data["signed_params"])
        assert descriptor.locals == {"post": "gid://dummy/Post/1", "n": "2"}

    def test_sign_partial_bad_local(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sign", "partial", "posts/card", "-l", "novalue"])
        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_sign_entity(self, cli_runner: CliRunner, verifier: MessageVerifier) -> None:
        result = cli_runner.invoke(cli, ["--json", "sign", "entity", "gid://dummy/Post/7"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert verifier.verify(data["sgid"], purpose=PURPOSE_SGID) == "gid://dummy/Post/7"

    def test_sign_entity_invalid(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sign", "entity", "Post/7"])
        assert result.exit_code == 1
        assert "INVALID_ARGUMENT" in result.output

    def test_sign_controller(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sign", "controller", "posts"])
        assert result.exit_code == 0
        assert "signed_controller:" in result.stdout

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sign", "--examples"])
        assert result.exit_code == 0
        for name in ("partial", "entity", "controller"):
            assert f"lazyfrag sign {name}" in result.output


@pytest.mark.usefixtures("_cli_env")
class TestSecretCommand:
    def test_secret(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "secret", "--bytes", "32"])
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["data"]["secret_key"]) == 64

    def test_secret_too_short(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["secret", "--bytes", "4"])
        assert result.exit_code == 1


@pytest.mark.usefixtures("_cli_env")
class TestRootGroup:
    def test_help_without_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        for name in ("inspect", "sign", "secret"):
            assert name in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "lazyfrag" in result.output

    def test_config_flag(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("LAZYFRAG_ENTITIES__APP")
        config = tmp_path / "custom.toml"
        config.write_text('[entities]\napp = "blog"\n')
        args = ["-c", str(config), "--json", "sign", "entity", "gid://blog/Post/1"]
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert json.loads(result.stdout)["warnings"] == []
