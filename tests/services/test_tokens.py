"""Tests for TokenService."""

from __future__ import annotations

import logging

import pytest

from lazyfrag.config.settings import LazyfragSettings
from lazyfrag.infrastructure.kit import RenderKit
from lazyfrag.infrastructure.signing import PURPOSE_CONTROLLER, PURPOSE_SGID
from lazyfrag.services.tokens import TokenService
from tests.entities import Post


@pytest.fixture
def service(kit: RenderKit) -> TokenService:
    return TokenService(kit)


class TestInspect:
    def test_signed_params(self, service: TokenService, kit: RenderKit) -> None:
        token = kit.verifier.generate({"partial": "posts/card", "locals": {}})
        result = service.inspect(token)
        assert result.ok
        assert result.op == "inspect_token"
        assert result.data["purpose"] == "signed_params"
        assert result.data["kind"] == "partial"
        assert result.data["payload"] == {"partial": "posts/card", "locals": {}}
        assert result.warnings == []

    def test_sgid(self, service: TokenService, kit: RenderKit) -> None:
        token = kit.verifier.generate("gid://dummy/Post/1", purpose=PURPOSE_SGID)
        result = service.inspect(token)
        assert result.data["purpose"] == "sgid"
        assert result.data["reference"] == {"app": "dummy", "model_name": "Post", "model_id": "1"}

    def test_controller_with_explicit_purpose(self, service: TokenService, kit: RenderKit) -> None:
        token = kit.verifier.generate("posts", purpose=PURPOSE_CONTROLLER)
        result = service.inspect(token, purpose="controller")
        assert result.data == {"purpose": "controller", "payload": "posts"}

    def test_wrong_purpose(self, service: TokenService, kit: RenderKit) -> None:
        token = kit.verifier.generate("posts", purpose=PURPOSE_CONTROLLER)
        result = service.inspect(token, purpose="sgid")
        assert not result.ok
        assert result.error.code == "INVALID_SIGNATURE"

    def test_tampered(self, service: TokenService, kit: RenderKit) -> None:
        token = kit.verifier.generate({"entity": "gid://dummy/Post/1"})
        result = service.inspect(token[:-1] + ("0" if token[-1] != "0" else "1"))
        assert not result.ok
        assert result.error.code == "INVALID_SIGNATURE"
        assert result.error.detail["purposes"] == ["signed_params", "sgid", "controller"]

    def test_valid_token_logs_no_rejection(
        self, service: TokenService, kit: RenderKit, caplog: pytest.LogCaptureFixture
    ) -> None:
        token = kit.verifier.generate("gid://dummy/Post/1", purpose=PURPOSE_SGID)
        with caplog.at_level(logging.WARNING, logger="lazyfrag"):
            assert service.inspect(token).ok
        assert "Rejected signed token" not in caplog.text

    def test_wrong_purpose_names_the_signed_purpose(
        self, service: TokenService, kit: RenderKit
    ) -> None:
        token = kit.verifier.generate("posts", purpose=PURPOSE_CONTROLLER)
        result = service.inspect(token, purpose="signed_params")
        assert result.error.detail == {"purposes": ["signed_params"], "signed_for": "controller"}

    def test_unknown_purpose(self, service: TokenService) -> None:
        result = service.inspect("abc--def", purpose="session")
        assert result.error.code == "INVALID_ARGUMENT"


class TestSign:
    def test_sign_partial(self, service: TokenService, kit: RenderKit) -> None:
        result = service.sign_partial("posts/card", {"post": "gid://dummy/Post/1"})
        assert result.ok
        assert result.data["partial"] == "posts/card"
        descriptor = kit.verifier.verify_descriptor(result.data["signed_params"])
        assert descriptor.locals == {"post": "gid://dummy/Post/1"}

    def test_sign_partial_invalid_name(self, service: TokenService) -> None:
        result = service.sign_partial("../etc")
        assert result.error.code == "INVALID_ARGUMENT"

    def test_sign_entity(self, service: TokenService, kit: RenderKit) -> None:
        Post.create(1)
        result = service.sign_entity("gid://dummy/Post/1")
        assert result.ok
        assert kit.codec.locate_signed(result.data["sgid"]) == Post(id=1)
        assert kit.verifier.verify_descriptor(result.data["signed_params"]).entity == (
            "gid://dummy/Post/1"
        )

    def test_sign_entity_missing_record(self, service: TokenService) -> None:
        result = service.sign_entity("gid://dummy/Post/404")
        assert result.error.code == "NOT_FOUND"

    def test_sign_entity_foreign_app(self, service: TokenService) -> None:
        result = service.sign_entity("gid://other/Post/1")
        assert result.ok
        assert any("differs" in warning for warning in result.warnings)

    def test_sign_entity_not_a_reference(self, service: TokenService) -> None:
        result = service.sign_entity("Post/1")
        assert result.error.code == "INVALID_ARGUMENT"

    def test_sign_controller(self, service: TokenService, kit: RenderKit) -> None:
        result = service.sign_controller("posts")
        token = result.data["signed_controller"]
        assert kit.verifier.verify(token, purpose=PURPOSE_CONTROLLER) == "posts"
        assert service.sign_controller("").error.code == "INVALID_ARGUMENT"

    def test_ephemeral_secret_warning(self) -> None:
        service = TokenService(RenderKit(LazyfragSettings()))
        result = service.sign_controller("posts")
        assert result.warnings == ["No signing secret configured; tokens use a throwaway secret"]


class TestGenerateSecret:
    def test_default_length(self) -> None:
        result = TokenService.generate_secret()
        assert len(result.data["secret_key"]) == 128

    def test_too_short(self) -> None:
        result = TokenService.generate_secret(8)
        assert result.error.code == "INVALID_ARGUMENT"
