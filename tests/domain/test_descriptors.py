"""Tests for render descriptors."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lazyfrag.domain.descriptors import EntityDescriptor, PartialDescriptor, descriptor_from_payload
from lazyfrag.domain.errors import DescriptorBuildError


class TestEntityDescriptor:
    def test_payload(self) -> None:
        assert EntityDescriptor(entity="gid://dummy/Post/1").payload() == {
            "entity": "gid://dummy/Post/1"
        }

    def test_payload_with_data(self) -> None:
        descriptor = EntityDescriptor(entity="gid://dummy/Post/1", data={"controller": "feed"})
        assert descriptor_from_payload(descriptor.payload()) == descriptor


class TestPartialDescriptor:
    def test_payload_without_data(self) -> None:
        descriptor = PartialDescriptor(partial="posts/card", locals={"post": "gid://dummy/Post/1"})
        assert descriptor.payload() == {
            "partial": "posts/card",
            "locals": {"post": "gid://dummy/Post/1"},
        }

    def test_payload_with_data(self) -> None:
        descriptor = PartialDescriptor(partial="posts/card", data={"controller": "feed"})
        assert descriptor.payload()["data"] == {"controller": "feed"}

    def test_payload_is_a_copy(self) -> None:
        descriptor = PartialDescriptor(partial="posts/card", locals={"tags": ["a"]})
        descriptor.payload()["locals"]["tags"].append("b")
        assert descriptor.locals == {"tags": ["a"]}

    @pytest.mark.parametrize("partial", ["", "/etc/passwd", "posts/../secrets"])
    def test_rejects_bad_partial_names(self, partial: str) -> None:
        with pytest.raises(ValidationError):
            PartialDescriptor(partial=partial)

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            PartialDescriptor(partial="posts/card", layout="x")


class TestDescriptorFromPayload:
    def test_entity(self) -> None:
        descriptor = descriptor_from_payload({"entity": "gid://dummy/Post/1"})
        assert descriptor == EntityDescriptor(entity="gid://dummy/Post/1")

    def test_partial(self) -> None:
        descriptor = descriptor_from_payload({"partial": "posts/card", "locals": {"n": 1}})
        assert isinstance(descriptor, PartialDescriptor)
        assert descriptor.locals == {"n": 1}

    @pytest.mark.parametrize("payload", [None, "posts/card", {"locals": {}}, {"entity": 1, "x": 2}])
    def test_malformed(self, payload: object) -> None:
        with pytest.raises(DescriptorBuildError):
            descriptor_from_payload(payload)
