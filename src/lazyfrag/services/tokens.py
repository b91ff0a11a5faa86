"""TokenService — inspect and mint placeholder tokens outside a page render.

Backs the ``lazyfrag`` CLI: operators use it to decode a token seen in
the wild, to sign a descriptor by hand, and to generate secrets.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from lazyfrag.domain.descriptors import EntityDescriptor, ExplicitPartial
from lazyfrag.domain.errors import DescriptorBuildError, InvalidSignatureError
from lazyfrag.domain.references import EntityReference, LookupNotFound
from lazyfrag.infrastructure.signing import (
    MIN_SECRET_BYTES,
    PURPOSE_CONTROLLER,
    PURPOSE_PARAMS,
    PURPOSE_SGID,
    PURPOSES,
    generate_secret,
)
from lazyfrag.services.base import BaseService
from lazyfrag.services.builder import DescriptorBuilder
from lazyfrag.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)

_EPHEMERAL_WARNING = "No signing secret configured; tokens use a throwaway secret"


def _error(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )


class TokenService(BaseService):
    """Token inspection and signing operations."""

    def _warnings(self) -> list[str]:
        return [_EPHEMERAL_WARNING] if self._kit.ephemeral_secret else []

    def inspect(self, token: str, *, purpose: str | None = None) -> ServiceResult:
        """Verify *token* and describe its payload.

        Without *purpose* any known purpose is accepted.
        """
        op = "inspect_token"
        if purpose is not None and purpose not in PURPOSES:
            return _error(op, "INVALID_ARGUMENT", f"Unknown purpose: {purpose!r}", purpose=purpose)

        candidates = (purpose,) if purpose else PURPOSES
        try:
            signed_for, payload = self._kit.verifier.unpack(token)
        except InvalidSignatureError:
            return _error(
                op,
                "INVALID_SIGNATURE",
                "Token does not verify with the configured secret",
                purposes=list(candidates),
            )
        if signed_for not in candidates:
            return _error(
                op,
                "INVALID_SIGNATURE",
                f"Token was signed for {signed_for!r}",
                purposes=list(candidates),
                signed_for=signed_for,
            )

        data: dict[str, Any] = {"purpose": signed_for, "payload": payload}
        data.update(self._describe(signed_for, payload))
        return ServiceResult(ok=True, op=op, data=data, warnings=self._warnings())

    def _describe(self, purpose: str, payload: Any) -> dict[str, Any]:
        if purpose == PURPOSE_SGID:
            ref = EntityReference.parse(payload)
            return {"reference": ref.model_dump()} if ref else {}
        if purpose == PURPOSE_PARAMS and isinstance(payload, Mapping):
            return {"kind": "entity" if "entity" in payload else "partial"}
        return {}

    def sign_partial(self, partial: str, locals: Mapping[str, Any] | None = None) -> ServiceResult:
        """Sign a partial descriptor (``signed_params``) from literal locals."""
        op = "sign_partial"
        try:
            descriptor = DescriptorBuilder(self._kit).build(ExplicitPartial(partial, dict(locals or {})))
        except DescriptorBuildError as exc:
            return _error(op, "INVALID_ARGUMENT", str(exc), partial=partial)
        token = self._kit.verifier.sign_descriptor(descriptor)
        return ServiceResult(
            ok=True,
            op=op,
            data={"signed_params": token, **descriptor.payload()},
            warnings=self._warnings(),
        )

    def sign_entity(self, uri: str) -> ServiceResult:
        """Sign an entity reference as ``sgid`` and as ``signed_params``.

        When a finder is registered for the type, the record must exist.
        """
        op = "sign_entity"
        ref = EntityReference.parse(uri)
        if ref is None:
            return _error(op, "INVALID_ARGUMENT", f"Not an entity reference: {uri!r}", uri=uri)

        warnings = self._warnings()
        codec = self._kit.codec
        if ref.app != codec.app:
            warnings.append(f"Reference app {ref.app!r} differs from configured app {codec.app!r}")
        elif self._kit.locator.is_registered(ref.model_name):
            found = codec.decode(ref)
            if isinstance(found, LookupNotFound):
                return _error(op, "NOT_FOUND", f"No {ref.model_name} with id {ref.model_id}", uri=uri)

        verifier = self._kit.verifier
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "entity": ref.to_uri(),
                "sgid": verifier.generate(ref.to_uri(), purpose=PURPOSE_SGID),
                "signed_params": verifier.sign_descriptor(EntityDescriptor(entity=ref.to_uri())),
            },
            warnings=warnings,
        )

    def sign_controller(self, controller: str) -> ServiceResult:
        """Sign a controller name as ``signed_controller``."""
        op = "sign_controller"
        if not controller:
            return _error(op, "INVALID_ARGUMENT", "Controller name must not be empty")
        token = self._kit.verifier.generate(controller, purpose=PURPOSE_CONTROLLER)
        return ServiceResult(
            ok=True,
            op=op,
            data={"controller": controller, "signed_controller": token},
            warnings=self._warnings(),
        )

    @staticmethod
    def generate_secret(nbytes: int = 64) -> ServiceResult:
        """Generate a fresh hex secret of *nbytes* random bytes."""
        op = "generate_secret"
        if nbytes < MIN_SECRET_BYTES:
            return _error(
                op,
                "INVALID_ARGUMENT",
                f"Secrets need at least {MIN_SECRET_BYTES} bytes",
                nbytes=nbytes,
            )
        logger.debug("Generated a %d-byte secret", nbytes)
        return ServiceResult(ok=True, op=op, data={"secret_key": generate_secret(nbytes)})
