"""HMAC message signing for descriptors, entity references and controllers.

Token layout::

    base64(json({"message": <payload>, "purpose": <purpose>})) + "--" + hexdigest

The digest is computed over the base64 text itself, so any change to the
encoded part (including padding bits the decoder would ignore) breaks
the signature. Purposes keep token kinds apart: an ``sgid`` token is
never accepted where ``signed_params`` is expected.

INVARIANT: ``verify`` either returns the exact payload that was signed or
raises :class:`InvalidSignatureError`. Nothing is decoded before the
digest matches.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import secrets
from typing import Any

from lazyfrag.domain.descriptors import RenderDescriptor, descriptor_from_payload
from lazyfrag.domain.errors import (
    ConfigurationError,
    DescriptorBuildError,
    InvalidSignatureError,
)

logger = logging.getLogger(__name__)

SEPARATOR = "--"

PURPOSE_PARAMS = "signed_params"
PURPOSE_SGID = "sgid"
PURPOSE_CONTROLLER = "controller"
PURPOSES: tuple[str, ...] = (PURPOSE_PARAMS, PURPOSE_SGID, PURPOSE_CONTROLLER)

SUPPORTED_DIGESTS: tuple[str, ...] = ("sha256", "sha384", "sha512")
MIN_SECRET_BYTES = 16


def generate_secret(nbytes: int = 64) -> str:
    """Return a fresh hex secret suitable for ``signing.secret_key``."""
    return secrets.token_hex(nbytes)


class MessageVerifier:
    """Sign JSON-serializable values and verify them back.

    The secret is fixed at construction; rotating it means building a new
    verifier, which invalidates every token issued by the old one.
    """

    def __init__(self, secret: bytes | str, *, digest: str = "sha256") -> None:
        key = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
        if len(key) < MIN_SECRET_BYTES:
            msg = f"Signing secret must be at least {MIN_SECRET_BYTES} bytes"
            raise ConfigurationError(msg)
        if digest not in SUPPORTED_DIGESTS:
            msg = f"Unsupported digest {digest!r}; choose one of {', '.join(SUPPORTED_DIGESTS)}"
            raise ConfigurationError(msg)
        self._secret = key
        self._digest = digest

    @property
    def digest(self) -> str:
        return self._digest

    def _sign(self, data: str) -> str:
        return hmac.new(self._secret, data.encode("ascii"), getattr(hashlib, self._digest)).hexdigest()

    def generate(self, value: Any, *, purpose: str = PURPOSE_PARAMS) -> str:
        """Sign *value* for *purpose* and return the token string.

        Raises:
            TypeError: *value* is not JSON-serializable.
        """
        envelope = {"message": value, "purpose": purpose}
        serialized = json.dumps(envelope, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        data = base64.b64encode(serialized.encode("utf-8")).decode("ascii")
        return f"{data}{SEPARATOR}{self._sign(data)}"

    def unpack(self, token: str) -> tuple[str, Any]:
        """Return ``(purpose, payload)`` of *token*, whatever its purpose.

        Raises:
            InvalidSignatureError: *token* was not produced by :meth:`generate`
                with this secret.
        """
        if not isinstance(token, str) or not token.isascii():
            raise self._reject("token is not an ASCII string")
        data, sep, digest = token.rpartition(SEPARATOR)
        if not sep or not data or not digest:
            raise self._reject("token is malformed")
        if not hmac.compare_digest(digest, self._sign(data)):
            raise self._reject("digest mismatch")

        try:
            raw = base64.b64decode(data, validate=True)
            envelope = json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise self._reject("payload is not decodable") from exc

        if not isinstance(envelope, dict) or set(envelope) != {"message", "purpose"}:
            raise self._reject("envelope is malformed")
        return str(envelope["purpose"]), envelope["message"]

    def verify(self, token: str, *, purpose: str = PURPOSE_PARAMS) -> Any:
        """Return the payload signed into *token*.

        Raises:
            InvalidSignatureError: *token* was not produced by :meth:`generate`
                with this secret and *purpose*.
        """
        signed_for, message = self.unpack(token)
        if signed_for != purpose:
            raise self._reject(f"purpose mismatch (expected {purpose})")
        return message

    def valid(self, token: str, *, purpose: str = PURPOSE_PARAMS) -> bool:
        """Whether *token* verifies, without returning the payload."""
        try:
            self.verify(token, purpose=purpose)
        except InvalidSignatureError:
            return False
        return True

    def sign_descriptor(self, descriptor: RenderDescriptor) -> str:
        """Sign a render descriptor as ``signed_params``."""
        return self.generate(descriptor.payload(), purpose=PURPOSE_PARAMS)

    def verify_descriptor(self, token: str) -> RenderDescriptor:
        """Verify a ``signed_params`` token and rebuild its descriptor.

        Raises:
            InvalidSignatureError: The token fails verification or does not
                hold a descriptor.
        """
        payload = self.verify(token, purpose=PURPOSE_PARAMS)
        try:
            return descriptor_from_payload(payload)
        except DescriptorBuildError as exc:
            raise self._reject("payload is not a render descriptor") from exc

    @staticmethod
    def _reject(reason: str) -> InvalidSignatureError:
        logger.warning("Rejected signed token: %s", reason)
        return InvalidSignatureError(f"Invalid signature: {reason}")
