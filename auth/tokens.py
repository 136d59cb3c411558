"""
auth/tokens.py -- Bearer token issuance and verification.

Token format (compact JWS, HS256):
    base64url(header) "." base64url(claims) "." base64url(HMAC-SHA256(secret, h.c))

  header: {"alg":"HS256","typ":"JWT"}
  claims: {"userId":<int>,"username":<str>,"iat":<int>,"exp":<int>}

All segments are URL-safe base64 without padding. Tokens are stateless bearer
credentials: nothing is stored server-side, so a token stays valid until its
exp claim passes.

Security design decisions:
  Issuance goes through python-jose (jwt.encode) with HS256. The secret is
  checked once at construction by building the HMAC key -- a secret jose
  refuses (e.g. a PEM blob) is a startup failure, not a per-request one.

  Verification is done by hand rather than with jwt.decode() because the
  rejection order and reasons are part of the contract:
      1. presence         -> MissingToken
      2. three segments   -> MalformedToken
      3. claims decode    -> MalformedToken
      4. exp              -> ExpiredToken
      5. signature        -> InvalidSignature
  With signature_first=True step 5 runs right after step 2, so no claim is
  read from a token whose signature has not been checked.

  The signature is compared as encoded text with hmac.compare_digest. Comparing
  decoded bytes would accept tokens whose final base64 character differs only
  in its unused low bits.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import hmac
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from jose import jwk, jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "
DEFAULT_EXPIRE_SECONDS = 86400

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TokenConfigurationError(RuntimeError):
    """The signing key cannot be used. Raised at construction, never per call."""


class TokenError(Exception):
    """Base class for every token rejection.

    reason is the human-readable rejection reason; code is the stable
    machine-readable identifier the API layer puts in error envelopes.
    """

    reason = "token rejected"
    code = "invalid_token"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class MissingToken(TokenError):
    reason = "missing token"
    code = "missing_token"


class MalformedToken(TokenError):
    reason = "malformed token"
    code = "malformed_token"


class ExpiredToken(TokenError):
    reason = "expired"
    code = "expired_token"


class InvalidSignature(TokenError):
    reason = "invalid signature"
    code = "invalid_signature"


class ClaimNotFound(TokenError):
    reason = "claim not found"
    code = "claim_not_found"

    def __init__(self, claim: str) -> None:
        super().__init__(f"claim not found: {claim}")
        self.claim = claim


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried by a verified token, copied verbatim from its claims."""

    user_id: Any
    username: Any


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _strip_bearer(presented: str) -> str:
    if presented.startswith(BEARER_PREFIX):
        return presented[len(BEARER_PREFIX) :]
    return presented


def _split(token: str) -> tuple[str, str, str]:
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedToken()
    return parts[0], parts[1], parts[2]


def _decode_claims(segment: str) -> dict:
    try:
        claims = json.loads(base64url_decode(segment.encode("ascii")))
    except (ValueError, RecursionError) as exc:
        # binascii.Error, UnicodeError and JSONDecodeError are all ValueErrors;
        # deeply nested arrays exhaust the decoder stack
        raise MalformedToken() from exc
    if not isinstance(claims, dict):
        raise MalformedToken()
    return claims


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies HS256 bearer tokens.

    Instances are immutable after construction and safe to share between
    threads: every call reads the clock once and works on its own strings.

    Usage:
        tokens = TokenService(settings.secret_key)
        token = tokens.issue(1, "player1")
        identity = tokens.verify("Bearer " + token)   # TokenIdentity(1, "player1")
    """

    def __init__(
        self,
        secret: str,
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
        clock: Callable[[], float] = time.time,
        signature_first: bool = False,
    ) -> None:
        if not secret:
            raise TokenConfigurationError("Token signing secret must not be empty.")
        if expire_seconds <= 0:
            raise TokenConfigurationError("Token lifetime must be a positive number of seconds.")
        try:
            key = jwk.construct(secret, algorithm=ALGORITHM)
        except JOSEError as exc:
            raise TokenConfigurationError(f"Cannot build {ALGORITHM} signing key: {exc}") from exc
        self._secret = secret
        self._key = key
        self._clock = clock
        self._signature_first = signature_first
        self.expire_seconds = expire_seconds

    def _now(self) -> int:
        return int(self._clock())

    def _sign(self, header_segment: str, claims_segment: str) -> str:
        signing_input = f"{header_segment}.{claims_segment}".encode("ascii")
        return base64url_encode(self._key.sign(signing_input)).decode("ascii")

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def issue(self, user_id: int, username: str) -> str:
        """Return a signed token for the given identity, valid for expire_seconds."""
        now = self._now()
        claims = {
            "userId": user_id,
            "username": username,
            "iat": now,
            "exp": now + self.expire_seconds,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self, presented: str | None) -> TokenIdentity:
        """Verify a presented token and return the identity it carries.

        Accepts the raw token or an Authorization header value with a
        "Bearer " prefix. Raises a TokenError subclass on rejection; nothing
        is written on either path.
        """
        if presented is None or not presented.strip():
            raise MissingToken()
        token = _strip_bearer(presented)
        if not token.strip():
            raise MissingToken()

        header_segment, claims_segment, signature_segment = _split(token)

        if self._signature_first:
            self._check_signature(header_segment, claims_segment, signature_segment)
            claims = _decode_claims(claims_segment)
            self._check_expiry(claims)
        else:
            claims = _decode_claims(claims_segment)
            self._check_expiry(claims)
            self._check_signature(header_segment, claims_segment, signature_segment)

        return TokenIdentity(user_id=claims.get("userId"), username=claims.get("username"))

    def is_expired(self, presented: str | None) -> bool:
        """Return True if the token is expired or its claims cannot be read."""
        try:
            self._check_expiry(self.extract_claims(presented))
        except TokenError:
            return True
        return False

    def _check_expiry(self, claims: dict) -> None:
        exp = claims.get("exp")
        if not _is_int(exp) or self._now() > exp:
            raise ExpiredToken()

    def _check_signature(self, header_segment: str, claims_segment: str, signature_segment: str) -> None:
        expected = self._sign(header_segment, claims_segment)
        if not hmac.compare_digest(expected.encode("ascii"), signature_segment.encode("utf-8")):
            raise InvalidSignature()

    # ------------------------------------------------------------------
    # Unverified claim access
    # ------------------------------------------------------------------

    def extract_claims(self, presented: str | None) -> dict:
        """Decode the claims segment without checking signature or expiry.

        Raises MissingToken or MalformedToken. Only use on tokens that already
        passed verify() -- the result is not trustworthy on its own.
        """
        if presented is None or not presented.strip():
            raise MissingToken()
        _, claims_segment, _ = _split(_strip_bearer(presented))
        return _decode_claims(claims_segment)

    def _claim(self, presented: str | None, name: str) -> Any:
        claims = self.extract_claims(presented)
        if name not in claims:
            raise ClaimNotFound(name)
        return claims[name]

    def get_user_id(self, presented: str | None) -> int | None:
        """Return the userId claim, or None if it cannot be read."""
        try:
            value = self._claim(presented, "userId")
        except TokenError:
            return None
        return value if _is_int(value) else None

    def get_username(self, presented: str | None) -> str | None:
        """Return the username claim, or None if it cannot be read."""
        try:
            value = self._claim(presented, "username")
        except TokenError:
            return None
        return value if isinstance(value, str) else None
