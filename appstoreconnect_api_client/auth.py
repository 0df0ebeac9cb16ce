"""
Credentials and bearer-token handling for the App Store Connect API.

App Store Connect does not run an OAuth token endpoint.  Instead the
client signs its own short-lived JSON Web Token with the private key
downloaded from App Store Connect (an ``AuthKey_<key id>.p8`` file) and
presents it as a bearer token.  The token must

* declare ``alg=ES256``, the key id and ``typ=JWT`` in its header,
* carry the issuer id, ``iat``, ``exp`` and the fixed audience
  ``appstoreconnect-v1`` in its payload, and
* expire no more than twenty minutes after it was issued.

:func:`sign_token` is a pure function producing such a token.
:class:`TokenCache` keeps the most recent token and signs a new one
when the current token is missing or about to expire.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Union

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .exceptions import InvalidKeyError, SigningError

logger = logging.getLogger(__name__)

AUDIENCE = "appstoreconnect-v1"
ALGORITHM = "ES256"
# Apple rejects tokens whose lifetime exceeds twenty minutes
MAX_TOKEN_LIFETIME = timedelta(minutes=20)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class Credentials:
    """API key credentials issued by App Store Connect.

    Parameters
    ----------
    issuer_id : str
        The issuer id shown on the App Store Connect "Keys" page.
    key_id : str
        The identifier of the private key.
    private_key : bytes
        The private key, DER encoded (the base64 body of the ``.p8``
        file, decoded).  PEM bytes are accepted as well.

    The key bytes are not parsed here; an unusable key is reported by
    :func:`sign_token` with :class:`InvalidKeyError`.
    """

    issuer_id: str
    key_id: str
    private_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.issuer_id, str) or not self.issuer_id.strip():
            raise ValueError("issuer_id must be provided")
        if not isinstance(self.key_id, str) or not self.key_id.strip():
            raise ValueError("key_id must be provided")
        if not isinstance(self.private_key, (bytes, bytearray)) or not self.private_key:
            raise ValueError("private_key must be provided")
        object.__setattr__(self, "private_key", bytes(self.private_key))

    @classmethod
    def from_p8(
        cls, issuer_id: str, key_id: str, path: Union[str, Path]
    ) -> "Credentials":
        """Build credentials from a downloaded ``AuthKey_*.p8`` file.

        The file may hold the PEM armored key Apple hands out or the raw
        DER bytes.
        """
        data = Path(path).read_bytes()
        if not data.lstrip().startswith(b"-----BEGIN"):
            return cls(issuer_id=issuer_id, key_id=key_id, private_key=data)
        try:
            body = "".join(
                line.strip()
                for line in data.decode("ascii").splitlines()
                if line.strip() and not line.startswith("-----")
            )
            der = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidKeyError(f"{path} does not contain a base64 encoded key") from exc
        return cls(issuer_id=issuer_id, key_id=key_id, private_key=der)


@dataclass(frozen=True)
class Token:
    """A signed bearer token and the validity window baked into it."""

    value: str = field(repr=False)
    issued_at: datetime
    expires_at: datetime

    def is_expired(
        self, now: Optional[datetime] = None, leeway: timedelta = timedelta(0)
    ) -> bool:
        now = _as_utc(now) if now is not None else utcnow()
        return now >= self.expires_at - leeway

    def __str__(self) -> str:
        return self.value


def load_private_key(data: bytes) -> ec.EllipticCurvePrivateKey:
    """Parse DER or PEM bytes into a P-256 private key.

    Raises :class:`InvalidKeyError` when the bytes are not a private key,
    are a non-EC key, or use a curve other than P-256.
    """
    try:
        if data.lstrip().startswith(b"-----BEGIN"):
            key = serialization.load_pem_private_key(data, password=None)
        else:
            key = serialization.load_der_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"Private key could not be parsed: {exc}") from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise InvalidKeyError(
            f"ES256 requires an EC private key, got {type(key).__name__}"
        )
    if not isinstance(key.curve, ec.SECP256R1):
        raise InvalidKeyError(f"ES256 requires the P-256 curve, got {key.curve.name}")
    return key


def sign_token(
    credentials: Credentials,
    now: Optional[datetime] = None,
    *,
    lifetime: timedelta = MAX_TOKEN_LIFETIME,
) -> Token:
    """Sign a new App Store Connect bearer token.

    Parameters
    ----------
    credentials : Credentials
        The issuer id, key id and private key to sign with.
    now : datetime, optional
        The issue time.  Defaults to the current UTC time.
    lifetime : timedelta, optional
        How long the token stays valid.  Capped at twenty minutes.

    Returns
    -------
    Token
        The compact JWT together with its issue and expiry times.

    Raises
    ------
    InvalidKeyError
        If the private key is not a usable P-256 EC key.
    SigningError
        If the signing primitive fails.
    """
    if lifetime <= timedelta(0):
        raise ValueError("lifetime must be positive")
    lifetime = min(lifetime, MAX_TOKEN_LIFETIME)
    now = _as_utc(now) if now is not None else utcnow()

    key = load_private_key(credentials.private_key)

    issued_at = int(now.timestamp())
    expires_at = int((now + lifetime).timestamp())
    payload = {
        "iss": credentials.issuer_id,
        "iat": issued_at,
        "exp": expires_at,
        "aud": AUDIENCE,
    }
    headers = {
        "alg": ALGORITHM,
        "kid": credentials.key_id,
        "typ": "JWT",
    }
    try:
        value = jwt.encode(payload, key, algorithm=ALGORITHM, headers=headers)
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"Failed to sign token: {exc}") from exc

    return Token(
        value=value,
        issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
    )


class TokenCache:
    """Holds the current bearer token and re-signs it when it runs out.

    A token is treated as expired ``refresh_margin`` before its ``exp``
    claim, so a request never leaves with a token that lapses in flight.
    The check-and-sign step runs under a lock, so a cache shared between
    threads signs one token per expiry rather than one per caller.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        clock: Optional[Clock] = None,
        refresh_margin: timedelta = timedelta(seconds=60),
        lifetime: timedelta = MAX_TOKEN_LIFETIME,
    ) -> None:
        if not isinstance(credentials, Credentials):
            raise ValueError("credentials must be a Credentials instance")
        if lifetime <= timedelta(0) or lifetime > MAX_TOKEN_LIFETIME:
            raise ValueError("lifetime must be positive and at most 20 minutes")
        if refresh_margin < timedelta(0) or refresh_margin >= lifetime:
            raise ValueError("refresh_margin must be non-negative and shorter than lifetime")
        self.credentials = credentials
        self.refresh_margin = refresh_margin
        self.lifetime = lifetime
        self._clock: Clock = clock or utcnow
        self._token: Optional[Token] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[Token]:
        """The cached token, which may be stale or None."""
        return self._token

    def now(self) -> datetime:
        return _as_utc(self._clock())

    def refresh(self) -> Token:
        """Sign a new token unconditionally and cache it."""
        with self._lock:
            return self._refresh_locked(self.now())

    def get_token(self) -> Token:
        """Return a token valid for at least ``refresh_margin`` more."""
        with self._lock:
            now = self.now()
            token = self._token
            if token is None or token.is_expired(now, leeway=self.refresh_margin):
                token = self._refresh_locked(now)
            return token

    def invalidate(self) -> None:
        with self._lock:
            self._token = None

    def _refresh_locked(self, now: datetime) -> Token:
        token = sign_token(self.credentials, now, lifetime=self.lifetime)
        self._token = token
        logger.debug(
            "Signed new token for key %s, expires at %s",
            self.credentials.key_id,
            token.expires_at.isoformat(),
        )
        return token
