"""Shared fixtures for the client test suite.

Keys are generated in-process with ``cryptography`` so the tests never
need a real App Store Connect key, and the network is replaced by the
fake sessions in ``tests/helpers``.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest  # type: ignore
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

ROOT = Path(__file__).resolve().parents[1]

# Make ``tests.helpers`` and the package importable however pytest is invoked
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from appstoreconnect_api_client import Credentials  # noqa: E402
from tests.helpers.clock import FrozenClock  # noqa: E402

ISSUER_ID = "57246542-96fe-1a63-e053-0824d011072a"
KEY_ID = "2X9R4HXF34"


def der_bytes(key: ec.EllipticCurvePrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def credentials(private_key: ec.EllipticCurvePrivateKey) -> Credentials:
    return Credentials(issuer_id=ISSUER_ID, key_id=KEY_ID, private_key=der_bytes(private_key))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
