# Copyright 2025 TIER IV, INC. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Shared test fixtures for worker-jwt tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

TEST_KEYS_DIR = Path(__file__).parent / "data" / "keys"

HMAC_SECRET = "secret"
FIXED_NOW = 1_700_000_000

# algorithm -> (private key PEM fname, public key PEM fname)
ASYMMETRIC_KEY_FILES = {
    "RS256": ("rsa_private.pem", "rsa_public.pem"),
    "RS384": ("rsa_private.pem", "rsa_public.pem"),
    "RS512": ("rsa_private.pem", "rsa_public.pem"),
    "ES256": ("es256_private.pem", "es256_public.pem"),
    "ES384": ("es384_private.pem", "es384_public.pem"),
    "ES512": ("es512_private.pem", "es512_public.pem"),
}

SIGNING_ALGORITHMS = [
    "HS256",
    "HS384",
    "HS512",
    "RS256",
    "RS384",
    "RS512",
    "ES256",
    "ES384",
    "ES512",
]


def read_test_key(fname: str) -> str:
    return (TEST_KEYS_DIR / fname).read_text()


@pytest.fixture(scope="session")
def key_pair() -> Callable[[str], tuple[str, str]]:
    """Return a function that gives (sign key, verify key) for the algorithm."""

    def _get(alg: str) -> tuple[str, str]:
        if alg.startswith("HS"):
            return HMAC_SECRET, HMAC_SECRET
        _priv_f, _pub_f = ASYMMETRIC_KEY_FILES[alg]
        return read_test_key(_priv_f), read_test_key(_pub_f)

    return _get


@pytest.fixture(scope="session")
def rsa_private_pem() -> str:
    return read_test_key("rsa_private.pem")


@pytest.fixture(scope="session")
def rsa_public_pem() -> str:
    return read_test_key("rsa_public.pem")


@pytest.fixture(scope="session")
def es256_private_pem() -> str:
    return read_test_key("es256_private.pem")


@pytest.fixture(scope="session")
def es256_public_pem() -> str:
    return read_test_key("es256_public.pem")


@pytest.fixture(scope="session")
def rsa_cert_v1_pem() -> str:
    """x509 v1 certificate(without the version field) of the RSA test key."""
    return read_test_key("rsa_cert_v1.pem")


@pytest.fixture(scope="session")
def es256_cert_v3_pem() -> str:
    """x509 v3 certificate of the ES256 test key."""
    return read_test_key("es256_cert_v3.pem")


@pytest.fixture(scope="session")
def generated_rsa_cert() -> tuple[x509.Certificate, rsa.RSAPrivateKey]:
    """Generate a self-signed RSA certificate with extensions."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    subject = issuer = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "JP"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Organization"),
            x509.NameAttribute(NameOID.COMMON_NAME, "JWT Signer"),
        ]
    )

    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.now(timezone.utc))
        .not_valid_after(datetime.now(timezone.utc) + timedelta(days=90))
        .add_extension(
            x509.BasicConstraints(ca=False, path_length=None),
            critical=True,
        )
        .sign(private_key, hashes.SHA256())
    )
    return cert, private_key


@pytest.fixture(scope="session")
def generated_rsa_cert_pem(generated_rsa_cert) -> tuple[str, str]:
    """(certificate PEM, PKCS8 private key PEM) of the generated RSA certificate."""
    cert, private_key = generated_rsa_cert
    cert_pem = cert.public_bytes(serialization.Encoding.PEM).decode()
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return cert_pem, private_pem


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    return lambda: FIXED_NOW
