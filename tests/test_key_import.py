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
"""Test key classification and import."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key
from jwt.algorithms import HMACAlgorithm, RSAAlgorithm

from worker_jwt._crypto.key_import import (
    KeyHandle,
    KeySourceKind,
    classify_key,
    import_key,
)
from worker_jwt.common import pem_to_bytes
from worker_jwt.errors import (
    AlgorithmNotFoundError,
    InvalidArgumentError,
    InvalidKeyError,
    KeyParseError,
    UnsupportedKeyTypeError,
)


class TestClassifyKey:
    """Test classify_key function."""

    def test_key_handle(self):
        handle = import_key("secret", "HS256", "sign")
        source = classify_key(handle)
        assert source.kind is KeySourceKind.HANDLE
        assert source.data is handle

    def test_native_key(self, rsa_private_pem):
        _key = load_pem_private_key(rsa_private_pem.encode(), password=None)
        assert classify_key(_key).kind is KeySourceKind.NATIVE
        assert classify_key(_key.public_key()).kind is KeySourceKind.NATIVE

    def test_jwk(self):
        source = classify_key({"kty": "oct", "k": "c2VjcmV0"})
        assert source.kind is KeySourceKind.JWK
        assert source.data == {"kty": "oct", "k": "c2VjcmV0"}

    def test_pem_public_key(self, rsa_public_pem):
        source = classify_key(rsa_public_pem)
        assert source.kind is KeySourceKind.SPKI_PUBLIC
        assert source.data == pem_to_bytes(rsa_public_pem)

    def test_pem_private_key(self, es256_private_pem):
        source = classify_key(es256_private_pem.encode())
        assert source.kind is KeySourceKind.PKCS8_PRIVATE
        assert source.data == pem_to_bytes(es256_private_pem)

    def test_pem_certificate(self, es256_cert_v3_pem):
        source = classify_key(es256_cert_v3_pem)
        assert source.kind is KeySourceKind.CERTIFICATE
        assert source.data == pem_to_bytes(es256_cert_v3_pem)

    @pytest.mark.parametrize(
        "key, raw",
        [
            ("secret", b"secret"),
            ("秘密", "秘密".encode("utf-8")),
            (b"\x00\xffsecret", b"\x00\xffsecret"),
            (bytearray(b"secret"), b"secret"),
            ("", b""),
        ],
    )
    def test_raw_secret(self, key, raw):
        source = classify_key(key)
        assert source.kind is KeySourceKind.RAW_SECRET
        assert source.data == raw

    @pytest.mark.parametrize("key", [None, 123, 1.5, ["secret"], object()])
    def test_unsupported_key_type(self, key):
        with pytest.raises(UnsupportedKeyTypeError) as exc_info:
            classify_key(key)
        assert isinstance(exc_info.value, InvalidArgumentError)
        assert isinstance(exc_info.value, TypeError)

    def test_malformed_pem(self):
        with pytest.raises(KeyParseError):
            classify_key("-----BEGIN PUBLIC KEY-----\nnot#base64\n-----END PUBLIC KEY-----")


class TestImportKey:
    """Test import_key function."""

    def test_raw_secret_for_both_usages(self):
        handle = import_key("secret", "HS256", "sign")
        assert handle.algorithm == "HS256"
        assert handle.key == b"secret"
        assert handle.allows("sign")
        assert handle.allows("verify")

    def test_private_key_only_signs(self, rsa_private_pem):
        handle = import_key(rsa_private_pem, "RS256", "sign")
        assert isinstance(handle.key, rsa.RSAPrivateKey)
        assert handle.usages == frozenset(["sign"])

        with pytest.raises(InvalidKeyError):
            import_key(rsa_private_pem, "RS256", "verify")

    def test_public_key_only_verifies(self, es256_public_pem):
        handle = import_key(es256_public_pem, "ES256", "verify")
        assert isinstance(handle.key, ec.EllipticCurvePublicKey)
        assert handle.usages == frozenset(["verify"])

        with pytest.raises(InvalidKeyError):
            import_key(es256_public_pem, "ES256", "sign")

    def test_default_usage_is_verify(self, rsa_public_pem):
        assert import_key(rsa_public_pem, "RS512").allows("verify")

    @pytest.mark.parametrize(
        "cert_fixture, alg",
        [("rsa_cert_v1_pem", "RS256"), ("es256_cert_v3_pem", "ES256")],
    )
    def test_certificate(self, request, cert_fixture, alg):
        handle = import_key(request.getfixturevalue(cert_fixture), alg, "verify")
        assert handle.usages == frozenset(["verify"])

    def test_native_key(self, es256_private_pem):
        _key = load_pem_private_key(es256_private_pem.encode(), password=None)
        handle = import_key(_key, "ES256", "sign")
        assert handle.key is _key

    def test_key_handle_is_returned_as_it(self):
        handle = import_key("secret", "HS256", "sign")
        assert import_key(handle, "HS256", "verify") is handle

    def test_key_family_mismatch(self, es256_public_pem, rsa_public_pem):
        with pytest.raises(InvalidKeyError):
            import_key(es256_public_pem, "RS256", "verify")
        with pytest.raises(InvalidKeyError):
            import_key(rsa_public_pem, "ES256", "verify")
        with pytest.raises(InvalidKeyError):
            import_key(rsa_public_pem, "HS256", "verify")

    @pytest.mark.parametrize("alg", ["ES384", "ES512"])
    def test_curve_mismatch(self, es256_public_pem, alg):
        with pytest.raises(InvalidKeyError):
            import_key(es256_public_pem, alg, "verify")

    def test_broken_pem_body(self, rsa_public_pem):
        # valid base64 but not a valid SubjectPublicKeyInfo
        _broken = rsa_public_pem.replace("MIIB", "AAAB", 1)
        with pytest.raises(KeyParseError):
            import_key(_broken, "RS256", "verify")

    def test_unknown_usage(self):
        with pytest.raises(InvalidArgumentError):
            import_key("secret", "HS256", "encrypt")

    def test_unknown_algorithm(self):
        with pytest.raises(AlgorithmNotFoundError):
            import_key("secret", "XX999")

    def test_none_algorithm_takes_no_key(self):
        with pytest.raises(InvalidKeyError):
            import_key("secret", "none")

    def test_unsupported_key_type(self):
        with pytest.raises(UnsupportedKeyTypeError):
            import_key(12345, "HS256")


class TestImportJWK:
    """Test importing key from JWK."""

    def test_oct_jwk(self):
        jwk = HMACAlgorithm.to_jwk(b"secret", as_dict=True)
        handle = import_key(jwk, "HS256", "sign")
        assert handle.key == b"secret"

    def test_rsa_public_jwk(self, rsa_public_pem):
        _pubkey = import_key(rsa_public_pem, "RS256").key
        jwk = RSAAlgorithm.to_jwk(_pubkey, as_dict=True)

        handle = import_key(jwk, "RS256", "verify")
        assert handle.key.public_numbers() == _pubkey.public_numbers()

    def test_jwk_with_matching_members(self):
        jwk = {
            **HMACAlgorithm.to_jwk(b"secret", as_dict=True),
            "alg": "HS384",
            "use": "sig",
            "key_ops": ["sign", "verify"],
        }
        assert isinstance(import_key(jwk, "HS384", "verify"), KeyHandle)

    @pytest.mark.parametrize(
        "members",
        [
            {"alg": "HS512"},
            {"use": "enc"},
            {"key_ops": ["verify"]},
        ],
    )
    def test_jwk_members_restrict_use(self, members):
        jwk = {**HMACAlgorithm.to_jwk(b"secret", as_dict=True), **members}
        with pytest.raises(InvalidKeyError):
            import_key(jwk, "HS256", "sign")

    @pytest.mark.parametrize(
        "jwk",
        [
            {"kty": "RSA", "n": "AQAB", "e": "AQAB"},
            {"kty": "EC", "crv": "P-256"},
            {},
        ],
    )
    def test_invalid_jwk(self, jwk):
        with pytest.raises(InvalidKeyError):
            import_key(jwk, "HS256", "verify")


class TestImportKeyHandle:
    """Pre-imported key handle must fit the requested algorithm and usage."""

    def test_handle_of_other_algorithm(self):
        handle = import_key("secret", "HS256", "verify")
        with pytest.raises(InvalidKeyError):
            import_key(handle, "HS512", "verify")

    def test_handle_usage_not_permitted(self, rsa_public_pem):
        handle = import_key(rsa_public_pem, "RS256", "verify")
        with pytest.raises(InvalidKeyError):
            import_key(handle, "RS256", "sign")


class TestImportRawSecret:
    @pytest.mark.parametrize(
        "secret",
        ["ssh-rsa abc", b"ssh-ed25519 AAAAC3NzaC1lZDI1NTE5", "-----BEGIN FOO-----"],
    )
    def test_key_like_raw_secret_for_hmac(self, secret):
        """Raw secret is used for HMAC as it, even if it looks like a key."""
        assert classify_key(secret).kind is KeySourceKind.RAW_SECRET

        handle = import_key(secret, "HS256", "sign")
        _expected = secret.encode() if isinstance(secret, str) else secret
        assert handle.key == _expected
        assert handle.allows("verify")

    def test_raw_secret_for_asymmetric_algorithm(self):
        with pytest.raises(InvalidKeyError):
            import_key("ssh-rsa abc", "RS256", "verify")
