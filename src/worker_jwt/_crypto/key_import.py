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
"""Classify and import key material into algorithm-bound key handles.

The supported key material:
1. an already imported KeyHandle, used as it.
2. a `cryptography` RSA/EC key object.
3. a JWK, as mapping.
4. PEM encoded SPKI public key, PKCS8 private key or x509 certificate, as str or bytes.
5. any other str or bytes, as raw secret for HMAC.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Mapping, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_der_public_key,
)
from jwt.exceptions import PyJWTError

from worker_jwt.common.codec import bytes_to_text, pem_to_bytes
from worker_jwt.consts import (
    KEY_USAGE_SIGN,
    KEY_USAGE_VERIFY,
    PEM_CERTIFICATE_MARKER,
    PEM_PRIVATE_MARKER,
    PEM_PUBLIC_MARKER,
)
from worker_jwt.errors import (
    CodecError,
    InvalidArgumentError,
    InvalidKeyError,
    KeyParseError,
    UnsupportedKeyTypeError,
)

from .algorithms import ECDSA_FAMILY, HMAC_FAMILY, AlgorithmSpec, get_algorithm
from .x509_utils import load_pubkey_from_cert_der

logger = logging.getLogger(__name__)

NativeKey = Union[
    RSAPrivateKey, RSAPublicKey, EllipticCurvePrivateKey, EllipticCurvePublicKey
]
_NATIVE_KEY_TYPES = (
    RSAPrivateKey,
    RSAPublicKey,
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
_PRIVATE_KEY_TYPES = (RSAPrivateKey, EllipticCurvePrivateKey)
_PUBLIC_KEY_TYPES = (RSAPublicKey, EllipticCurvePublicKey)

KEY_USAGES = frozenset((KEY_USAGE_SIGN, KEY_USAGE_VERIFY))
JWK_SIG_USE = "sig"


class KeySourceKind(str, Enum):
    HANDLE = "handle"
    NATIVE = "native"
    JWK = "jwk"
    SPKI_PUBLIC = "spki"
    PKCS8_PRIVATE = "pkcs8"
    CERTIFICATE = "certificate"
    RAW_SECRET = "raw"


@dataclass(frozen=True)
class KeySource:
    """Classified key material.

    The type of `data` depends on `kind`:
        HANDLE: KeyHandle,
        NATIVE: cryptography key object,
        JWK: dict,
        SPKI_PUBLIC/PKCS8_PRIVATE/CERTIFICATE: DER bytes decoded from the PEM,
        RAW_SECRET: bytes.
    """

    kind: KeySourceKind
    data: Any


@dataclass(frozen=True)
class KeyHandle:
    """A key bound to one algorithm, with the usages it permits.

    `key` is the provider prepared key, bytes for HMAC,
        or `cryptography` key object for RSA/ECDSA.
    """

    algorithm: str
    usages: FrozenSet[str]
    key: Any

    def allows(self, usage: str) -> bool:
        return usage in self.usages


def classify_key(key: Any) -> KeySource:
    """Determine the form of the input key material.

    Raises:
        UnsupportedKeyTypeError if the key is not any of the supported forms.
        KeyParseError if the key looks like PEM but the PEM body cannot be decoded.
    """
    if isinstance(key, KeyHandle):
        return KeySource(KeySourceKind.HANDLE, key)
    if isinstance(key, _NATIVE_KEY_TYPES):
        return KeySource(KeySourceKind.NATIVE, key)
    if isinstance(key, Mapping):
        return KeySource(KeySourceKind.JWK, dict(key))

    if isinstance(key, (bytes, bytearray)):
        _raw, _text = bytes(key), bytes_to_text(key)
    elif isinstance(key, str):
        _raw, _text = key.encode("utf-8"), key
    else:
        raise UnsupportedKeyTypeError(
            f"unsupported key type: {type(key)}, "
            "expect str, bytes, JWK mapping or key handle"
        )

    for _marker, _kind in (
        (PEM_PUBLIC_MARKER, KeySourceKind.SPKI_PUBLIC),
        (PEM_PRIVATE_MARKER, KeySourceKind.PKCS8_PRIVATE),
        (PEM_CERTIFICATE_MARKER, KeySourceKind.CERTIFICATE),
    ):
        if _marker in _text:
            try:
                return KeySource(_kind, pem_to_bytes(_text))
            except CodecError as e:
                raise KeyParseError(f"invalid PEM for {_kind.value}: {e}") from e
    return KeySource(KeySourceKind.RAW_SECRET, _raw)


def _load_jwk(jwk: dict[str, Any], alg: AlgorithmSpec, usage: str) -> Any:
    if (_jwk_alg := jwk.get("alg")) is not None and _jwk_alg != alg.name:
        raise InvalidKeyError(f"JWK is for {_jwk_alg}, but {alg.name} is requested")
    if (_jwk_use := jwk.get("use")) is not None and _jwk_use != JWK_SIG_USE:
        raise InvalidKeyError(f"JWK with {_jwk_use=} cannot be used for signature")
    if (_key_ops := jwk.get("key_ops")) is not None and usage not in _key_ops:
        raise InvalidKeyError(f"JWK {_key_ops=} doesn't permit {usage}")

    try:
        return alg.jws.from_jwk(jwk)
    except (PyJWTError, KeyError, ValueError, TypeError) as e:
        logger.debug(f"failed to load JWK for {alg.name}: {e!r}", exc_info=e)
        raise KeyParseError(f"failed to load JWK for {alg.name}: {e!r}") from e


def _load_key_material(source: KeySource, alg: AlgorithmSpec, usage: str) -> Any:
    """Load classified key material into bytes or `cryptography` key object."""
    kind, data = source.kind, source.data
    if kind is KeySourceKind.NATIVE or kind is KeySourceKind.RAW_SECRET:
        return data
    if kind is KeySourceKind.JWK:
        return _load_jwk(data, alg, usage)
    if kind is KeySourceKind.CERTIFICATE:
        return load_pubkey_from_cert_der(data)

    try:
        if kind is KeySourceKind.SPKI_PUBLIC:
            return load_der_public_key(data)
        if kind is KeySourceKind.PKCS8_PRIVATE:
            return load_der_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug(f"failed to load {kind.value} key: {e!r}", exc_info=e)
        raise KeyParseError(f"failed to load {kind.value} key: {e}") from e
    raise InvalidKeyError(f"unexpected key source: {kind}")


def _permitted_usages(prepared_key: Any) -> FrozenSet[str]:
    if isinstance(prepared_key, _PRIVATE_KEY_TYPES):
        return frozenset((KEY_USAGE_SIGN,))
    if isinstance(prepared_key, _PUBLIC_KEY_TYPES):
        return frozenset((KEY_USAGE_VERIFY,))
    return KEY_USAGES


def import_key(
    key: Any, algorithm: str | AlgorithmSpec, usage: str = KEY_USAGE_VERIFY
) -> KeyHandle:
    """Import the key material as a key handle for <algorithm> and <usage>.

    If <key> is already a KeyHandle, it is returned as it without re-import,
        after checking it is bound to <algorithm> and permits <usage>.

    Raises:
        AlgorithmNotFoundError if <algorithm> is not supported.
        UnsupportedKeyTypeError if the key is not in any supported form.
        KeyParseError if the key material cannot be parsed.
        InvalidKeyError if the key doesn't fit the algorithm or cannot be used for <usage>.
    """
    alg = algorithm if isinstance(algorithm, AlgorithmSpec) else get_algorithm(algorithm)
    if usage not in KEY_USAGES:
        raise InvalidArgumentError(f"unknown key usage: {usage!r}")
    if alg.is_none:
        raise InvalidKeyError(f"algorithm {alg.name!r} doesn't take a key")

    source = classify_key(key)
    if source.kind is KeySourceKind.HANDLE:
        handle: KeyHandle = source.data
        if handle.algorithm != alg.name or not handle.allows(usage):
            raise InvalidKeyError(
                f"key handle for {handle.algorithm} with {sorted(handle.usages)} "
                f"cannot be used to {usage} with {alg.name}"
            )
        return handle

    _loaded = _load_key_material(source, alg, usage)
    if alg.family == HMAC_FAMILY and source.kind is KeySourceKind.RAW_SECRET:
        # raw secret is used as it, even if it looks like SSH/PEM key material
        prepared = _loaded
    else:
        try:
            prepared = alg.jws.prepare_key(_loaded)
        except (PyJWTError, TypeError, ValueError) as e:
            logger.debug(
                f"{alg.name} rejects {source.kind.value} key: {e!r}", exc_info=e
            )
            raise InvalidKeyError(
                f"{source.kind.value} key cannot be used with {alg.name}: {e}"
            ) from e

    if alg.family == ECDSA_FAMILY and not isinstance(prepared.curve, alg.curve):
        raise InvalidKeyError(
            f"{alg.name} requires curve {alg.curve.name}, get {prepared.curve.name}"
        )

    usages = _permitted_usages(prepared)
    if usage not in usages:
        raise InvalidKeyError(f"{source.kind.value} key cannot be used to {usage}")
    return KeyHandle(algorithm=alg.name, usages=usages, key=prepared)
