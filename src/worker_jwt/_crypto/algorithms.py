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
"""Static registry of the supported JWS algorithms."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type

from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import (
    Algorithm,
    ECAlgorithm,
    HMACAlgorithm,
    NoneAlgorithm,
    RSAAlgorithm,
)

from worker_jwt.consts import NONE_ALGORITHM
from worker_jwt.errors import AlgorithmNotFoundError

HMAC_FAMILY = "HMAC"
RSA_FAMILY = "RSASSA-PKCS1-v1_5"
ECDSA_FAMILY = "ECDSA"
NONE_FAMILY = "none"


@dataclass(frozen=True)
class AlgorithmSpec:
    """Primitive parameters of one JWS algorithm.

    `jws` is the pyjwt algorithm instance that performs the actual
        key preparation, signing and verification.
    """

    name: str
    family: str
    hash_name: Optional[str]
    jws: Algorithm
    curve: Optional[Type[ec.EllipticCurve]] = None

    @property
    def is_none(self) -> bool:
        return self.family == NONE_FAMILY


# fmt: off
_ALGORITHMS = {
    "HS256": AlgorithmSpec("HS256", HMAC_FAMILY, "SHA-256", HMACAlgorithm(HMACAlgorithm.SHA256)),
    "HS384": AlgorithmSpec("HS384", HMAC_FAMILY, "SHA-384", HMACAlgorithm(HMACAlgorithm.SHA384)),
    "HS512": AlgorithmSpec("HS512", HMAC_FAMILY, "SHA-512", HMACAlgorithm(HMACAlgorithm.SHA512)),
    "RS256": AlgorithmSpec("RS256", RSA_FAMILY, "SHA-256", RSAAlgorithm(RSAAlgorithm.SHA256)),
    "RS384": AlgorithmSpec("RS384", RSA_FAMILY, "SHA-384", RSAAlgorithm(RSAAlgorithm.SHA384)),
    "RS512": AlgorithmSpec("RS512", RSA_FAMILY, "SHA-512", RSAAlgorithm(RSAAlgorithm.SHA512)),
    "ES256": AlgorithmSpec("ES256", ECDSA_FAMILY, "SHA-256", ECAlgorithm(ECAlgorithm.SHA256), ec.SECP256R1),
    "ES384": AlgorithmSpec("ES384", ECDSA_FAMILY, "SHA-384", ECAlgorithm(ECAlgorithm.SHA384), ec.SECP384R1),
    "ES512": AlgorithmSpec("ES512", ECDSA_FAMILY, "SHA-512", ECAlgorithm(ECAlgorithm.SHA512), ec.SECP521R1),
    NONE_ALGORITHM: AlgorithmSpec(NONE_ALGORITHM, NONE_FAMILY, None, NoneAlgorithm()),
}
# fmt: on

ALGORITHMS: Mapping[str, AlgorithmSpec] = MappingProxyType(_ALGORITHMS)
SUPPORTED_ALGORITHMS = tuple(ALGORITHMS)


def get_algorithm(name: Any) -> AlgorithmSpec:
    """Resolve the algorithm identifier.

    Raises:
        AlgorithmNotFoundError if <name> is not a str or is not a supported algorithm.
    """
    if not isinstance(name, str):
        raise AlgorithmNotFoundError(f"algorithm must be a str, get {type(name)=}")
    try:
        return ALGORITHMS[name]
    except KeyError:
        raise AlgorithmNotFoundError(f"algorithm not found: {name!r}") from None
