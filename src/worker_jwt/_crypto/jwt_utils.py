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
"""Signature compute/check over the signing input, backed by pyjwt algorithms."""

from __future__ import annotations

from worker_jwt.consts import KEY_USAGE_SIGN, KEY_USAGE_VERIFY
from worker_jwt.errors import InvalidKeyError

from .algorithms import AlgorithmSpec
from .key_import import KeyHandle


def _check_key_handle(key: KeyHandle, *, alg: AlgorithmSpec, usage: str) -> None:
    if key.algorithm != alg.name:
        raise InvalidKeyError(
            f"key handle is bound to {key.algorithm}, cannot be used with {alg.name}"
        )
    if not key.allows(usage):
        raise InvalidKeyError(f"key handle doesn't permit {usage}, {key.usages=}")


def compose_signature(
    signing_input: bytes,
    *,
    key: KeyHandle,
    alg: AlgorithmSpec,
) -> bytes:
    """Compute the signature over <signing_input>.

    For ECDSA, the signature is in JWS raw(r || s) format.
    """
    _check_key_handle(key, alg=alg, usage=KEY_USAGE_SIGN)
    return alg.jws.sign(signing_input, key.key)


def check_signature(
    signing_input: bytes,
    signature: bytes,
    *,
    key: KeyHandle,
    alg: AlgorithmSpec,
) -> bool:
    """Check the <signature> against the <signing_input>."""
    _check_key_handle(key, alg=alg, usage=KEY_USAGE_VERIFY)
    return alg.jws.verify(signing_input, key.key, signature)
