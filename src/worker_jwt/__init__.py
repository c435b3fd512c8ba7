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
"""JSON Web Token signing, verification and decoding."""

from ._crypto.algorithms import SUPPORTED_ALGORITHMS
from ._crypto.key_import import KeyHandle, import_key
from .errors import (
    AlgorithmMismatchError,
    AlgorithmNotFoundError,
    CodecError,
    DERParseError,
    ExpiredError,
    FailureKind,
    InvalidArgumentError,
    InvalidKeyError,
    InvalidSignatureError,
    JWTError,
    KeyParseError,
    MalformedTokenError,
    NotYetValidError,
    PayloadParseError,
    UnsupportedKeyTypeError,
    VerificationError,
)
from .jws import decode, sign, verify
from .schema import JWTClaims, JWTData, SignOptions, VerifyOptions

__all__ = [
    "SUPPORTED_ALGORITHMS",
    "KeyHandle",
    "import_key",
    "sign",
    "verify",
    "decode",
    "JWTClaims",
    "JWTData",
    "SignOptions",
    "VerifyOptions",
    "FailureKind",
    "JWTError",
    "InvalidArgumentError",
    "AlgorithmNotFoundError",
    "MalformedTokenError",
    "UnsupportedKeyTypeError",
    "CodecError",
    "InvalidKeyError",
    "KeyParseError",
    "DERParseError",
    "VerificationError",
    "AlgorithmMismatchError",
    "PayloadParseError",
    "NotYetValidError",
    "ExpiredError",
    "InvalidSignatureError",
]
