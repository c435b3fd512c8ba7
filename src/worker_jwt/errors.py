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
"""Errors raised by worker_jwt.

There are three groups of errors:
1. contract violations(InvalidArgumentError and its subclasses), which are
    always raised as they indicate caller misuse.
2. key errors(InvalidKeyError and its subclasses), raised when the key material
    cannot be imported, or doesn't fit the algorithm or the intended usage.
3. verification failures(VerificationError and its subclasses), which are only
    raised to the caller when the caller opts in with `throw_error`.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    ALG_MISMATCH = "ALG_MISMATCH"
    PARSE_ERROR = "PARSE_ERROR"
    NOT_YET_VALID = "NOT_YET_VALID"
    EXPIRED = "EXPIRED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class JWTError(Exception):
    """Base exception of worker_jwt."""


#
# ------ contract violations ------ #
#


class InvalidArgumentError(JWTError, ValueError):
    """The caller passes in argument with wrong type or shape."""


class AlgorithmNotFoundError(InvalidArgumentError):
    """The algorithm identifier cannot be resolved."""


class MalformedTokenError(InvalidArgumentError):
    """The token doesn't have the expected segments structure."""


class UnsupportedKeyTypeError(InvalidArgumentError, TypeError):
    """The key is neither a text/bytes, a JWK mapping nor a key handle."""


#
# ------ codec ------ #
#


class CodecError(JWTError, ValueError):
    """Malformed base64/base64url/text input."""


#
# ------ key errors ------ #
#


class InvalidKeyError(JWTError, ValueError):
    """The key doesn't fit the algorithm or the requested usage."""


class KeyParseError(InvalidKeyError):
    """Failed to parse the PEM/DER/JWK key material."""


class DERParseError(KeyParseError):
    """Malformed DER/BER encoded input."""


#
# ------ verification failures ------ #
#


class VerificationError(JWTError):
    """Base exception for untrusted-input verification failures.

    The string representation of the exception is its failure kind code.
    """

    kind: FailureKind

    def __init__(self, detail: str = "") -> None:
        super().__init__(self.kind.value)
        self.detail = detail


class AlgorithmMismatchError(VerificationError):
    kind = FailureKind.ALG_MISMATCH


class PayloadParseError(VerificationError):
    kind = FailureKind.PARSE_ERROR


class NotYetValidError(VerificationError):
    kind = FailureKind.NOT_YET_VALID


class ExpiredError(VerificationError):
    kind = FailureKind.EXPIRED


class InvalidSignatureError(VerificationError):
    kind = FailureKind.INVALID_SIGNATURE
