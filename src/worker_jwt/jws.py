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
"""Sign, verify and decode compact JWS JWT."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from worker_jwt._crypto.algorithms import AlgorithmSpec, get_algorithm
from worker_jwt._crypto.jwt_utils import check_signature, compose_signature
from worker_jwt._crypto.key_import import KeyHandle, import_key
from worker_jwt.claims import validate_time_claims
from worker_jwt.common import base64url_decode, base64url_encode
from worker_jwt.consts import (
    DEFAULT_TOKEN_TYPE,
    KEY_USAGE_SIGN,
    KEY_USAGE_VERIFY,
    SEGMENT_SEP,
)
from worker_jwt.errors import (
    AlgorithmMismatchError,
    CodecError,
    InvalidArgumentError,
    InvalidSignatureError,
    PayloadParseError,
    VerificationError,
)
from worker_jwt.schema import JWTData, SignOptions, VerifyOptions
from worker_jwt.segments import (
    TokenSegments,
    encode_segment,
    join_segments,
    split_token,
    try_decode_segment,
)

logger = logging.getLogger(__name__)


def sign(
    payload: Mapping[str, Any],
    secret: Any,
    options: SignOptions | Mapping[str, Any] | str | None = None,
) -> str:
    """Sign the <payload> and return the compact JWT.

    The input <payload> is not modified, `iat` is added to the signed
        claims with current unix time if it is not set.

    Args:
        payload: The claims to sign, `nbf` and `exp` can be set here.
        secret: The key to sign with, a raw secret text/bytes, a PEM encoded PKCS8
            private key, a JWK mapping, or a KeyHandle imported for `sign`.
        options: A SignOptions instance, a mapping of options, or just the algorithm name.
            By default algorithm HS256 with header {"typ": "JWT"} will be used.

    Raises:
        InvalidArgumentError(or its subclasses) on invalid input.
        InvalidKeyError(or its subclasses) if the key cannot be used for signing.

    Returns:
        The signed token, or for algorithm `none`, the unsecured token with only 2 segments.
    """
    if not isinstance(payload, Mapping):
        raise InvalidArgumentError(f"payload must be a mapping, get {type(payload)=}")
    opts = SignOptions.parse_options(options)
    alg = get_algorithm(opts.algorithm)

    if opts.header is None:
        header = {"typ": DEFAULT_TOKEN_TYPE}
    else:
        header = dict(opts.header)
    if opts.key_id is not None:
        header["kid"] = opts.key_id
    header["alg"] = alg.name

    claims = dict(payload)
    if claims.get("iat") is None:
        claims["iat"] = opts.now()

    unsigned_token = join_segments(encode_segment(header), encode_segment(claims))
    if alg.is_none:
        return unsigned_token

    key = import_key(secret, alg, KEY_USAGE_SIGN)
    signature = compose_signature(unsigned_token.encode("utf-8"), key=key, alg=alg)
    return join_segments(unsigned_token, base64url_encode(signature))


def _check_token_signature(
    segments: TokenSegments, key: KeyHandle | None, *, alg: AlgorithmSpec
) -> None:
    if alg.is_none:
        if segments.signature:
            raise InvalidSignatureError("unsecured token must not carry signature")
        return

    _encoded_sig = segments.signature or ""
    try:
        _sig = base64url_decode(_encoded_sig)
    except CodecError as e:
        raise InvalidSignatureError(f"malformed signature segment: {e}") from e
    # reject non-canonical encoding, i.e., non-zero trailing bits in the last char
    if base64url_encode(_sig) != _encoded_sig:
        raise InvalidSignatureError("signature segment is not canonical base64url")

    if not check_signature(segments.signing_input, _sig, key=key, alg=alg):
        raise InvalidSignatureError("signature mismatch")


def _verify_segments(
    segments: TokenSegments,
    key: KeyHandle | None,
    *,
    alg: AlgorithmSpec,
    opts: VerifyOptions,
) -> JWTData:
    header = try_decode_segment(segments.header)
    if header is None or header.get("alg") != alg.name:
        _token_alg = header.get("alg") if header else None
        raise AlgorithmMismatchError(f"expect {alg.name}, token has {_token_alg!r}")

    payload = try_decode_segment(segments.payload)
    if payload is None:
        raise PayloadParseError("payload is not a base64url encoded JSON object")
    validate_time_claims(
        payload, now=opts.now(), clock_tolerance=opts.clock_tolerance
    )

    _check_token_signature(segments, key, alg=alg)
    return JWTData(header=header, payload=payload)


def verify(
    token: str,
    secret: Any,
    options: VerifyOptions | Mapping[str, Any] | str | None = None,
) -> JWTData | None:
    """Verify the algorithm, `nbf`, `exp` and the signature of the <token>.

    The key is imported before the token is examined, so an unusable key
        always raises, no matter whether the token would pass the other checks.

    For algorithm `none`, no key is used and no signature is computed, but the
        token is rejected with INVALID_SIGNATURE if it carries a non-empty
        signature segment.

    Args:
        token: The compact JWT.
        secret: The key to verify with, a raw secret text/bytes, a PEM encoded SPKI
            public key or x509 certificate, a JWK mapping, or a KeyHandle imported for `verify`.
        options: A VerifyOptions instance, a mapping of options, or just the algorithm name.

    Raises:
        InvalidArgumentError(or its subclasses) on invalid input, regardless of `throw_error`.
        InvalidKeyError(or its subclasses) if the key cannot be used for verification.
        VerificationError(or its subclasses) on failed verification, only when `throw_error` is True.

    Returns:
        The decoded header and payload if the token passes all checks, else None.
    """
    opts = VerifyOptions.parse_options(options)
    alg = get_algorithm(opts.algorithm)
    segments = split_token(token, unsecured=alg.is_none)
    key = None if alg.is_none else import_key(secret, alg, KEY_USAGE_VERIFY)

    try:
        return _verify_segments(segments, key, alg=alg, opts=opts)
    except VerificationError as e:
        logger.debug(f"token verification failed: {e.kind.value}, {e.detail}")
        if opts.throw_error:
            raise
        return None


def decode(token: str) -> JWTData:
    """Decode the header and payload of <token> WITHOUT verification.

    This is for inspecting and debugging only, NEVER make trust decisions on
        the result, use `verify` instead.

    Segment that cannot be decoded as JSON object is returned as None.

    Raises:
        InvalidArgumentError if token is not a str.
    """
    if not isinstance(token, str):
        raise InvalidArgumentError(f"token must be a str, get {type(token)=}")

    _parts = token.split(SEGMENT_SEP)
    return JWTData(
        header=try_decode_segment(_parts[0]),
        payload=try_decode_segment(_parts[1] if len(_parts) > 1 else None),
    )
