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
"""Split and join the dot-separated segments of a compact JWS."""

from __future__ import annotations

from typing import NamedTuple

from worker_jwt.common import base64url_to_json, json_to_base64url
from worker_jwt.common.model_spec import JSONObject
from worker_jwt.consts import (
    SEGMENT_SEP,
    SIGNED_TOKEN_SEGMENTS,
    UNSECURED_TOKEN_SEGMENTS,
)
from worker_jwt.errors import CodecError, InvalidArgumentError, MalformedTokenError


class TokenSegments(NamedTuple):
    header: str
    payload: str
    signature: str | None = None

    @property
    def signing_input(self) -> bytes:
        """The exact bytes the signature is computed over."""
        return f"{self.header}{SEGMENT_SEP}{self.payload}".encode("utf-8")


def split_token(token: str, *, unsecured: bool = False) -> TokenSegments:
    """Split the token into header, payload and signature segments.

    Signed token must have exactly 3 segments. Unsecured token(alg `none`)
        may omit the signature segment.

    Raises:
        InvalidArgumentError if token is not a str.
        MalformedTokenError if the segments count is unexpected.
    """
    if not isinstance(token, str):
        raise InvalidArgumentError(f"token must be a str, get {type(token)=}")

    _parts = token.split(SEGMENT_SEP)
    if len(_parts) == SIGNED_TOKEN_SEGMENTS:
        return TokenSegments(*_parts)
    if unsecured and len(_parts) == UNSECURED_TOKEN_SEGMENTS:
        return TokenSegments(*_parts)

    _expected = "2 or 3" if unsecured else f"{SIGNED_TOKEN_SEGMENTS}"
    raise MalformedTokenError(
        f"token must consist of {_expected} segments, get {len(_parts)}"
    )


def join_segments(*segments: str) -> str:
    return SEGMENT_SEP.join(segments)


def encode_segment(obj: JSONObject) -> str:
    try:
        return json_to_base64url(obj)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"not JSON serializable: {e}") from e


def try_decode_segment(segment: str | None) -> JSONObject | None:
    """Decode a header/payload segment, return None if it is not a JSON object."""
    if segment is None:
        return None
    try:
        _decoded = base64url_to_json(segment)
    except CodecError:
        return None
    return _decoded if isinstance(_decoded, dict) else None
