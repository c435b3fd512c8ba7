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

from __future__ import annotations

import binascii
import json
import re
from base64 import b64decode, b64encode
from typing import Any

from worker_jwt.errors import CodecError

_PEM_DELIMITER_PA = re.compile(r"-+(BEGIN|END)[^\n]*")
_WHITESPACE_PA = re.compile(r"\s")

_B64_TO_B64URL = str.maketrans("+/", "-_")
_B64URL_TO_B64 = str.maketrans("-_", "+/")

#
# ------ byte string ------ #
#


def bytes_to_text(_in: bytes) -> str:
    """Map each byte to one code unit of the result str."""
    return bytes(_in).decode("latin-1")


def text_to_bytes(_in: str) -> bytes:
    """Reverse of `bytes_to_text`, every char must be in range 0-255."""
    try:
        return _in.encode("latin-1")
    except UnicodeEncodeError as e:
        raise CodecError(f"not a byte string: {e}") from e


#
# ------ base64 ------ #
#


def base64_encode(_in: bytes) -> str:
    return b64encode(_in).decode("ascii")


def base64_decode(_in: str | bytes) -> bytes:
    try:
        return b64decode(_in, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f"invalid base64 input: {e}") from e


def base64url_encode(_in: bytes) -> str:
    """Base64url encode without padding."""
    return base64_encode(_in).translate(_B64_TO_B64URL).rstrip("=")


def base64url_decode(_in: str) -> bytes:
    """Base64url decode, the stripped padding is restored before decoding.

    Raises:
        CodecError if the input length is illegal(len % 4 == 1) or
            the input contains non-base64url chars.
    """
    if not isinstance(_in, str):
        raise CodecError(f"expect str, get {type(_in)=}")

    _in = _WHITESPACE_PA.sub("", _in).translate(_B64URL_TO_B64)
    _remainder = len(_in) % 4
    if _remainder == 2:
        _in += "=="
    elif _remainder == 3:
        _in += "="
    elif _remainder == 1:
        raise CodecError(f"illegal base64url string length: {len(_in)}")
    return base64_decode(_in)


def text_to_base64url(_in: str) -> str:
    return base64url_encode(_in.encode("utf-8"))


def pem_to_bytes(pem: str | bytes) -> bytes:
    """Strip the PEM delimiters and whitespaces, and then base64 decode the body."""
    if isinstance(pem, bytes):
        pem = bytes_to_text(pem)
    _body = _PEM_DELIMITER_PA.sub("", pem)
    return base64_decode(_WHITESPACE_PA.sub("", _body))


#
# ------ JSON segments ------ #
#


def json_dumps_compact(obj: Any) -> bytes:
    """Compact JSON in UTF-8, no whitespaces, non-ASCII chars are kept as it.

    Raises:
        ValueError if <obj> contains NaN or Infinity.
    """
    return json.dumps(
        obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def json_to_base64url(obj: Any) -> str:
    return base64url_encode(json_dumps_compact(obj))


def _reject_constant(_in: str) -> Any:
    raise ValueError(f"non-finite number is not allowed in JSON: {_in}")


def base64url_to_json(_in: str) -> Any:
    """Decode a base64url encoded JSON segment.

    Raises:
        CodecError on invalid base64url, invalid UTF-8 or invalid JSON,
            including the non-standard NaN, Infinity and -Infinity.
    """
    _raw = base64url_decode(_in)
    try:
        return json.loads(_raw.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise CodecError(f"invalid JSON segment: {e!r}") from e
