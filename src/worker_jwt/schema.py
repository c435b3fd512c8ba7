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
"""Options and result models of sign/verify/decode."""

from __future__ import annotations

import math
import time
from typing import Any, Callable, List, Mapping, Union

from pydantic import ConfigDict, Field, StrictBool, ValidationError, field_validator
from typing_extensions import Self

from worker_jwt.common import (
    AliasEnabledModel,
    FrozenAliasEnabledModel,
    JSONNumber,
    JSONObject,
)
from worker_jwt.consts import DEFAULT_ALGORITHM, DEFAULT_CLOCK_TOLERANCE
from worker_jwt.errors import InvalidArgumentError

ClockFunc = Callable[[], float]


class _OptionsBase(FrozenAliasEnabledModel):
    model_config = ConfigDict(extra="forbid")

    algorithm: str = DEFAULT_ALGORITHM
    clock: ClockFunc = Field(default=time.time, exclude=True)
    """Returns current unix time in seconds, override it for deterministic testing."""

    @classmethod
    def parse_options(cls, options: Self | Mapping[str, Any] | str | None) -> Self:
        """Normalize the options input.

        <options> can be one of None(use all defaults), an algorithm name as shorthand,
            a mapping of options, or an options instance.

        Raises:
            InvalidArgumentError on invalid options.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, str):
            options = {"algorithm": options}
        if not isinstance(options, Mapping):
            raise InvalidArgumentError(
                f"options must be a mapping, an algorithm name or {cls.__name__}, "
                f"get {type(options)=}"
            )

        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            raise InvalidArgumentError(f"invalid {cls.__name__}: {e}") from e

    def now(self) -> int:
        return int(self.clock())


class SignOptions(_OptionsBase):
    header: Union[JSONObject, None] = None
    """Replace the default header({"typ": "JWT"}), `alg` is always set by the signer."""
    key_id: Union[str, None] = None
    """If set, will be put as `kid` into the header."""


class VerifyOptions(_OptionsBase):
    clock_tolerance: JSONNumber = DEFAULT_CLOCK_TOLERANCE
    """Seconds of allowed clock skew when checking `nbf` and `exp`."""
    throw_error: StrictBool = False
    """Raise the specific VerificationError instead of returning None."""

    @field_validator("clock_tolerance")
    @classmethod
    def _non_negative_tolerance(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError(
                f"clock_tolerance must be a finite non-negative number, get {value}"
            )
        return value


class JWTData(FrozenAliasEnabledModel):
    """Decoded header and payload of a JWT.

    Either of them is None if the corresponding segment cannot be parsed.
    """

    header: Union[JSONObject, None] = None
    payload: Union[JSONObject, None] = None

    @property
    def claims(self) -> JWTClaims:
        """Typed view of the registered claims in payload.

        Raises:
            pydantic.ValidationError if payload is missing or registered claims are malformed.
        """
        return JWTClaims.model_validate(self.payload)


class JWTClaims(AliasEnabledModel):
    """Registered claims, see RFC 7519 section 4.1.

    Unregistered claims are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    iss: Union[str, None] = None
    sub: Union[str, None] = None
    aud: Union[str, List[str], None] = None
    exp: Union[JSONNumber, None] = None
    nbf: Union[JSONNumber, None] = None
    iat: Union[JSONNumber, None] = None
    jti: Union[str, None] = None
