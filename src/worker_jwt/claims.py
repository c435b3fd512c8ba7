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

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from worker_jwt.common import JSONNumber
from worker_jwt.errors import ExpiredError, NotYetValidError, PayloadParseError


class _TimeClaims(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    exp: Union[JSONNumber, None] = None
    nbf: Union[JSONNumber, None] = None


def validate_time_claims(
    payload: Any, *, now: float, clock_tolerance: float = 0
) -> None:
    """Check `nbf` and `exp` of <payload> against <now>.

    The tolerance only applies to the excess in the failing direction:
        nbf is in the future by more than tolerance -> NOT_YET_VALID,
        exp is in the past by more than tolerance -> EXPIRED.

    Raises:
        PayloadParseError if payload is not an object, or `nbf`/`exp` is not a finite number.
        NotYetValidError, ExpiredError on failed check.
    """
    if not isinstance(payload, dict):
        raise PayloadParseError(f"payload must be a JSON object, get {type(payload)}")
    try:
        _claims = _TimeClaims.model_validate(payload)
    except ValidationError as e:
        raise PayloadParseError(f"malformed time claims: {e}") from e

    nbf, exp = _claims.nbf, _claims.exp
    if nbf is not None and nbf > now and nbf - now > clock_tolerance:
        raise NotYetValidError(f"{nbf=}, {now=}, {clock_tolerance=}")
    if exp is not None and exp <= now and now - exp > clock_tolerance:
        raise ExpiredError(f"{exp=}, {now=}, {clock_tolerance=}")
