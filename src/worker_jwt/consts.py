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
"""Consts related to JWT composing and verification."""

DEFAULT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TYPE = "JWT"
DEFAULT_CLOCK_TOLERANCE = 0

# NOTE: unsecured JWS, only usable when the caller explicitly asks for it.
NONE_ALGORITHM = "none"

SEGMENT_SEP = "."
SIGNED_TOKEN_SEGMENTS = 3
UNSECURED_TOKEN_SEGMENTS = 2

PEM_PUBLIC_MARKER = "PUBLIC"
PEM_PRIVATE_MARKER = "PRIVATE"
PEM_CERTIFICATE_MARKER = "CERTIFICATE"

KEY_USAGE_SIGN = "sign"
KEY_USAGE_VERIFY = "verify"

# DER walker limits
MAX_DER_DEPTH = 32
MAX_DER_LENGTH_OCTETS = 8
