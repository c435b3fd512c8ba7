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
"""Common shared codec helpers and model bases."""

from .codec import (
    base64_decode,
    base64_encode,
    base64url_decode,
    base64url_encode,
    base64url_to_json,
    bytes_to_text,
    json_dumps_compact,
    json_to_base64url,
    pem_to_bytes,
    text_to_base64url,
    text_to_bytes,
)
from .model_spec import (
    AliasEnabledModel,
    FrozenAliasEnabledModel,
    JSONNumber,
    JSONObject,
)

__all__ = [
    "AliasEnabledModel",
    "FrozenAliasEnabledModel",
    "JSONNumber",
    "JSONObject",
    "base64_decode",
    "base64_encode",
    "base64url_decode",
    "base64url_encode",
    "base64url_to_json",
    "bytes_to_text",
    "json_dumps_compact",
    "json_to_base64url",
    "pem_to_bytes",
    "text_to_base64url",
    "text_to_bytes",
]
