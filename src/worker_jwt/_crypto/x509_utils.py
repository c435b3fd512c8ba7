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

import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from cryptography.hazmat.primitives.serialization import load_der_public_key

from worker_jwt.errors import DERParseError, KeyParseError

from .der import TAG_EXPLICIT_0, TAG_SEQUENCE, expect_tag, read_children, read_tlv

logger = logging.getLogger(__name__)

# Index of subjectPublicKeyInfo in TBSCertificate, see RFC 5280 section 4.1.
#   version [0] EXPLICIT is optional, it shifts the index by one when presented.
SPKI_INDEX_WITHOUT_VERSION = 5
SPKI_INDEX_WITH_VERSION = 6


def extract_spki_from_cert_der(cert_der: bytes) -> bytes:
    """Locate the SubjectPublicKeyInfo inside a DER encoded x509 certificate.

    Certificate  ::=  SEQUENCE  {
        tbsCertificate       TBSCertificate,
        signatureAlgorithm   AlgorithmIdentifier,
        signatureValue       BIT STRING  }

    Returns:
        The encoded bytes(tag, length and value) of the SubjectPublicKeyInfo element.

    Raises:
        DERParseError if the input is not a certificate structure.
    """
    cert = expect_tag(read_tlv(cert_der), TAG_SEQUENCE)
    cert_elements = read_children(cert_der, cert)
    if not cert_elements:
        raise DERParseError("empty certificate")
    tbs = expect_tag(cert_elements[0], TAG_SEQUENCE)

    tbs_elements = read_children(cert_der, tbs)
    if tbs_elements and tbs_elements[0].tag == TAG_EXPLICIT_0:
        spki_idx = SPKI_INDEX_WITH_VERSION
    else:
        spki_idx = SPKI_INDEX_WITHOUT_VERSION

    if len(tbs_elements) <= spki_idx:
        raise DERParseError(
            f"TBSCertificate too short: {len(tbs_elements)=}, expect > {spki_idx}"
        )
    spki = expect_tag(tbs_elements[spki_idx], TAG_SEQUENCE)
    return spki.encoded(cert_der)


def load_pubkey_from_cert_der(cert_der: bytes) -> PublicKeyTypes:
    """Extract and load the public key of a DER encoded x509 certificate.

    Raises:
        KeyParseError if the certificate or the embedded public key cannot be parsed.
    """
    _spki = extract_spki_from_cert_der(cert_der)
    try:
        return load_der_public_key(_spki)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug(f"failed to load public key from cert: {e!r}", exc_info=e)
        raise KeyParseError(f"failed to load public key from certificate: {e}") from e
