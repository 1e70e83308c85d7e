"""
Canonical serialisation and hashing of the optional link parameters.

Two creation requests with the same host, target link and ParamsHash
describe the same durable link. The digest covers only the optional
parameters, never host, link or path.
"""

import hashlib
from typing import Any, Mapping

from durablelinks.domain.models import OPTIONAL_PARAMETER_FIELDS

FIELD_SEPARATOR = "\x00"
ABSENT_SENTINEL = "\x01"


def _canonical_value(value: Any) -> str:
    if value is None:
        return ABSENT_SENTINEL
    return str(value)


def canonical_parameters(parameters: Mapping[str, Any]) -> bytes:
    """
    Serialise the optional parameters in their fixed order.

    Absent fields contribute a single 0x01 byte, so an absent field never
    collides with an empty string.
    """
    parts = [
        _canonical_value(parameters.get(name))
        for name in OPTIONAL_PARAMETER_FIELDS
    ]
    return FIELD_SEPARATOR.join(parts).encode("utf-8")


def compute_params_hash(parameters: Mapping[str, Any]) -> str:
    """Return the lowercase hex SHA-256 of the canonical parameter set."""
    return hashlib.sha256(canonical_parameters(parameters)).hexdigest()
