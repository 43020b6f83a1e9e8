"""Content fingerprints used as compiled-cache keys."""

from __future__ import annotations

import hashlib
import json
from typing import Any

# Width of the hex digest kept from the MD5 accumulator
FINGERPRINT_LENGTH = 8


def fingerprint(*values: Any) -> str:
    """Compute a short deterministic digest over an ordered list of values.

    Strings are hashed verbatim; anything else is serialized to compact JSON
    first. Values are appended to a single incremental accumulator, so order
    matters and equal inputs (by value) always give equal digests.

    This is a cache key, not a security hash: 8 hex characters accept a
    nonzero collision probability as the keyspace grows.

    Args:
        *values: Values to fold into the digest, in order.

    Returns:
        Lowercase 8-character hexadecimal digest.
    """
    accumulator = hashlib.md5(usedforsecurity=False)
    for value in values:
        text = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
        accumulator.update(text.encode("utf-8"))
    return accumulator.hexdigest()[:FINGERPRINT_LENGTH]
