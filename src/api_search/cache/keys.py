"""Content-addressed cache keys for catalogue entries."""

import hashlib
import json
from typing import Any

KEY_PREFIX = "catalogue-entry-"


def canonical_json(payload: Any) -> str:
    """Serialise ``payload`` with sorted keys and no insignificant whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def content_key(payload: Any) -> str:
    """Key for a fetched self-description.

    Two endpoints serving identical content share a key, so the summary and
    embedding are computed once.

    Example:
        content_key({"info": {"title": "Weather"}})
        # -> "catalogue-entry-3f1c..."
    """
    digest = hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}{digest}"
