"""
core/ids.py -- Opaque record identifiers.

Records are keyed by 32-char lowercase hex strings (uuid4). Routes check the
shape of a path id before touching the store so a garbage id is a 400, not a
404.
"""

from __future__ import annotations

import re
import uuid

_ID_RE = re.compile(r"[0-9a-f]{32}")


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(value: str) -> bool:
    return bool(_ID_RE.fullmatch(value or ""))
