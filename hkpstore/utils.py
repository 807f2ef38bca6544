"""
hkpstore.utils
--------------
Small helpers for timestamps, digests and identifier normalization.
"""

from __future__ import annotations
import hashlib, json, time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Union


def now_unix() -> int:
    return int(time.time())


def to_unix(t: Union[int, float, datetime]) -> int:
    if isinstance(t, datetime):
        if t.tzinfo is None:
            t = t.replace(tzinfo=timezone.utc)
        return int(t.timestamp())
    return int(t)


def from_unix(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def lowered(values: Iterable[str]) -> List[str]:
    # copies; callers' lists are never rewritten in place
    return [v.lower() for v in values]


def canonical_json(obj: Dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")
