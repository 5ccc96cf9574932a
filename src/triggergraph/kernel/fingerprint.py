"""Content fingerprints for external (conditions, edges) snapshots.

The hydration guard compares fingerprints to decide whether an externally
supplied snapshot is new content. Canonicalization rules:
- Object keys sorted recursively
- Arrays preserve order
- Strings normalized to NFC
- Integral floats collapse to ints (250.0 and 250 fingerprint alike)
- NaN/Inf and non-JSON types are rejected
"""

import hashlib
import json
import math
import unicodedata
from typing import Any, Iterable, Mapping, Optional


class CanonicalizationError(ValueError):
    """Raised when an object cannot be canonicalized."""
    pass


def _normalize_string(s: str) -> str:
    return unicodedata.normalize('NFC', s)


def _canonicalize_value(obj: Any, path: str = "") -> Any:
    if obj is None or isinstance(obj, bool):
        return obj
    elif isinstance(obj, int):
        return obj
    elif isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise CanonicalizationError(f"Invalid number at {path or '<root>'}: NaN or Inf not allowed")
        if obj.is_integer():
            return int(obj)
        return obj
    elif isinstance(obj, str):
        return _normalize_string(obj)
    elif isinstance(obj, Mapping):
        result = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise CanonicalizationError(
                    f"Dictionary keys must be strings at {path or '<root>'}, got {type(key).__name__}"
                )
            result[_normalize_string(key)] = _canonicalize_value(value, f"{path}.{key}" if path else key)
        return result
    elif isinstance(obj, (list, tuple)):
        return [
            _canonicalize_value(item, f"{path}[{i}]" if path else f"[{i}]")
            for i, item in enumerate(obj)
        ]
    else:
        raise CanonicalizationError(
            f"Non-JSON type at {path or '<root>'}: {type(obj).__name__}. "
            f"Only None, bool, int, float, str, dict, and list are allowed."
        )


def canonicalize_json(obj: Any) -> str:
    """Canonicalize a JSON-compatible object to a stable string.

    Raises:
        CanonicalizationError: If the object holds NaN/Inf or non-JSON types
    """
    canonicalized = _canonicalize_value(obj)
    return json.dumps(canonicalized, sort_keys=True, ensure_ascii=False, separators=(',', ':'))


def _plain(items: Optional[Iterable[Any]]) -> list:
    """Turn records (dicts or pydantic models) into plain JSON-ish values."""
    if items is None:
        return []
    plain = []
    for item in items:
        if hasattr(item, "model_dump"):
            plain.append(item.model_dump(exclude_none=True))
        else:
            plain.append(item)
    return plain


def fingerprint_snapshot(conditions: Optional[Iterable[Any]], edges: Optional[Iterable[Any]] = None) -> str:
    """Compute the SHA256 fingerprint of a (conditions, edges) pair.

    ``edges=None`` fingerprints like an empty edge list. A payload the
    canonical form cannot represent is fingerprinted through its ``repr`` so a
    malformed snapshot still yields a fingerprint instead of raising.

    Returns:
        SHA256 hash as hex string (prefixed with "sha256:")
    """
    payload = {"conditions": _plain(conditions), "edges": _plain(edges)}
    try:
        canonical_str = canonicalize_json(payload)
    except CanonicalizationError:
        canonical_str = repr(payload)
    digest = hashlib.sha256(canonical_str.encode('utf-8')).hexdigest()
    return f"sha256:{digest}"
