"""Manifest: archive member path -> lowercase hex SHA-1 of its bytes.

SHA-1 is a format compatibility constraint, not the security boundary:
the manifest's own integrity comes from the detached signature over its
serialized bytes.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator

from pydantic import TypeAdapter

_MANIFEST_ADAPTER: TypeAdapter[dict[str, str]] = TypeAdapter(dict[str, str])


def sha1_hex(data: bytes) -> str:
    """Return lowercase hex SHA-1 digest of ``data``."""
    return hashlib.sha1(data, usedforsecurity=False).hexdigest()


class Manifest:
    """Digest table built while writing and consulted while reading.

    Example:
        >>> manifest = Manifest()
        >>> manifest.add_file("icon.png", b"ABC")
        >>> manifest.verify_file("icon.png", b"ABC")
        True
        >>> manifest.digest("icon.png")
        '3c01bdbb26f358bab27f267924aa2c9a03fcfdb8'
    """

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    def add_file(self, path: str, data: bytes) -> None:
        """Record the digest of ``data`` under ``path``.

        Raises:
            RuntimeError: If ``path`` is already recorded; the writer emits
                each member exactly once, so this is a bug, not bad input.
        """
        if path in self._entries:
            raise RuntimeError(f"manifest already contains an entry for {path!r}")
        self._entries[path] = sha1_hex(data)

    def verify_file(self, path: str, data: bytes) -> bool:
        """True iff ``path`` is recorded and its digest matches ``data``."""
        expected = self._entries.get(path)
        return expected is not None and expected == sha1_hex(data)

    def digest(self, path: str) -> str | None:
        return self._entries.get(path)

    def to_json_bytes(self) -> bytes:
        """Compact JSON object in insertion order."""
        return json.dumps(self._entries, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_json_bytes(cls, data: bytes) -> Manifest:
        """Parse ``manifest.json``; pydantic.ValidationError on bad content."""
        return cls(_MANIFEST_ADAPTER.validate_json(data))

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Manifest({len(self._entries)} entries)"
