"""
提取结果登记表

key -> 原文 的有序映射，先写入者胜出：同一 key 的原文在一次运行内不再改变。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class ExtractedEntry:
    key: str
    text: str


class KeyRegistry:
    """Ordered key -> text map with first-write-wins semantics."""

    def __init__(self):
        self._entries: dict[str, str] = {}

    def register(self, key: str, text: Optional[str] = None) -> str:
        """Insert ``key`` unless already present; return the key."""
        if key not in self._entries:
            self._entries[key] = key if text is None else text
        return key

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def entries(self) -> list[ExtractedEntry]:
        return [ExtractedEntry(k, v) for k, v in self._entries.items()]

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExtractedEntry]:
        return iter(self.entries())
