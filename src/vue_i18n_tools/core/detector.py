"""
中文检测
"""

from __future__ import annotations

import re
from typing import Optional

# CJK 统一汉字基本区
CHINESE_RE = re.compile(r"[\u4e00-\u9fff]")


def has_chinese(text: Optional[str]) -> bool:
    """文本是否包含至少一个中文字符（U+4E00–U+9FFF）"""
    if not text:
        return False
    return CHINESE_RE.search(text) is not None
