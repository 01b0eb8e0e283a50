#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
通用辅助函数 - JS 字符串字面量的解码与转义
"""
from __future__ import annotations

import re
from typing import Optional

# ========================================
# 常量定义（统一来源）
# ========================================

QUOTE_CHARS = ("'", '"', "`")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


# ========================================
# 字面量解码
# ========================================

def is_quoted(text: str) -> bool:
    """文本是否被同一种引号包裹"""
    return len(text) >= 2 and text[0] in QUOTE_CHARS and text[-1] == text[0]


def decode_js_string(raw: str) -> Optional[str]:
    """把 JS 字符串字面量源码解码为字符串值

    Args:
        raw: 带引号的字面量源码，例如 ``'你好\\n'``

    Returns:
        解码后的值；不是合法字面量时返回 None
    """
    if not is_quoted(raw):
        return None
    body = raw[1:-1]
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            out.append(ch)
            break
        nxt = body[i + 1]
        if nxt in _SIMPLE_ESCAPES and not (nxt == "0" and i + 2 < n and body[i + 2].isdigit()):
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "x" and re.fullmatch(r"[0-9A-Fa-f]{2}", body[i + 2:i + 4]):
            out.append(chr(int(body[i + 2:i + 4], 16)))
            i += 4
        elif nxt == "u" and body[i + 2:i + 3] == "{":
            end = body.find("}", i + 3)
            code = body[i + 3:end] if end != -1 else ""
            if not re.fullmatch(r"[0-9A-Fa-f]{1,6}", code) or int(code, 16) > 0x10FFFF:
                out.append(nxt)
                i += 2
                continue
            out.append(chr(int(code, 16)))
            i = end + 1
        elif nxt == "u" and re.fullmatch(r"[0-9A-Fa-f]{4}", body[i + 2:i + 6]):
            out.append(chr(int(body[i + 2:i + 6], 16)))
            i += 6
        elif nxt == "\r":
            # line continuation
            i += 3 if body[i + 2:i + 3] == "\n" else 2
        elif nxt in ("\n", "\u2028", "\u2029"):
            i += 2
        else:
            out.append(nxt)
            i += 2
    return "".join(out)


# ========================================
# 字面量编码
# ========================================

def quote_js_string(value: str, quote: str = "'") -> str:
    """把字符串值编码为指定引号的 JS 字面量"""
    escaped = (
        value.replace("\\", "\\\\")
        .replace(quote, "\\" + quote)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )
    return f"{quote}{escaped}{quote}"


def escape_template_text(value: str) -> str:
    """把普通文本转为可放入模板字符串的原始内容"""
    return value.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


