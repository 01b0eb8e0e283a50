"""
模板消息组装

把模板字符串内容（不含反引号）转为带命名占位符的消息：

    你好 ${user.name}  ->  你好 {user_name}   params: {user_name: user.name}

占位符名 = 表达式中的 ``.`` 替换为 ``_``（其它非标识符字符同样折叠为 ``_``）；
名字冲突时保留第一次出现的表达式。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..sfc.lexer import scan_braced
from ..utils.common import escape_template_text

# 占位符名只保留标识符字符
_NON_IDENT_RE = re.compile(r"[^\w$]+")
_NON_WORD_RE = re.compile(r"\W+")

# {{ expr }}，非贪婪
MUSTACHE_RE = re.compile(r"\{\{\s*(.+?)\s*\}\}", re.DOTALL)


@dataclass
class TemplateMessage:
    pattern: str
    params: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.pattern.strip()


def placeholder_name(expr: str) -> str:
    """
    ``user.name`` -> ``user_name``

    其余非标识符字符（括号、运算符、引号等）合并为 ``_``，
    保证参数对象的键始终是合法标识符
    """
    name = expr.replace(".", "_")
    if _NON_IDENT_RE.search(name):
        name = _NON_WORD_RE.sub("_", name).strip("_") or "value"
    return name


def compose_message(content: str) -> TemplateMessage:
    """
    Replace every ``${expr}`` with ``{name}`` and collect the parameters.

    The end of each placeholder is found by brace matching, so nested
    template literals and object literals inside ``${...}`` stay whole.
    """
    params: dict[str, str] = {}
    out: list[str] = []
    i = 0
    n = len(content)
    while i < n:
        ch = content[i]
        if ch == "\\":
            out.append(content[i:i + 2])
            i += 2
            continue
        if ch == "$" and content.startswith("{", i + 1):
            end = scan_braced(content, i + 2, n)
            expr = content[i + 2:end - 1].strip()
            if content[end - 1:end] != "}" or not expr:
                # 未闭合或空占位符，原样保留
                out.append(content[i:end])
                i = end
                continue
            name = placeholder_name(expr)
            params.setdefault(name, expr)
            out.append("{" + name + "}")
            i = end
            continue
        out.append(ch)
        i += 1
    return TemplateMessage("".join(out), params)


def _escape_unescaped(text: str, quote: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            out.append(text[i:i + 2])
            i += 2
            continue
        out.append("\\" + ch if ch == quote else ch)
        i += 1
    return "".join(out)


def quote_message(message: str) -> str:
    """多行消息用反引号，否则用单引号"""
    quote = "`" if "\n" in message else "'"
    return f"{quote}{_escape_unescaped(message, quote)}{quote}"


def format_params(params: dict[str, str]) -> str:
    """``{ name: expr, "0": expr }``，以数字开头的名字加双引号"""
    items = [
        f'"{name}": {expr}' if name[:1].isdigit() else f"{name}: {expr}"
        for name, expr in params.items()
    ]
    return "{ " + ", ".join(items) + " }"


def build_call(message: TemplateMessage, translate_fn: str = "$t") -> str:
    quoted = quote_message(message.pattern.strip())
    if not message.params:
        return f"{translate_fn}({quoted})"
    return f"{translate_fn}({quoted}, {format_params(message.params)})"


def convert_mustache_to_template(text: str) -> str:
    """``你好 {{ name }}`` -> ``你好 ${name}``（返回模板字符串内容，不含反引号）"""
    out: list[str] = []
    last = 0
    for match in MUSTACHE_RE.finditer(text):
        out.append(escape_template_text(text[last:match.start()]))
        expr = match.group(1).strip()
        if expr:
            out.append("${" + expr + "}")
        last = match.end()
    out.append(escape_template_text(text[last:]))
    return "".join(out)


class TemplateComposer:
    """组装消息、登记 key、生成翻译调用"""

    def __init__(self, registry, translate_fn: str = "$t"):
        self.registry = registry
        self.translate_fn = translate_fn

    def compose(self, content: str) -> tuple[TemplateMessage, str]:
        """
        Returns:
            (message, call expression text)
        """
        message = compose_message(content)
        self.registry.register(message.key, message.pattern)
        return message, build_call(message, self.translate_fn)
