"""
模板 / JSX 标记解析（容错、无损）

Vue 模式：
    - 顶层只展开 <template>、<script>；<style> 和自定义块（<i18n>、<docs> 等）整体保留
    - 文本片段可跨越 <!-- --> 注释；含 ``{{ }}`` 的片段为 INTERPOLATION，否则为 MARKUP_TEXT
    - 指令属性值按表达式解析，普通属性值为纯文本

JSX 模式：
    - 文本在 ``<`` 或 ``{`` 处结束，``{ }`` 为表达式容器
    - 属性值可为 ``{ }`` 表达式，支持 ``{...props}``
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.context import is_directive_attribute
from ..tree import NodeKind, SyntaxTree
from .lexer import scan_braced
from .script import ScriptParser

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# 顶层需要展开的块
EXPANDED_BLOCKS = frozenset({"template", "script"})

_TAG_NAME_CHARS = frozenset("-_:.")
_ATTRIBUTE_STOP = frozenset(" \t\r\n\f=>\"'")


def script_uses_jsx(lang: Optional[str]) -> bool:
    """<script lang="..."> 是否按 JSX 解析：ts 不解析，tsx/jsx/js 解析"""
    return (lang or "js").lower() not in ("ts", "typescript")


class MarkupParser:
    """Parse Vue template markup (or a JSX element) into the tree."""

    def __init__(self, tree: SyntaxTree, source: str, jsx: bool = False):
        self.tree = tree
        self.source = source
        self.jsx = jsx
        self.pos = 0
        self.end = len(source)

    # ========================================
    # 入口
    # ========================================

    def parse_document(self, root: int) -> int:
        """整个 .vue 文件"""
        self.pos = 0
        self.end = len(self.source)
        self._parse_children(root, [], top_level=True)
        return root

    def parse_fragment(self) -> int:
        """
        把一段模板文本解析为单个游离节点（供插值预处理重新解析使用）

        Returns:
            只有一个顶层节点时返回该节点，否则返回包住它们的 FRAGMENT
        """
        tree = self.tree
        container = tree.new(NodeKind.FRAGMENT)
        self.pos = 0
        self.end = len(self.source)
        self._parse_children(container, [], top_level=False)
        children = tree.children(container)
        if len(children) == 1:
            tree.detach(children[0])
            return children[0]
        return container

    def parse_jsx_element(self, container: int, pos: int, limit: int) -> tuple[int, int]:
        """
        从 pos 处的 ``<`` 解析一个 JSX 元素

        Returns:
            (元素 handle, 元素结束位置)
        """
        self.pos = pos
        self.end = limit
        handle = self._parse_element(container, [], top_level=False)
        return handle, self.pos

    # ========================================
    # 子节点
    # ========================================

    def _parse_children(self, container: int, open_names: list[str], top_level: bool) -> None:
        src = self.source
        while self.pos < self.end:
            pos = self.pos
            if src.startswith("</", pos):
                name = self._read_close_name(pos)
                if self._closes_open(name, open_names):
                    return
                logger.debug(f"Stray closing tag </{name}> in {self.tree.source_name}")
                self._take_through_gt(container)
                continue
            if src[pos] == "<" and self._is_element_start(pos):
                self._parse_element(container, open_names, top_level)
                continue
            if not self.jsx and src.startswith(("<!", "<?"), pos) and not src.startswith("<!--", pos):
                self._take_through_gt(container)
                continue
            if self.jsx and src[pos] == "{":
                self._parse_expression_container(container)
                continue
            self._parse_text_run(container)

    def _closes_open(self, name: str, open_names: list[str]) -> bool:
        lowered = name.lower()
        return any(open_name == name or open_name.lower() == lowered for open_name in open_names)

    def _is_element_start(self, pos: int) -> bool:
        if pos + 1 >= self.end:
            return False
        following = self.source[pos + 1]
        if self.jsx:
            return following.isalpha() or following in "_$>"
        return following.isalpha()

    def _read_close_name(self, pos: int) -> str:
        i = pos + 2
        while i < self.end and (self.source[i].isalnum() or self.source[i] in _TAG_NAME_CHARS):
            i += 1
        return self.source[pos + 2:i]

    def _take_through_gt(self, container: int) -> None:
        gt = self.source.find(">", self.pos, self.end)
        stop = self.end if gt == -1 else gt + 1
        self.tree.add(container, NodeKind.TOKEN, self.source[self.pos:stop])
        self.pos = stop

    # ========================================
    # 元素
    # ========================================

    def _parse_element(self, container: int, open_names: list[str], top_level: bool) -> int:
        tree = self.tree
        src = self.source
        start = self.pos
        i = start + 1
        while i < self.end and (src[i].isalnum() or src[i] in _TAG_NAME_CHARS or (self.jsx and src[i] == "$")):
            i += 1
        name = src[start + 1:i]
        element = tree.add(container, NodeKind.ELEMENT, name=name)
        tree.add(element, NodeKind.TOKEN, src[start:i])
        self.pos = i

        attributes = self._parse_attributes(element)
        if attributes is None:
            return element

        lowered = name.lower()
        if not self.jsx:
            if lowered in VOID_ELEMENTS:
                return element
            if lowered == "script":
                self._parse_script_body(element, attributes.get("lang"))
                return element
            opaque = (
                lowered == "style"
                or (top_level and lowered not in EXPANDED_BLOCKS)
                or (top_level and lowered == "template" and attributes.get("lang", "html") != "html")
            )
            if opaque:
                self._parse_raw_body(element, name)
                return element

        self._parse_children(element, open_names + [name], top_level=False)
        if src.startswith("</", self.pos) and self._closes_open(self._read_close_name(self.pos), [name]):
            self._take_through_gt(element)
        return element

    def _parse_attributes(self, element: int) -> Optional[dict[str, str]]:
        """
        解析开始标签中的属性，直到 ``>`` 或 ``/>``

        Returns:
            属性名 -> 去引号的值；自闭合或文件结束时返回 None
        """
        tree = self.tree
        src = self.source
        attributes: dict[str, str] = {}
        while self.pos < self.end:
            pos = self.pos
            ch = src[pos]
            if ch.isspace():
                self._take_whitespace(element)
                continue
            if src.startswith("/>", pos):
                tree.add(element, NodeKind.TOKEN, "/>")
                self.pos = pos + 2
                return None
            if ch == ">":
                tree.add(element, NodeKind.TAG_END, ">")
                self.pos = pos + 1
                return attributes
            if self.jsx and ch == "{":
                self._parse_expression_container(element)
                continue
            name, value = self._parse_attribute(element)
            if name:
                attributes[name] = value
        return None

    def _parse_attribute(self, element: int) -> tuple[str, str]:
        tree = self.tree
        src = self.source
        start = self.pos
        i = start
        while i < self.end and src[i] not in _ATTRIBUTE_STOP and not src.startswith("/>", i):
            i += 1
        if i == start:
            # 无法识别的字符
            tree.add(element, NodeKind.TOKEN, src[start])
            self.pos = start + 1
            return "", ""
        name = src[start:i]
        attr = tree.add(element, NodeKind.ATTRIBUTE, name=name)
        tree.add(attr, NodeKind.TOKEN, name)
        self.pos = i

        j = i
        while j < self.end and src[j].isspace():
            j += 1
        if j >= self.end or src[j] != "=":
            return name, ""
        self._take_whitespace(attr)
        tree.add(attr, NodeKind.TOKEN, "=")
        self.pos = j + 1
        self._take_whitespace(attr)
        if self.pos >= self.end:
            return name, ""

        value = tree.add(attr, NodeKind.ATTRIBUTE_VALUE)
        ch = src[self.pos]
        if ch in "\"'":
            close = src.find(ch, self.pos + 1, self.end)
            stop = self.end if close == -1 else close
            tree.add(value, NodeKind.TOKEN, ch)
            inner_start = self.pos + 1
            if stop > inner_start:
                if not self.jsx and is_directive_attribute(name):
                    fragment = tree.add(value, NodeKind.FRAGMENT, name="directive")
                    ScriptParser(tree, src, inner_start, stop).parse_expressions(fragment)
                else:
                    tree.add(value, NodeKind.TEXT_CHARS, src[inner_start:stop])
            if close != -1:
                tree.add(value, NodeKind.TOKEN, ch)
                self.pos = close + 1
            else:
                self.pos = self.end
            return name, src[inner_start:stop]
        if self.jsx and ch == "{":
            self._parse_expression_container(value, kind=None)
            return name, ""
        j = self.pos
        while j < self.end and not src[j].isspace() and src[j] != ">" and not src.startswith("/>", j):
            j += 1
        tree.add(value, NodeKind.TEXT_CHARS, src[self.pos:j])
        unquoted = src[self.pos:j]
        self.pos = j
        return name, unquoted

    def _take_whitespace(self, container: int) -> None:
        src = self.source
        i = self.pos
        while i < self.end and src[i].isspace():
            i += 1
        if i > self.pos:
            self.tree.add(container, NodeKind.WHITESPACE, src[self.pos:i])
            self.pos = i

    def _parse_expression_container(self, container: int, kind: Optional[NodeKind] = NodeKind.EXPRESSION) -> int:
        """JSX ``{ ... }``：kind 为 None 时直接写入 container"""
        tree = self.tree
        node = container if kind is None else tree.add(container, kind)
        close = scan_braced(self.source, self.pos + 1, self.end)
        closed = self.source[close - 1:close] == "}" and close > self.pos + 1
        inner_end = close - 1 if closed else close
        tree.add(node, NodeKind.TOKEN, "{")
        inner = tree.add(node, NodeKind.EXPRESSION)
        ScriptParser(tree, self.source, self.pos + 1, inner_end, jsx=True).parse_expressions(inner)
        if closed:
            tree.add(node, NodeKind.TOKEN, "}")
        self.pos = close
        return node

    def _find_close_tag(self, name: str) -> int:
        lowered = self.source.lower()
        index = lowered.find("</" + name.lower(), self.pos, self.end)
        return self.end if index == -1 else index

    def _parse_script_body(self, element: int, lang: Optional[str]) -> None:
        tree = self.tree
        stop = self._find_close_tag("script")
        body = tree.add(element, NodeKind.FRAGMENT, name="script")
        ScriptParser(tree, self.source, self.pos, stop, jsx=script_uses_jsx(lang)).parse_program(body)
        self.pos = stop
        if self.pos < self.end:
            self._take_through_gt(element)

    def _parse_raw_body(self, element: int, name: str) -> None:
        stop = self._find_close_tag(name)
        if stop > self.pos:
            self.tree.add(element, NodeKind.TOKEN, self.source[self.pos:stop])
        self.pos = stop
        if self.pos < self.end:
            self._take_through_gt(element)

    # ========================================
    # 文本片段
    # ========================================

    def _scan_text_run(self) -> int:
        src = self.source
        i = self.pos
        while i < self.end:
            if self.jsx:
                if src[i] in "<{":
                    break
                i += 1
                continue
            if src.startswith("<!--", i):
                close = src.find("-->", i + 4, self.end)
                i = self.end if close == -1 else close + 3
                continue
            if src.startswith("{{", i):
                close = src.find("}}", i + 2, self.end)
                i = i + 2 if close == -1 else close + 2
                continue
            if src[i] == "<" and (src.startswith(("</", "<!", "<?"), i) or self._is_element_start(i)):
                break
            i += 1
        return i

    def _split_run(self, start: int, stop: int) -> list[tuple[str, int, int]]:
        """片段拆成 (text|comment|mustache, 起, 止)"""
        src = self.source
        pieces: list[tuple[str, int, int]] = []
        text_start = start
        i = start
        while i < stop:
            if not self.jsx and src.startswith("<!--", i):
                close = src.find("-->", i + 4, stop)
                end = stop if close == -1 else close + 3
                kind = "comment"
            elif not self.jsx and src.startswith("{{", i) and src.find("}}", i + 2, stop) != -1:
                end = src.find("}}", i + 2, stop) + 2
                kind = "mustache"
            else:
                i += 1
                continue
            if i > text_start:
                pieces.append(("text", text_start, i))
            pieces.append((kind, i, end))
            i = text_start = end
        if stop > text_start:
            pieces.append(("text", text_start, stop))
        return pieces

    def _parse_text_run(self, container: int) -> None:
        tree = self.tree
        src = self.source
        start = self.pos
        stop = self._scan_text_run()
        if stop == start:
            # 不构成标签的单个字符
            tree.add(container, NodeKind.TEXT_CHARS, src[start])
            self.pos = start + 1
            return
        self.pos = stop
        pieces = self._split_run(start, stop)
        has_mustache = any(kind == "mustache" for kind, _, _ in pieces)
        has_text = any(kind == "text" and src[s:e].strip() for kind, s, e in pieces)

        if has_mustache:
            node = tree.add(container, NodeKind.INTERPOLATION)
        elif has_text:
            node = tree.add(container, NodeKind.MARKUP_TEXT)
        else:
            node = container

        for kind, s, e in pieces:
            if kind == "comment":
                tree.add(node, NodeKind.COMMENT, src[s:e])
            elif kind == "mustache":
                tree.add(node, NodeKind.INTERPOLATION_OPEN, "{{")
                fragment = tree.add(node, NodeKind.FRAGMENT, name="interpolation")
                ScriptParser(tree, src, s + 2, e - 2).parse_expressions(fragment)
                tree.add(node, NodeKind.INTERPOLATION_CLOSE, "}}")
            else:
                self._emit_text(node, src[s:e])

    def _emit_text(self, container: int, text: str) -> None:
        """文本 -> 前导空白 / TEXT_CHARS / 尾随空白"""
        tree = self.tree
        core = text.strip()
        if not core:
            tree.add(container, NodeKind.WHITESPACE, text)
            return
        leading = text[:len(text) - len(text.lstrip())]
        trailing = text[len(text.rstrip()):]
        if leading:
            tree.add(container, NodeKind.WHITESPACE, leading)
        tree.add(container, NodeKind.TEXT_CHARS, core)
        if trailing:
            tree.add(container, NodeKind.WHITESPACE, trailing)


def parse_text(tree: SyntaxTree, text: str) -> int:
    """重新解析一段模板文本，返回游离节点"""
    return MarkupParser(tree, text).parse_fragment()
