"""
改写规则

每种节点类型对应一条规则：模板文本、属性值、字符串字面量、``+`` 拼接。
规则只登记 key 并把改动放入 ChangeSet，不直接修改语法树。

规则返回 True 表示已排队替换该节点本身，遍历器不再深入其子节点。
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..tree import NodeKind, SyntaxTree
from ..utils.common import QUOTE_CHARS, decode_js_string, escape_template_text, quote_js_string
from ..utils.config import ExtractorConfig
from ..utils.logger import MalformedStructureError
from .changes import ChangeSet
from .composer import TemplateComposer
from .context import (
    STATEMENT_BOUNDARY_KINDS,
    is_directive_attribute,
    is_excluded_region,
    is_in_script_region,
    is_render_expression_context,
)
from .detector import has_chinese
from .registry import KeyRegistry

logger = logging.getLogger(__name__)

Rule = Callable[[int], bool]

_TRIVIA_KINDS = (NodeKind.WHITESPACE, NodeKind.COMMENT)


def is_pure_comment(text: str) -> bool:
    """整段文本恰好是一个 <!-- --> 注释"""
    return (
        text.startswith("<!--")
        and text.endswith("-->")
        and text.count("<!--") == 1
        and text.count("-->") == 1
    )


def literal_to_template(raw: str) -> str:
    """把引号字面量的源码内容转为模板字符串内容（保留原转义）"""
    body = raw[1:-1] if len(raw) >= 2 else ""
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            out.append(body[i:i + 2])
            i += 2
            continue
        if ch == "`":
            out.append("\\`")
        elif ch == "$" and body.startswith("{", i + 1):
            out.append("\\$")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


class RewriteRules:
    """Per-kind rewrite rules sharing one registry and change set."""

    def __init__(
        self,
        tree: SyntaxTree,
        registry: KeyRegistry,
        changes: ChangeSet,
        config: Optional[ExtractorConfig] = None,
    ):
        self.tree = tree
        self.registry = registry
        self.changes = changes
        self.config = config or ExtractorConfig()
        self.translate_fn = self.config.translate_fn
        self.call_marker = self.config.call_marker
        self.composer = TemplateComposer(registry, self.translate_fn)
        self.advisories: list[str] = []
        self._warned_enums: set[int] = set()

    def table(self) -> dict[NodeKind, Rule]:
        """节点类型 -> 规则"""
        return {
            NodeKind.MARKUP_TEXT: self.markup_text,
            NodeKind.ATTRIBUTE_VALUE: self.attribute_value,
            NodeKind.STRING_LITERAL: self.string_literal,
            NodeKind.BINARY_CONCAT: self.binary_concat,
        }

    # ========================================
    # 模板文本
    # ========================================

    def markup_text(self, handle: int) -> bool:
        tree = self.tree
        if is_excluded_region(tree, handle):
            return False
        trimmed = tree.text(handle).strip()
        if not trimmed or is_pure_comment(trimmed):
            return False
        if self.call_marker in trimmed:
            return False
        children = tree.children(handle)
        filtered = "".join(
            tree.text(child) for child in children
            if tree.kind(child) is not NodeKind.COMMENT
        ).strip()
        if not has_chinese(filtered):
            return False
        tokens = [child for child in children if tree.kind(child) is NodeKind.TEXT_CHARS]
        self._rewrite_text(handle, tokens or [handle], filtered)
        return True

    def text_token(self, handle: int) -> bool:
        """插值节点中位于 {{ }} 之外的单个文本片段"""
        if is_excluded_region(self.tree, handle):
            return False
        text = self.tree.text(handle).strip()
        if not text or not has_chinese(text) or self.call_marker in text:
            return False
        self._rewrite_text(handle, [handle], text)
        return True

    def _rewrite_text(self, anchor: int, tokens: list[int], text: str) -> None:
        key = self.registry.register(text, text)
        call = f"{self.translate_fn}(`{escape_template_text(key)}`)"
        if is_render_expression_context(self.tree, anchor):
            wrapper = "{ " + call + " }"
        else:
            wrapper = "{{ " + call + " }}"
        self.changes.replace(tokens[0], wrapper)
        for token in tokens[1:]:
            self.changes.delete(token)

    # ========================================
    # 属性值
    # ========================================

    def attribute_value(self, handle: int) -> bool:
        tree = self.tree
        if is_excluded_region(tree, handle):
            return False
        raw = tree.text(handle)
        quote: Optional[str] = None
        inner = raw
        if len(raw) >= 2 and raw[0] in QUOTE_CHARS and raw[-1] == raw[0]:
            quote = raw[0]
            inner = raw[1:-1]
        value = inner.strip()

        in_script = is_in_script_region(tree, handle)
        if in_script and value.startswith("{") and value.endswith("}"):
            return False
        if not value or not has_chinese(value):
            return False
        if self.call_marker in value:
            return False
        if value.startswith("`") and "${" in value:
            return False

        attr = tree.parent(handle)
        if attr is None or tree.kind(attr) is not NodeKind.ATTRIBUTE:
            raise MalformedStructureError("Attribute value outside of an attribute", handle=handle)

        name = tree.name(attr) or ""
        directive = is_directive_attribute(name)
        if directive and any(q in value for q in QUOTE_CHARS):
            # 指令值中的字符串字面量交给字符串规则
            return False

        key = self.registry.register(value, value)
        if in_script:
            call = f"{self.translate_fn}({quote_js_string(key)})"
            new_text = f"{name}={{{call}}}"
        else:
            attr_quote = quote or '"'
            inner_quote = '"' if attr_quote == "'" else "'"
            call = f"{self.translate_fn}({quote_js_string(key, inner_quote)})"
            prefix = "" if directive else ":"
            new_text = f"{prefix}{name}={attr_quote}{call}{attr_quote}"
        self.changes.replace(attr, new_text)
        return True

    # ========================================
    # 字符串字面量
    # ========================================

    def string_literal(self, handle: int) -> bool:
        tree = self.tree
        if is_excluded_region(tree, handle):
            return False
        raw = tree.text(handle)
        if not raw or not has_chinese(raw):
            return False
        if self.is_translate_argument(handle):
            return False
        if self._skip_enum_member(handle):
            return False

        if raw.startswith("`") and "${" in raw:
            content = raw[1:-1] if len(raw) >= 2 and raw.endswith("`") else raw[1:]
            self._compose(handle, content)
            return True

        value = decode_js_string(raw)
        if value is None:
            logger.debug(f"Undecodable literal left untouched: {raw[:40]!r}")
            return False
        text = value.strip()
        if not text:
            return False
        key = self.registry.register(text, text)
        quote = '"' if raw.startswith('"') else "'"
        self.changes.replace(handle, f"{self.translate_fn}({quote_js_string(key, quote)})")
        return True

    # ========================================
    # + 拼接
    # ========================================

    def binary_concat(self, handle: int) -> bool:
        tree = self.tree
        if is_excluded_region(tree, handle):
            return False
        if not has_chinese(tree.text(handle)):
            return False
        if self.is_translate_argument(handle):
            return False
        if self._skip_enum_member(handle):
            return False

        parts: list[str] = []
        for operand in self._concat_operands(handle):
            kind = tree.kind(operand)
            text = tree.text(operand)
            if kind is NodeKind.STRING_LITERAL and text[:1] in ("'", '"'):
                parts.append(literal_to_template(text))
            elif kind is NodeKind.STRING_LITERAL and text.startswith("`"):
                parts.append(text[1:-1] if len(text) >= 2 and text.endswith("`") else text[1:])
            else:
                parts.append("${" + text.strip() + "}")
        self._compose(handle, "".join(parts))
        return True

    def _significant_children(self, handle: int) -> list[int]:
        return [c for c in self.tree.children(handle) if self.tree.kind(c) not in _TRIVIA_KINDS]

    def _concat_operands(self, handle: int) -> list[int]:
        """
        从左到右拆分 ``+`` 操作数。

        括号内的子拼接 ``'中' + ('x' + y)`` 以字符串开头时展开；
        否则（如 ``(a + b)`` 可能是数值相加）整体作为一个占位符。
        """
        tree = self.tree
        operands: list[int] = []
        for child in self._significant_children(handle):
            kind = tree.kind(child)
            if kind is NodeKind.TOKEN and tree.text(child) == "+":
                continue
            inner = self._parenthesized_concat(child)
            if kind is NodeKind.BINARY_CONCAT:
                inner = child
            if inner is not None:
                nested = self._concat_operands(inner)
                if any(tree.kind(h) is NodeKind.STRING_LITERAL for h in nested[:2]):
                    operands.extend(nested)
                    continue
            operands.append(child)
        return operands

    def _parenthesized_concat(self, handle: int) -> Optional[int]:
        """``( a + b )`` -> 内部的 BINARY_CONCAT 节点"""
        tree = self.tree
        if tree.kind(handle) is not NodeKind.EXPRESSION:
            return None
        children = self._significant_children(handle)
        if (
            len(children) == 3
            and tree.text(children[0]) == "("
            and tree.text(children[2]) == ")"
            and tree.kind(children[1]) is NodeKind.BINARY_CONCAT
        ):
            return children[1]
        return None

    # ========================================
    # 辅助判断
    # ========================================

    def _compose(self, handle: int, content: str) -> None:
        _, call = self.composer.compose(content)
        self.changes.replace(handle, call)

    def is_translate_argument(self, handle: int) -> bool:
        """
        是否位于翻译函数调用的参数中，如 $t('中文')、this.$t('中文')，
        以及参数对象内的值 $t('{a}', { a: `内${b}` })；遇到语句边界停止
        """
        tree = self.tree
        for ancestor in tree.ancestors(handle):
            kind = tree.kind(ancestor)
            if kind in STATEMENT_BOUNDARY_KINDS:
                return False
            if kind is NodeKind.ARGUMENTS and self._is_translate_call(tree.parent(ancestor)):
                return True
        return False

    def _is_translate_call(self, call: Optional[int]) -> bool:
        tree = self.tree
        if call is None or tree.kind(call) is not NodeKind.CALL:
            return False
        callee = tree.text(tree.children(call)[0]).strip()
        # this.$t(...) / proxy.$t(...)
        return callee == self.translate_fn or callee.endswith("." + self.translate_fn)

    def _skip_enum_member(self, handle: int) -> bool:
        """枚举成员初始化值不能使用运行时调用：每个枚举提示一次后跳过"""
        tree = self.tree
        member = tree.parent(handle)
        if member is None or tree.kind(member) is not NodeKind.ENUM_MEMBER:
            return False
        enum = next(
            (a for a in tree.ancestors(member) if tree.kind(a) is NodeKind.ENUM),
            member,
        )
        if enum not in self._warned_enums:
            self._warned_enums.add(enum)
            label = tree.name(enum) or tree.text(enum).strip().splitlines()[0]
            advisory = (
                f"跳过枚举成员 i18n 提取：枚举 {label} 的成员初始化值不支持运行时 "
                f"{self.translate_fn}()，会报 TS18033 错误，建议改为 const 对象"
            )
            self.advisories.append(advisory)
            logger.warning(advisory)
        return True
