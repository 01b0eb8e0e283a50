"""
上下文判断

四个纯函数，只依赖树视图的 parent / kind / name 访问器，
因此可以直接用手工构造的树做单元测试。
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol

from ..tree import NodeKind


class TreeView(Protocol):
    def parent(self, handle: int) -> Optional[int]: ...

    def kind(self, handle: int) -> NodeKind: ...

    def name(self, handle: int) -> Optional[str]: ...


# Vue 核心指令（含缩写）
CORE_DIRECTIVES = frozenset({
    "v-text", "v-html", "v-show", "v-if", "v-else", "v-else-if",
    "v-for", "v-on", "v-bind", "v-model", "v-slot", "v-pre",
    "v-cloak", "v-once", "v-memo",
    "@", ":", "#",
})

DIRECTIVE_PREFIXES = ("v-", ":", "@", "#")

# 值被当作渲染输出消费的位置
RENDER_CONTEXT_KINDS = frozenset({
    NodeKind.RETURN,
    NodeKind.ASSIGNMENT,
    NodeKind.CALL,
    NodeKind.ARGUMENTS,
    NodeKind.VARIABLE,
    NodeKind.CONDITIONAL,
    NodeKind.FUNCTION,
    NodeKind.PROPERTY,
    NodeKind.ARRAY,
    NodeKind.EXPORT_DEFAULT,
})

STATEMENT_BOUNDARY_KINDS = frozenset({
    NodeKind.STATEMENT,
    NodeKind.BLOCK,
    NodeKind.FRAGMENT,
    NodeKind.DOCUMENT,
})


def _ancestors(view: TreeView, handle: int) -> Iterator[int]:
    parent = view.parent(handle)
    while parent is not None:
        yield parent
        parent = view.parent(parent)


def is_excluded_region(view: TreeView, handle: int) -> bool:
    """位于注释或 <style> 元素内"""
    for ancestor in _ancestors(view, handle):
        kind = view.kind(ancestor)
        if kind is NodeKind.COMMENT:
            return True
        if kind is NodeKind.ELEMENT and view.name(ancestor) == "style":
            return True
    return False


def is_in_script_region(view: TreeView, handle: int) -> bool:
    """位于 <script> 元素内，或独立脚本文件的程序根之下"""
    for ancestor in _ancestors(view, handle):
        kind = view.kind(ancestor)
        if kind in (NodeKind.ELEMENT, NodeKind.FRAGMENT) and view.name(ancestor) == "script":
            return True
    return False


def is_render_expression_context(view: TreeView, handle: int) -> bool:
    """
    向上查找最近的有效祖先：return、赋值、调用/参数、变量初始化、三元、
    函数表达式、对象属性值、数组元素或 export default 时为 True；
    先遇到语句边界则为 False。
    """
    for ancestor in _ancestors(view, handle):
        kind = view.kind(ancestor)
        if kind in RENDER_CONTEXT_KINDS:
            return True
        if kind in STATEMENT_BOUNDARY_KINDS:
            return False
    return False


def is_directive_attribute(name: str) -> bool:
    """属性名是否为 Vue 指令（v-xxx、缩写 : @ #，或带参数的核心指令）"""
    if not name:
        return False
    return (
        name.startswith(DIRECTIVE_PREFIXES)
        or name in CORE_DIRECTIVES
        or name.split(":", 1)[0] in CORE_DIRECTIVES
    )
