"""
语法树遍历

一次深度优先先序遍历，按节点类型分派到改写规则。
插值节点（含 ``{{ }}`` 的模板文本）单独处理：表达式片段只找字符串字面量，
``{{ }}`` 之外的文本片段走模板文本规则。
"""

from __future__ import annotations

import logging

from ..tree import NodeKind, SyntaxTree
from ..utils.logger import MalformedStructureError
from .composer import convert_mustache_to_template
from .context import is_excluded_region
from .detector import has_chinese
from .rules import RewriteRules

logger = logging.getLogger(__name__)

_DELIMITER_KINDS = (
    NodeKind.INTERPOLATION_OPEN,
    NodeKind.INTERPOLATION_CLOSE,
    NodeKind.FRAGMENT,
)


class TreeWalker:
    """Single depth-first pass dispatching nodes to the rewrite rules."""

    def __init__(self, tree: SyntaxTree, rules: RewriteRules):
        self.tree = tree
        self.rules = rules
        self._table = rules.table()

    # ========================================
    # 预处理：统一插值写法
    # ========================================

    def normalize_interpolations(self) -> int:
        """
        把 ``你好 {{ name }}，欢迎`` 改写为 ``{{ `你好 ${name}，欢迎` }}``

        只处理 {{ }} 之外含中文的插值节点；改写立即生效（重新解析后嫁接回树）。

        Returns:
            改写的节点数
        """
        tree = self.tree
        targets = [
            handle for handle in tree.iter_preorder()
            if tree.kind(handle) is NodeKind.INTERPOLATION
            and not is_excluded_region(tree, handle)
            and has_chinese(self._outside_text(handle))
        ]
        count = 0
        for handle in targets:
            if not tree.is_valid(handle):
                continue
            original = tree.text(handle)
            stripped = original.strip()
            normalized = "{{ `" + convert_mustache_to_template(stripped) + "` }}"
            if normalized == stripped:
                continue
            leading = original[:len(original) - len(original.lstrip())]
            trailing = original[len(original.rstrip()):]
            tree.replace_parsed(handle, leading + normalized + trailing)
            count += 1
        if count:
            logger.debug(f"Normalized {count} interpolation node(s) in {tree.source_name}")
        return count

    def _outside_text(self, handle: int) -> str:
        tree = self.tree
        return "".join(
            tree.text(child) for child in tree.children(handle)
            if tree.kind(child) not in _DELIMITER_KINDS
            and tree.kind(child) is not NodeKind.COMMENT
        )

    # ========================================
    # 主遍历
    # ========================================

    def walk(self) -> None:
        tree = self.tree
        if tree.root is None:
            return
        stack = [tree.root]
        while stack:
            handle = stack.pop()
            if not tree.is_valid(handle):
                continue
            kind = tree.kind(handle)
            if kind is NodeKind.COMMENT:
                continue
            if kind is NodeKind.ELEMENT and tree.name(handle) == "style":
                continue
            if kind is NodeKind.INTERPOLATION:
                self._visit_interpolation(handle)
                continue
            if self._dispatch(handle, kind):
                continue
            stack.extend(reversed(tree.children(handle)))

    def _dispatch(self, handle: int, kind: NodeKind) -> bool:
        rule = self._table.get(kind)
        if rule is None:
            return False
        try:
            return rule(handle)
        except MalformedStructureError as e:
            logger.debug(f"Rewrite abandoned in {self.tree.source_name}: {e}")
            return False

    def _visit_interpolation(self, handle: int) -> None:
        tree = self.tree
        if is_excluded_region(tree, handle):
            return
        in_mustache = False
        for child in tree.children(handle):
            kind = tree.kind(child)
            if kind is NodeKind.INTERPOLATION_OPEN:
                in_mustache = True
            elif kind is NodeKind.INTERPOLATION_CLOSE:
                in_mustache = False
            elif kind is NodeKind.FRAGMENT:
                self._walk_fragment(child)
            elif kind is NodeKind.TEXT_CHARS and not in_mustache:
                self.rules.text_token(child)

    def _walk_fragment(self, fragment: int) -> None:
        """插值表达式内只处理字符串字面量"""
        for handle in self.tree.iter_preorder(fragment):
            if self.tree.kind(handle) is NodeKind.STRING_LITERAL:
                self._dispatch(handle, NodeKind.STRING_LITERAL)
