"""
语法树与延迟改动队列测试
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.core.changes import ChangeOp, ChangeSet
from vue_i18n_tools.tree import NodeKind, SyntaxTree


@pytest.fixture
def tree():
    """const a = '中' + '文'"""
    t = SyntaxTree("demo.ts")
    t.root = t.add(None, NodeKind.FRAGMENT, name="script")
    statement = t.add(t.root, NodeKind.STATEMENT)
    t.add(statement, NodeKind.TOKEN, "const a = ")
    concat = t.add(statement, NodeKind.BINARY_CONCAT)
    t.add(concat, NodeKind.STRING_LITERAL, "'中'")
    t.add(concat, NodeKind.TOKEN, " + ")
    t.add(concat, NodeKind.STRING_LITERAL, "'文'")
    return t


class TestSyntaxTree:
    """测试 SyntaxTree"""

    def test_text_concatenates_leaves(self, tree):
        assert tree.to_source() == "const a = '中' + '文'"

    def test_replace_invalidates_subtree(self, tree):
        concat = tree.find_first(NodeKind.BINARY_CONCAT)
        literals = tree.children(concat)
        new = tree.replace(concat, "$t('中文')")
        assert tree.kind(new) is NodeKind.TOKEN
        assert not tree.is_valid(concat)
        assert all(not tree.is_valid(h) for h in literals)
        assert tree.to_source() == "const a = $t('中文')"

    def test_delete(self, tree):
        concat = tree.find_first(NodeKind.BINARY_CONCAT)
        tree.delete(concat)
        assert tree.to_source() == "const a = "
        assert not tree.is_valid(concat)

    def test_ancestors_and_siblings(self, tree):
        literal = tree.find_first(NodeKind.STRING_LITERAL)
        kinds = [tree.kind(h) for h in tree.ancestors(literal)]
        assert kinds == [NodeKind.BINARY_CONCAT, NodeKind.STATEMENT, NodeKind.FRAGMENT]
        assert tree.text(tree.next_sibling(literal)) == " + "

    def test_replace_parsed_without_reparser(self, tree):
        """没有重新解析器时退化为叶子替换"""
        literal = tree.find_first(NodeKind.STRING_LITERAL)
        new = tree.replace_parsed(literal, "'甲'")
        assert tree.kind(new) is NodeKind.TOKEN
        assert tree.to_source() == "const a = '甲' + '文'"

    def test_dump_outline(self, tree):
        lines = tree.dump().splitlines()
        assert lines[0] == "fragment[script]"
        assert lines[1] == "  statement"
        assert "    binary_concat" in lines
        assert "      string_literal \"'中'\"" in lines

    def test_replace_root(self, tree):
        old_root = tree.root
        new = tree.replace(old_root, "x")
        assert tree.root == new
        assert tree.to_source() == "x"


class TestChangeSet:
    """测试 ChangeSet"""

    def setup_method(self):
        self.changes = ChangeSet()

    def test_nothing_applied_before_apply(self, tree):
        literal = tree.find_first(NodeKind.STRING_LITERAL)
        self.changes.replace(literal, "$t('中')")
        assert tree.to_source() == "const a = '中' + '文'"
        assert [c.op for c in self.changes] == [ChangeOp.REPLACE]

    def test_applied_in_discovery_order(self, tree):
        first, second = [h for h in tree.iter_preorder() if tree.kind(h) is NodeKind.STRING_LITERAL]
        self.changes.replace(second, "B")
        self.changes.replace(first, "A")
        stats = self.changes.apply(tree)
        assert stats.applied == 2
        assert stats.skipped == 0
        assert tree.to_source() == "const a = A + B"

    def test_invalidated_target_skipped(self, tree):
        """目标已被先前改动替换时跳过，其余照常应用"""
        concat = tree.find_first(NodeKind.BINARY_CONCAT)
        literal = tree.children(concat)[0]
        statement = tree.parent(concat)
        self.changes.replace(concat, "$t('中文')")
        self.changes.delete(literal)
        self.changes.replace(tree.children(statement)[0], "let a = ")
        stats = self.changes.apply(tree)
        assert stats.applied == 2
        assert stats.skipped == 1
        assert tree.to_source() == "let a = $t('中文')"

    def test_queue_cleared_after_apply(self, tree):
        literal = tree.find_first(NodeKind.STRING_LITERAL)
        self.changes.delete(literal)
        self.changes.apply(tree)
        assert len(self.changes) == 0
        assert list(self.changes) == []
