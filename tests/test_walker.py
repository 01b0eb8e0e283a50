"""
遍历器测试：插值节点、插值预处理、跳过区域
"""

import sys
from pathlib import Path

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.core.changes import ChangeSet
from vue_i18n_tools.core.registry import KeyRegistry
from vue_i18n_tools.core.rules import RewriteRules
from vue_i18n_tools.core.walker import TreeWalker
from vue_i18n_tools.sfc import parse_component
from vue_i18n_tools.tree import NodeKind


def run_walker(text, normalize=False):
    tree = parse_component(text)
    registry = KeyRegistry()
    changes = ChangeSet()
    walker = TreeWalker(tree, RewriteRules(tree, registry, changes))
    normalized = walker.normalize_interpolations() if normalize else 0
    walker.walk()
    changes.apply(tree)
    return tree.to_source(), registry, normalized


class TestInterpolation:
    """测试插值节点"""

    def test_text_outside_mustache(self):
        source, registry, _ = run_walker("<template><p>你好，{{ name }}！</p></template>")
        assert source == "<template><p>{{ $t(`你好，`) }}{{ name }}！</p></template>"
        assert list(registry.as_dict()) == ["你好，"]

    def test_literal_inside_mustache(self):
        source, registry, _ = run_walker("<template><p>{{ ok ? '是' : '否' }}</p></template>")
        assert source == "<template><p>{{ ok ? $t('是') : $t('否') }}</p></template>"
        assert list(registry.as_dict()) == ["是", "否"]

    def test_concat_inside_mustache_not_folded(self):
        """插值表达式内只改写字符串字面量"""
        source, _, _ = run_walker("<template><p>{{ '共' + n + '项' }}</p></template>")
        assert source == "<template><p>{{ $t('共') + n + $t('项') }}</p></template>"

    def test_translated_interpolation_untouched(self):
        text = "<template><p>{{ $t('你好') }}</p></template>"
        source, registry, _ = run_walker(text)
        assert source == text
        assert len(registry) == 0


class TestNormalizeInterpolations:
    """测试插值预处理"""

    def test_normalize(self):
        source, registry, normalized = run_walker(
            "<template><p>你好，{{ name }}！</p></template>", normalize=True
        )
        assert normalized == 1
        assert source == "<template><p>{{ $t('你好，{name}！', { name: name }) }}</p></template>"
        assert list(registry.as_dict()) == ["你好，{name}！"]

    def test_surrounding_whitespace_kept(self):
        source, _, _ = run_walker(
            "<template><p>\n  共 {{ n }} 项\n</p></template>", normalize=True
        )
        assert source == "<template><p>\n  {{ $t('共 {n} 项', { n: n }) }}\n</p></template>"

    def test_mustache_only_not_normalized(self):
        _, _, normalized = run_walker("<template><p>{{ '中文' }}</p></template>", normalize=True)
        assert normalized == 0

    def test_no_chinese_outside_not_normalized(self):
        _, _, normalized = run_walker("<template><p>Hi {{ name }}</p></template>", normalize=True)
        assert normalized == 0

    def test_reparsed_node_grafted(self):
        tree = parse_component("<template><p>你好 {{ a }}</p></template>")
        walker = TreeWalker(tree, RewriteRules(tree, KeyRegistry(), ChangeSet()))
        walker.normalize_interpolations()
        interpolation = tree.find_first(NodeKind.INTERPOLATION)
        assert interpolation is not None
        assert tree.text(interpolation) == "{{ `你好 ${a}` }}"
        assert tree.find_first(NodeKind.STRING_LITERAL) is not None


class TestSkippedRegions:
    """测试跳过区域"""

    def test_style_and_comment_untouched(self):
        text = (
            "<template><!-- 中文注释 --><p>Hi</p></template>\n"
            "<style>.a::after { content: '样式'; }</style>\n"
        )
        source, registry, _ = run_walker(text)
        assert source == text
        assert len(registry) == 0

    def test_custom_block_untouched(self):
        text = '<i18n lang="json">{ "zh": { "a": "中文" } }</i18n>\n'
        source, registry, _ = run_walker(text)
        assert source == text
        assert len(registry) == 0

    def test_script_comment_untouched(self):
        text = "<script>\n// 中文注释\n/* 块注释 */\nconst a = 1\n</script>\n"
        source, registry, _ = run_walker(text)
        assert source == text
        assert len(registry) == 0
