"""
改写规则测试

直接在解析出的语法树上调用单条规则，检查登记的 key 与排队的改动。
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.core.changes import ChangeSet
from vue_i18n_tools.core.registry import KeyRegistry
from vue_i18n_tools.core.rules import RewriteRules, is_pure_comment, literal_to_template
from vue_i18n_tools.sfc import parse_component, parse_script
from vue_i18n_tools.tree import NodeKind, SyntaxTree
from vue_i18n_tools.utils.config import ExtractorConfig
from vue_i18n_tools.utils.logger import MalformedStructureError


def make_rules(tree, config=None):
    registry = KeyRegistry()
    changes = ChangeSet()
    return RewriteRules(tree, registry, changes, config), registry, changes


def first(tree, kind):
    handle = tree.find_first(kind)
    assert handle is not None, f"no {kind} in tree"
    return handle


def payloads(changes):
    return [c.payload for c in changes]


class TestHelpers:
    """测试辅助函数"""

    def test_pure_comment(self):
        assert is_pure_comment("<!-- 注释 -->")
        assert not is_pure_comment("<!-- a --> 文本 <!-- b -->")
        assert not is_pure_comment("文本")

    def test_literal_to_template_keeps_escapes(self):
        assert literal_to_template(r"'它\'s'") == r"它\'s"
        assert literal_to_template("'a`b'") == "a\\`b"
        assert literal_to_template("'${x}'") == "\\${x}"


class TestMarkupTextRule:
    """测试模板文本规则"""

    def test_template_text(self):
        tree = parse_component("<template><p>  你好 世界  </p></template>")
        rules, registry, changes = make_rules(tree)
        assert rules.markup_text(first(tree, NodeKind.MARKUP_TEXT))
        assert registry.as_dict() == {"你好 世界": "你好 世界"}
        assert payloads(changes) == ["{{ $t(`你好 世界`) }}"]

    def test_comment_removed_from_key(self):
        tree = parse_component("<template><p>你好<!-- 注释 -->世界</p></template>")
        rules, registry, changes = make_rules(tree)
        assert rules.markup_text(first(tree, NodeKind.MARKUP_TEXT))
        assert list(registry.as_dict()) == ["你好世界"]
        # 第一个文本片段替换，其余删除
        assert payloads(changes) == ["{{ $t(`你好世界`) }}", None]

    def test_no_chinese_skipped(self):
        tree = parse_component("<template><p>Hello</p></template>")
        rules, registry, changes = make_rules(tree)
        assert not rules.markup_text(first(tree, NodeKind.MARKUP_TEXT))
        assert len(registry) == 0
        assert len(changes) == 0

    def test_already_translated_skipped(self):
        tree = parse_component("<template><p>$t('你好')</p></template>")
        rules, registry, _ = make_rules(tree)
        assert not rules.markup_text(first(tree, NodeKind.MARKUP_TEXT))
        assert len(registry) == 0

    def test_jsx_render_context_uses_single_braces(self):
        tree = parse_script("const el = <p>你好</p>", jsx=True)
        rules, _, changes = make_rules(tree)
        assert rules.markup_text(first(tree, NodeKind.MARKUP_TEXT))
        assert payloads(changes) == ["{ $t(`你好`) }"]


class TestAttributeValueRule:
    """测试属性值规则"""

    def test_plain_attribute_gains_binding_prefix(self):
        tree = parse_component('<template><img title="中文"></template>')
        rules, registry, changes = make_rules(tree)
        assert rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert payloads(changes) == [":title=\"$t('中文')\""]
        assert "中文" in registry

    def test_directive_without_quotes_keeps_name(self):
        tree = parse_component('<template><img v-bind:title="中文"></template>')
        rules, _, changes = make_rules(tree)
        assert rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert payloads(changes) == ["v-bind:title=\"$t('中文')\""]

    def test_directive_with_literal_left_to_string_rule(self):
        tree = parse_component("<template><img :title=\"'中文'\"></template>")
        rules, registry, changes = make_rules(tree)
        assert not rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert len(registry) == 0
        assert len(changes) == 0

    def test_single_quoted_attribute_flips_inner_quote(self):
        tree = parse_component("<template><img alt='图片'></template>")
        rules, _, changes = make_rules(tree)
        assert rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert payloads(changes) == [":alt='$t(\"图片\")'"]

    def test_script_region_uses_braces(self):
        tree = parse_script('const el = <img alt="图片" />', jsx=True)
        rules, _, changes = make_rules(tree)
        assert rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert payloads(changes) == ["alt={$t('图片')}"]

    def test_braced_value_in_script_skipped(self):
        tree = parse_script("const el = <img alt={'图片'} />", jsx=True)
        rules, _, changes = make_rules(tree)
        assert not rules.attribute_value(first(tree, NodeKind.ATTRIBUTE_VALUE))
        assert len(changes) == 0

    @pytest.mark.parametrize("markup", [
        '<template><img title=""></template>',
        '<template><img title="Hello"></template>',
        "<template><img title=\"$t('中文')\"></template>",
        '<template><img title="`你好${name}`"></template>',
    ])
    def test_skips(self, markup):
        tree = parse_component(markup)
        rules, registry, _ = make_rules(tree)
        value = tree.find_first(NodeKind.ATTRIBUTE_VALUE)
        assert not rules.attribute_value(value)
        assert len(registry) == 0

    def test_value_without_attribute_is_malformed(self):
        tree = SyntaxTree()
        tree.root = tree.add(None, NodeKind.DOCUMENT)
        value = tree.add(tree.root, NodeKind.ATTRIBUTE_VALUE)
        tree.add(value, NodeKind.TEXT_CHARS, '"中文"')
        rules, _, _ = make_rules(tree)
        with pytest.raises(MalformedStructureError):
            rules.attribute_value(value)


class TestStringLiteralRule:
    """测试字符串字面量规则"""

    def test_single_quoted(self):
        tree = parse_script("const a = '保存'")
        rules, registry, changes = make_rules(tree)
        assert rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert payloads(changes) == ["$t('保存')"]
        assert registry.as_dict() == {"保存": "保存"}

    def test_double_quote_style_kept(self):
        tree = parse_script('const a = "保存"')
        rules, _, changes = make_rules(tree)
        rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert payloads(changes) == ['$t("保存")']

    def test_decoded_and_trimmed(self):
        tree = parse_script(r"const a = ' 它\'s 好 '")
        rules, registry, changes = make_rules(tree)
        rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert list(registry.as_dict()) == ["它's 好"]
        assert payloads(changes) == [r"$t('它\'s 好')"]

    def test_template_literal_composed(self):
        tree = parse_script("const a = `你好 ${user.name}`")
        rules, registry, changes = make_rules(tree)
        assert rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert payloads(changes) == ["$t('你好 {user_name}', { user_name: user.name })"]
        assert "你好 {user_name}" in registry

    def test_plain_template_literal(self):
        tree = parse_script("const a = `你好`")
        rules, _, changes = make_rules(tree)
        rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert payloads(changes) == ["$t('你好')"]

    @pytest.mark.parametrize("source", [
        "$t('保存')",
        "this.$t('保存')",
        "const a = 'Save'",
        "const a = ''",
    ])
    def test_skips(self, source):
        tree = parse_script(source)
        rules, registry, _ = make_rules(tree)
        assert not rules.string_literal(first(tree, NodeKind.STRING_LITERAL))
        assert len(registry) == 0

    def test_nested_in_translate_params_skipped(self):
        """翻译调用参数对象内的值（如二次运行时的嵌套模板）不再改写"""
        tree = parse_script("$t('外{内_y_中}', { 内_y_中: `内${y}中` })")
        rules, registry, _ = make_rules(tree)
        literals = [h for h in tree.iter_preorder() if tree.kind(h) is NodeKind.STRING_LITERAL]
        assert [rules.string_literal(h) for h in literals] == [False, False]
        assert len(registry) == 0

    def test_statement_boundary_ends_translate_argument(self):
        tree = parse_script("$t('a', { f: () => { return '中' } })")
        rules, _, changes = make_rules(tree)
        literals = [h for h in tree.iter_preorder() if tree.kind(h) is NodeKind.STRING_LITERAL]
        assert rules.string_literal(literals[-1])
        assert payloads(changes) == ["$t('中')"]

    def test_enum_member_advisory_once_per_enum(self, caplog):
        tree = parse_script("enum Status { On = '开启', Off = '关闭' }", jsx=False)
        rules, registry, changes = make_rules(tree)
        literals = [h for h in tree.iter_preorder() if tree.kind(h) is NodeKind.STRING_LITERAL]
        assert len(literals) == 2
        with caplog.at_level("WARNING"):
            assert not any(rules.string_literal(h) for h in literals)
        assert len(rules.advisories) == 1
        assert "Status" in rules.advisories[0]
        assert "TS18033" in rules.advisories[0]
        assert len(registry) == 0
        assert len(changes) == 0

    def test_custom_translate_fn(self):
        tree = parse_script("t('保存'); const a = '取消'")
        rules, registry, changes = make_rules(tree, ExtractorConfig(translate_fn="t"))
        literals = [h for h in tree.iter_preorder() if tree.kind(h) is NodeKind.STRING_LITERAL]
        assert [rules.string_literal(h) for h in literals] == [False, True]
        assert payloads(changes) == ["t('取消')"]


class TestBinaryConcatRule:
    """测试 + 拼接规则"""

    def test_folds_into_template(self):
        tree = parse_script("const s = '你好' + name + '！'")
        rules, registry, changes = make_rules(tree)
        assert rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert payloads(changes) == ["$t('你好{name}！', { name: name })"]
        assert "你好{name}！" in registry

    def test_parenthesized_string_chain_flattened(self):
        """括号内以字符串开头的子拼接展开为同一条消息"""
        tree = parse_script('const a = "中" + ("x" + "文");')
        rules, registry, changes = make_rules(tree)
        assert rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert payloads(changes) == ["$t('中x文')"]
        assert registry.as_dict() == {"中x文": "中x文"}

    def test_parenthesized_chain_with_variable_flattened(self):
        tree = parse_script("const a = '共' + (n + '个') + '文件'")
        rules, _, changes = make_rules(tree)
        rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert payloads(changes) == ["$t('共{n}个文件', { n: n })"]

    def test_parenthesized_numeric_chain_kept_as_placeholder(self):
        """(a + b) 可能是数值相加，整体作为一个参数，参数名为合法标识符"""
        tree = parse_script("const s = '共' + (a + b) + '项'")
        rules, _, changes = make_rules(tree)
        rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert payloads(changes) == ["$t('共{a_b}项', { a_b: (a + b) })"]

    def test_equivalent_to_template_literal(self):
        concat = parse_script("const s = '你好' + name + '！'")
        template = parse_script("const s = `你好${name}！`")
        rules_a, registry_a, changes_a = make_rules(concat)
        rules_b, registry_b, changes_b = make_rules(template)
        rules_a.binary_concat(first(concat, NodeKind.BINARY_CONCAT))
        rules_b.string_literal(first(template, NodeKind.STRING_LITERAL))
        assert payloads(changes_a) == payloads(changes_b)
        assert registry_a.as_dict() == registry_b.as_dict()

    def test_member_operand(self):
        tree = parse_script("const s = '共' + list.length + '项'")
        rules, _, changes = make_rules(tree)
        rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert payloads(changes) == ["$t('共{list_length}项', { list_length: list.length })"]

    def test_no_chinese_skipped(self):
        tree = parse_script("const s = 'a' + b")
        rules, _, changes = make_rules(tree)
        assert not rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert len(changes) == 0

    def test_translate_argument_skipped(self):
        tree = parse_script("$t('你好' + name)")
        rules, _, changes = make_rules(tree)
        assert not rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert len(changes) == 0

    def test_enum_member_skipped(self):
        tree = parse_script("enum E { A = '甲' + '乙' }", jsx=False)
        rules, _, changes = make_rules(tree)
        assert not rules.binary_concat(first(tree, NodeKind.BINARY_CONCAT))
        assert len(rules.advisories) == 1
        assert len(changes) == 0
