"""
模板消息组装测试
"""

import sys
from pathlib import Path

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.core.composer import (
    TemplateComposer,
    TemplateMessage,
    build_call,
    compose_message,
    convert_mustache_to_template,
    format_params,
    placeholder_name,
    quote_message,
)
from vue_i18n_tools.core.registry import KeyRegistry


class TestComposeMessage:
    """测试 compose_message"""

    def test_member_expression(self):
        """user.name -> user_name"""
        message = compose_message("你好 ${user.name}")
        assert message.pattern == "你好 {user_name}"
        assert message.params == {"user_name": "user.name"}

    def test_params_keep_first_occurrence_order(self):
        message = compose_message("${b}和${a}和${b}")
        assert message.pattern == "{b}和{a}和{b}"
        assert list(message.params) == ["b", "a"]

    def test_name_collision_first_wins(self):
        """a.b 与 a_b 都映射为 a_b，保留第一个表达式"""
        message = compose_message("${a.b}，${a_b}")
        assert message.pattern == "{a_b}，{a_b}"
        assert message.params == {"a_b": "a.b"}

    def test_whitespace_inside_placeholder(self):
        message = compose_message("共 ${ count } 条")
        assert message.pattern == "共 {count} 条"
        assert message.params == {"count": "count"}

    def test_key_is_trimmed_pattern(self):
        message = compose_message("  你好 ${name}  ")
        assert message.key == "你好 {name}"

    def test_nested_template_literal_kept_whole(self):
        """占位符按花括号配对截取，嵌套模板字符串不会被截断"""
        message = compose_message("外${`内${y}中`}")
        assert message.pattern == "外{内_y_中}"
        assert message.params == {"内_y_中": "`内${y}中`"}

    def test_object_literal_in_placeholder(self):
        message = compose_message("结果 ${fmt({ a: 1 })}")
        assert message.params == {"fmt_a_1": "fmt({ a: 1 })"}

    def test_non_identifier_expression_named_safely(self):
        message = compose_message("共${(a + b)}项${list[0]}")
        assert message.pattern == "共{a_b}项{list_0}"
        assert message.params == {"a_b": "(a + b)", "list_0": "list[0]"}

    def test_placeholder_name(self):
        assert placeholder_name("user.name") == "user_name"
        assert placeholder_name("user?.name") == "user_name"
        assert placeholder_name("''") == "value"

    def test_dollar_identifier_kept(self):
        assert compose_message("第${$index}行").params == {"$index": "$index"}

    def test_escaped_and_unclosed_placeholders_literal(self):
        assert compose_message("价格 \\${x}").params == {}
        assert compose_message("价格 \\${x}").pattern == "价格 \\${x}"
        assert compose_message("未闭合 ${x").pattern == "未闭合 ${x"


class TestBuildCall:
    """测试翻译调用生成"""

    def test_round_trip_example(self):
        message = compose_message("你好 ${user.name}")
        assert build_call(message) == "$t('你好 {user_name}', { user_name: user.name })"

    def test_numeric_param_quoted(self):
        assert format_params({"0": "list[0]", "n": "n"}) == '{ "0": list[0], n: n }'

    def test_single_quote_escaped(self):
        assert quote_message("它's 好") == "'它\\'s 好'"

    def test_multiline_uses_backticks(self):
        assert quote_message("第一行\n第`二`行") == "`第一行\n第\\`二\\`行`"

    def test_no_params(self):
        assert build_call(TemplateMessage("你好")) == "$t('你好')"

    def test_custom_translate_fn(self):
        assert build_call(compose_message("${n} 项"), "t") == "t('{n} 项', { n: n })"


class TestTemplateComposer:
    """测试 TemplateComposer"""

    def setup_method(self):
        self.registry = KeyRegistry()
        self.composer = TemplateComposer(self.registry)

    def test_registers_pattern(self):
        message, call = self.composer.compose("欢迎，${user.name}！")
        assert "欢迎，{user_name}！" in self.registry
        assert call == "$t('欢迎，{user_name}！', { user_name: user.name })"
        assert message.params == {"user_name": "user.name"}


class TestConvertMustache:
    """测试插值写法转换"""

    def test_convert(self):
        assert convert_mustache_to_template("你好 {{ name }}，欢迎") == "你好 ${name}，欢迎"

    def test_escapes_backtick_in_text(self):
        assert convert_mustache_to_template("按`键`{{ k }}") == "按\\`键\\`${k}"

    def test_multiple(self):
        assert convert_mustache_to_template("{{a}}和{{ b.c }}") == "${a}和${b.c}"
