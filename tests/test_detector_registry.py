"""
中文检测与 key 登记表测试
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.core.detector import has_chinese
from vue_i18n_tools.core.registry import ExtractedEntry, KeyRegistry


class TestHasChinese:
    """测试 has_chinese"""

    @pytest.mark.parametrize("text", ["中", "你好", "Save 保存", "'确定'", "a\n文"])
    def test_detects_cjk(self, text):
        """包含 U+4E00-U+9FFF 字符"""
        assert has_chinese(text)

    @pytest.mark.parametrize("text", ["", "Save", "！，。", "こんにちは", "한국어", "123"])
    def test_rejects_non_cjk(self, text):
        """全角标点、日文假名、韩文不算"""
        assert not has_chinese(text)

    def test_range_boundaries(self):
        """范围两端"""
        assert has_chinese("\u4e00")
        assert has_chinese("\u9fff")
        assert not has_chinese("\u4dff")
        assert not has_chinese("\ua000")


class TestKeyRegistry:
    """测试 KeyRegistry"""

    def setup_method(self):
        self.registry = KeyRegistry()

    def test_register_returns_key(self):
        assert self.registry.register("保存", "保存") == "保存"

    def test_identical_keys_collapse(self):
        """相同字符串只登记一次"""
        self.registry.register("保存", "保存")
        self.registry.register("保存", "保存")
        assert len(self.registry) == 1

    def test_first_write_wins(self):
        """先写入者胜出"""
        self.registry.register("k", "第一次")
        self.registry.register("k", "第二次")
        assert self.registry.get("k") == "第一次"

    def test_whitespace_variants_are_distinct(self):
        """空白或标点不同视为不同 key"""
        self.registry.register("你好", "你好")
        self.registry.register("你好 ", "你好 ")
        self.registry.register("你好！", "你好！")
        assert len(self.registry) == 3

    def test_insertion_order(self):
        for key in ("乙", "甲", "丙"):
            self.registry.register(key)
        assert list(self.registry.as_dict()) == ["乙", "甲", "丙"]
        assert [e.key for e in self.registry] == ["乙", "甲", "丙"]

    def test_text_defaults_to_key(self):
        self.registry.register("取消")
        assert self.registry.entries() == [ExtractedEntry("取消", "取消")]
        assert "取消" in self.registry
        assert "确定" not in self.registry
