"""
配置、文件 I/O 与日志工具测试
"""

import json
import logging
import sys
from pathlib import Path

import pytest

# 添加项目根目录
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.utils.config import ConfigManager, ExtractorConfig
from vue_i18n_tools.utils.io import collect_source_files, read_text_file, write_json_file, write_text_file
from vue_i18n_tools.utils.logger import (
    ExtractorLogger,
    FileOperationError,
    I18nToolsError,
    get_logger,
    log_exceptions,
    setup_logger,
)


class TestExtractorConfig:
    """测试提取配置"""

    def test_default_values(self):
        """测试默认值"""
        config = ExtractorConfig()
        assert config.translate_fn == "$t"
        assert config.import_statement == "import { useI18n } from 'vue-i18n'"
        assert config.initializer_statement == "const { t: $t } = useI18n();"
        assert config.call_marker == "$t("
        assert not config.normalize_interpolation
        assert config.ensure_import

    def test_custom_values(self):
        """测试自定义值"""
        config = ExtractorConfig(hook_module="@/i18n", translate_fn="t")
        assert config.import_statement == "import { useI18n } from '@/i18n'"
        assert config.initializer_statement == "const { t } = useI18n();"

    def test_invalid_identifier_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = ExtractorConfig(translate_fn="not valid")
        assert config.translate_fn == "$t"
        assert "translate_fn" in caplog.text

    def test_extensions_normalized(self):
        config = ExtractorConfig(extensions=["VUE", ".TS", ""])
        assert config.extensions == [".vue", ".ts"]


class TestConfigManager:
    """测试配置文件读写"""

    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(tmp_path / "none.json")
        assert manager.config == ExtractorConfig()

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"translate_fn": "t", "unknown": 1}), encoding="utf-8")
        assert ConfigManager(path).get("translate_fn") == "t"

    def test_invalid_json_gives_defaults(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("{ not json", encoding="utf-8")
        assert ConfigManager(path).config == ExtractorConfig()

    def test_set_and_save(self, tmp_path):
        path = tmp_path / "nested" / "cfg.json"
        manager = ConfigManager(path)
        assert manager.set("hook_module", "@/locales")
        assert not manager.set("no_such_key", 1)
        assert ConfigManager(path).get("hook_module") == "@/locales"
        assert manager.reset_to_defaults()
        assert ConfigManager(path).config == ExtractorConfig()


class TestFileIO:
    """测试文件读写"""

    def test_crlf_preserved(self, tmp_path):
        path = tmp_path / "a.vue"
        write_text_file(path, "a\r\nb\r\n")
        assert read_text_file(path) == "a\r\nb\r\n"

    def test_gbk_fallback(self, tmp_path):
        path = tmp_path / "gbk.js"
        path.write_bytes("const a = '中文'".encode("gbk"))
        assert read_text_file(path) == "const a = '中文'"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileOperationError):
            read_text_file(tmp_path / "missing.vue")

    def test_write_json(self, tmp_path):
        path = tmp_path / "out" / "zh.json"
        assert write_json_file(path, {"你好": "你好"}) == 1
        assert path.read_text(encoding="utf-8") == '{\n  "你好": "你好"\n}\n'

    def test_collect_source_files(self, tmp_path):
        (tmp_path / "src" / "node_modules").mkdir(parents=True)
        (tmp_path / "src" / "a.vue").write_text("", encoding="utf-8")
        (tmp_path / "src" / "b.TS").write_text("", encoding="utf-8")
        (tmp_path / "src" / "c.css").write_text("", encoding="utf-8")
        (tmp_path / "src" / "node_modules" / "d.js").write_text("", encoding="utf-8")
        files = collect_source_files([tmp_path / "src"], [".vue", ".ts", ".js"], ["node_modules"])
        assert sorted(p.name for p in files) == ["a.vue", "b.TS"]


class TestLogger:
    """测试日志工具"""

    def test_setup_replaces_global(self):
        first = setup_logger("vue_i18n_tools.test")
        assert isinstance(first, ExtractorLogger)
        assert get_logger() is first
        second = setup_logger("vue_i18n_tools.test", level=logging.DEBUG)
        assert get_logger() is second
        assert second.logger.level == logging.DEBUG

    def test_timer_logs_start_and_end(self, caplog):
        log = setup_logger("vue_i18n_tools.test")
        with caplog.at_level(logging.INFO, logger="vue_i18n_tools.test"):
            with log.timer("提取"):
                pass
        assert "Starting: 提取" in caplog.text
        assert "Completed: 提取" in caplog.text

    def test_log_exceptions_swallow_returns_default(self):
        log = setup_logger("vue_i18n_tools.test")

        @log_exceptions(log, reraise=False, default_return=-1)
        def broken():
            raise I18nToolsError("坏了", {"file": "a.vue"})

        assert broken() == -1

    def test_log_exceptions_reraises(self):
        @log_exceptions(setup_logger("vue_i18n_tools.test"))
        def broken():
            raise FileOperationError("missing", file_path=Path("a.vue"))

        with pytest.raises(FileOperationError) as exc_info:
            broken()
        assert "a.vue" in str(exc_info.value)
