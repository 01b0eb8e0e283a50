# -*- coding: utf-8 -*-
r"""
Extract — 提取 Vue 组件与脚本中的中文文本

- 模板文本、属性值 -> {{ $t(`...`) }} / :title="$t('...')"
- 字符串字面量、模板字符串、+ 拼接 -> $t('...') / $t(`...{name}`, { name })
- 组件缺少 useI18n 引入时自动补充
- 输出：改写后的源文件（原地）、合并后的 key -> 原文 JSON

用法示例：
    vue-i18n-tools extract src -o locales/zh-CN.json
    vue-i18n-tools extract src/views/Home.vue --dry-run
    vue-i18n-tools extract src --normalize-interpolation --translate-fn t --no-import
"""

from __future__ import annotations

import argparse
import difflib
import logging
import sys
from pathlib import Path
from typing import Optional

from ..api import process_file
from ..utils.config import ConfigManager, ExtractorConfig
from ..utils.io import collect_source_files, write_json_file
from ..utils.logger import I18nToolsError, log_exceptions, setup_logger
from ..utils.ui import (
    BilingualMessage,
    confirm_operation,
    console,
    show_extracted_strings,
    show_file_summary,
)


def build_config(args: argparse.Namespace) -> ExtractorConfig:
    """配置文件 + 命令行参数（命令行优先）"""
    config = ConfigManager(Path(args.config) if args.config else None).config
    if args.translate_fn:
        config.translate_fn = args.translate_fn
    if args.normalize_interpolation:
        config.normalize_interpolation = True
    if args.no_import:
        config.ensure_import = False
    if args.output:
        config.output_file = args.output
    if args.verbose:
        config.log_level = "DEBUG"
    # 重新校验
    config.__post_init__()
    return config


def show_diff(path: Path, original: str, new_text: str) -> None:
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        new_text.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
    )
    console.print("".join(diff), markup=False, highlight=False, end="")


def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    log = setup_logger("vue_i18n_tools", level=getattr(logging, config.log_level))

    files = collect_source_files(args.paths, config.extensions, config.exclude_dirs)
    if not files:
        BilingualMessage.warning("没有找到需要处理的文件", "No source files found")
        return 1

    write = not args.dry_run
    if write and not args.yes and len(files) > 1:
        if not confirm_operation(
            f"将原地改写 {len(files)} 个文件，是否继续？",
            f"{len(files)} files will be rewritten in place. Continue?",
        ):
            return 1

    merged: dict[str, str] = {}
    rows: list[tuple[str, int, int, str]] = []
    failed = 0
    # 单个文件出错只记录并跳过，批处理继续
    process_one = log_exceptions(log, reraise=False)(process_file)

    with log.timer(f"Extracting from {len(files)} file(s)"):
        with log.progress(len(files), "Extracting", disable=args.dry_run) as update:
            for path in files:
                outcome = process_one(path, config, write=write)
                if outcome is None:
                    rows.append((str(path), 0, 0, "failed"))
                    failed += 1
                    update(1)
                    continue
                original, new_text, result = outcome
                for key, text in result.entries.items():
                    merged.setdefault(key, text)
                if args.dry_run and new_text != original:
                    show_diff(path, original, new_text)
                status = "updated" if new_text != original else "unchanged"
                if args.dry_run and status == "updated":
                    status = "would update"
                rows.append((str(path), len(result), result.applied, status))
                update(1)

    show_file_summary(rows)
    show_extracted_strings(merged)

    if config.output_file and merged:
        if args.dry_run:
            log.info(f"Dry run: {config.output_file} not written")
        else:
            try:
                count = write_json_file(config.output_file, merged)
            except I18nToolsError as e:
                log.error(f"{config.output_file}: {e}")
                return 1
            BilingualMessage.success(
                f"已写入 {count} 条到 {config.output_file}",
                f"Wrote {count} entries to {config.output_file}",
            )

    if failed:
        BilingualMessage.warning(f"{failed} 个文件处理失败", f"{failed} file(s) failed")
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="vue-i18n-tools extract",
        description="Extract Chinese text from Vue components and scripts into $t() calls.",
    )
    ap.add_argument("paths", nargs="+", help="文件或目录（目录递归处理）")
    ap.add_argument("-o", "--output", help="合并后的 key -> 原文 JSON 输出路径")
    ap.add_argument("--config", help="配置文件路径，默认 ./vue-i18n-tools.json")
    ap.add_argument("--dry-run", action="store_true", help="只显示差异，不写入任何文件")
    ap.add_argument("--normalize-interpolation", action="store_true", help="先把 文本{{ x }}文本 统一为模板字符串插值")
    ap.add_argument("--no-import", action="store_true", help="不自动补充 useI18n 引入")
    ap.add_argument("--translate-fn", help="翻译函数名，默认 $t")
    ap.add_argument("-y", "--yes", action="store_true", help="不询问，直接改写多个文件")
    ap.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    args = ap.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
