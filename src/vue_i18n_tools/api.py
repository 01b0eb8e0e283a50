"""
对外接口：处理一段源码或一个文件

Usage:
    new_text, result = process_source(text, "App.vue")
    result = process_file(Path("src/App.vue"), write=True)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .core import ProcessingResult, process_tree
from .sfc import parse_source
from .utils.config import ExtractorConfig
from .utils.io import read_text_file, write_text_file

logger = logging.getLogger(__name__)


def process_source(
    text: str,
    source_name: str = "component.vue",
    config: Optional[ExtractorConfig] = None,
) -> tuple[str, ProcessingResult]:
    """
    解析、改写并重新序列化一段源码

    Args:
        text: 源码
        source_name: 文件名（决定解析方式：.vue 为组件，其余为脚本）
        config: 提取配置

    Returns:
        (改写后的源码, 处理结果)
    """
    tree = parse_source(text, source_name)
    result = process_tree(tree, config)
    return tree.to_source(), result


def process_file(
    path: Path,
    config: Optional[ExtractorConfig] = None,
    write: bool = True,
) -> tuple[str, str, ProcessingResult]:
    """
    处理单个文件

    Returns:
        (原文, 改写后文本, 处理结果)；write 为 True 且有改动时写回文件

    Raises:
        FileOperationError: 读写失败
        ParseError: 嵌套过深无法解析
    """
    path = Path(path)
    original = read_text_file(path)
    new_text, result = process_source(original, str(path), config)
    if write and new_text != original:
        write_text_file(path, new_text)
        logger.debug(f"Wrote {path}")
    return original, new_text, result
