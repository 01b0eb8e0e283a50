"""
文件 I/O 工具函数

提供安全的文件读写功能：
- 多编码回退读取
- 原子写入（防止数据损坏）
- 提取结果 JSON 输出
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping

from .logger import FileOperationError

# 获取模块级 logger
logger = logging.getLogger(__name__)


def ensure_parent_dir(path: str | Path) -> Path:
    """确保父目录存在"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def read_text_file(path: str | Path, encoding: str = 'utf-8') -> str:
    """统一以 UTF-8 优先读取，失败时对常见编码回退。

    尝试顺序：指定编码 -> utf-8-sig -> gbk

    Raises:
        FileOperationError: 文件不存在或无法读取
    """
    p = Path(path)
    if not p.is_file():
        raise FileOperationError("File not found", file_path=p)
    for enc in (encoding, 'utf-8-sig', 'gbk'):
        try:
            # newline='' 保留原始换行符，回写时不改变文件格式
            with open(p, 'r', encoding=enc, newline='') as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            raise FileOperationError(f"Cannot read file: {e}", file_path=p) from e
    # 最后再尝试 utf-8 替换错误字符
    logger.warning(f"Undecodable bytes replaced while reading {p}")
    with open(p, 'r', encoding='utf-8', errors='replace', newline='') as f:
        return f.read()


def write_text_file(
    path: str | Path,
    text: str,
    encoding: str = 'utf-8',
    atomic: bool = True
) -> None:
    """写入文本文件

    Args:
        path: 文件路径
        text: 文件内容
        encoding: 编码
        atomic: 是否使用原子写入（先写临时文件再重命名）
    """
    p = ensure_parent_dir(path)

    if not atomic:
        p.write_text(text, encoding=encoding)
        return

    # 原子写入：先写入临时文件，再重命名
    fd, tmp_path = tempfile.mkstemp(
        dir=p.parent,
        prefix=f".{p.name}.",
        suffix=".tmp"
    )
    try:
        with os.fdopen(fd, 'w', encoding=encoding, newline='') as f:
            f.write(text)
        os.replace(tmp_path, p)
    except OSError as e:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise FileOperationError(f"Cannot write file: {e}", file_path=p) from e


def write_json_file(path: str | Path, data: Mapping[str, str]) -> int:
    """把 key -> 文本 映射写为格式化 JSON

    Returns:
        写入的条目数
    """
    payload = json.dumps(dict(data), ensure_ascii=False, indent=2)
    write_text_file(path, payload + "\n")
    return len(data)


def collect_source_files(
    paths: Iterable[str | Path],
    extensions: Iterable[str],
    exclude_dirs: Iterable[str] = (),
) -> list[Path]:
    """收集待处理源文件（目录递归，按扩展名过滤，跳过排除目录）"""
    exts = {e.lower() for e in extensions}
    excluded = set(exclude_dirs)
    files: list[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_file():
            if p.suffix.lower() in exts:
                files.append(p)
            else:
                logger.debug(f"Skipping unsupported file: {p}")
            continue
        if not p.is_dir():
            logger.warning(f"Path not found: {p}")
            continue
        for child in p.rglob("*"):
            if not child.is_file() or child.suffix.lower() not in exts:
                continue
            if any(part in excluded for part in child.relative_to(p).parts):
                continue
            files.append(child)
    return sorted(set(files))
