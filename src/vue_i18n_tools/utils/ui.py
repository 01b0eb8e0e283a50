"""Bilingual console output for the extraction tools."""

from __future__ import annotations

import json
from typing import Iterable, Mapping

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()


class BilingualMessage:
    """Display messages in both Chinese and English."""

    @staticmethod
    def info(zh: str, en: str, title_zh: str = "信息", title_en: str = "Info") -> None:
        text = Text()
        text.append(f"{zh}\n", style="cyan")
        text.append(en, style="dim cyan")
        console.print(Panel(text, title=f"{title_zh} / {title_en}", border_style="cyan"))

    @staticmethod
    def success(zh: str, en: str, title_zh: str = "成功", title_en: str = "Success") -> None:
        text = Text()
        text.append(f"✅ {zh}\n", style="green")
        text.append(f"✅ {en}", style="dim green")
        console.print(Panel(text, title=f"{title_zh} / {title_en}", border_style="green"))

    @staticmethod
    def warning(zh: str, en: str, title_zh: str = "警告", title_en: str = "Warning") -> None:
        text = Text()
        text.append(f"⚠️  {zh}\n", style="yellow")
        text.append(f"⚠️  {en}", style="dim yellow")
        console.print(Panel(text, title=f"{title_zh} / {title_en}", border_style="yellow"))

    @staticmethod
    def error(zh: str, en: str, title_zh: str = "错误", title_en: str = "Error") -> None:
        text = Text()
        text.append(f"❌ {zh}\n", style="red")
        text.append(f"❌ {en}", style="dim red")
        console.print(Panel(text, title=f"{title_zh} / {title_en}", border_style="red"))


def show_extracted_strings(entries: Mapping[str, str]) -> None:
    """以格式化 JSON 展示提取的 key -> 原文"""
    if not entries:
        BilingualMessage.info("未发现需要提取的中文文本", "No Chinese text was extracted")
        return
    payload = json.dumps(dict(entries), ensure_ascii=False, indent=2)
    console.print(Panel(JSON(payload), title="提取的中文字符串 / Extracted strings", border_style="cyan"))


def show_file_summary(rows: Iterable[tuple[str, int, int, str]]) -> None:
    """
    Show per-file results.

    Args:
        rows: (file, extracted keys, applied changes, status) tuples
    """
    table = Table(title="提取结果 / Extraction summary")
    table.add_column("File / 文件", style="cyan")
    table.add_column("Keys / 条目", justify="right")
    table.add_column("Changes / 改动", justify="right")
    table.add_column("Status / 状态")
    for file, keys, changes, status in rows:
        style = "green" if status == "updated" else "red" if status == "failed" else "dim"
        table.add_row(file, str(keys), str(changes), Text(status, style=style))
    console.print(table)


def confirm_operation(
    question_zh: str,
    question_en: str,
    default: bool = False
) -> bool:
    """
    Ask user for confirmation with bilingual prompt.

    Returns:
        True if user confirms, False otherwise
    """
    default_hint = "Y/n" if default else "y/N"

    console.print()
    console.print(f"[yellow]{question_zh}[/yellow]")
    console.print(f"[dim yellow]{question_en}[/dim yellow]")

    response = input(f"[{default_hint}]: ").strip().lower()

    if not response:
        return default

    return response in ('y', 'yes', '是', 'shi')
