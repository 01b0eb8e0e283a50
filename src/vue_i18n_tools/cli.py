# -*- coding: utf-8 -*-
"""
Vue i18n 提取工具集 - 命令行入口

用法:
    vue-i18n-tools <command> [options]
    vue-i18n-tools --list
    vue-i18n-tools <command> --help

命令在进程内运行，来自 ``vue_i18n_tools.tools.COMMANDS``，
不依赖源码目录结构。
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from . import __version__
from .tools import COMMANDS, load_command


def resolve_command(name: str) -> list[str]:
    """完整名称直接命中；否则按前缀匹配，返回全部候选"""
    if name in COMMANDS:
        return [name]
    return sorted(c for c in COMMANDS if c.startswith(name))


def _epilog() -> str:
    lines = ["可用命令:"]
    lines += [f"  {name:<12}  {command.summary}" for name, command in sorted(COMMANDS.items())]
    lines += [
        "",
        "示例:",
        "  vue-i18n-tools extract src -o locales/zh-CN.json",
        "  vue-i18n-tools extract src/App.vue --dry-run",
        "  vue-i18n-tools extract src --normalize-interpolation --no-import",
    ]
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vue-i18n-tools",
        description="Vue i18n 提取工具集 - 命令行入口",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument("command", nargs="?", help="要运行的命令")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="传给命令的参数")
    parser.add_argument("--list", action="store_true", help="列出所有命令")
    parser.add_argument("--version", action="version", version=f"vue-i18n-tools {__version__}")

    args = parser.parse_args(argv)

    if args.list:
        print("可用命令:")
        for name, command in sorted(COMMANDS.items()):
            print(f"  - {name}: {command.summary}")
        return 0

    if not args.command:
        parser.print_help()
        return 0

    matches = resolve_command(args.command)
    if len(matches) > 1:
        print(f"错误: '{args.command}' 匹配多个命令: {', '.join(matches)}")
        return 1
    if not matches:
        print(f"错误: 未知命令 '{args.command}'")
        print(f"可用命令: {', '.join(sorted(COMMANDS))}")
        return 1

    return load_command(matches[0])(args.args)


if __name__ == "__main__":
    sys.exit(main())
