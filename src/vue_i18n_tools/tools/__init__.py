"""
命令注册表

每个命令是本包内的一个模块，提供 ``main(argv) -> int``。
"""

from __future__ import annotations

import importlib
from typing import Callable, NamedTuple


class Command(NamedTuple):
    module: str
    summary: str


COMMANDS: dict[str, Command] = {
    "extract": Command(
        "vue_i18n_tools.tools.extract",
        "提取中文文本，改写为 $t(...) 并补充 useI18n 引入",
    ),
}


def load_command(name: str) -> Callable[[list[str]], int]:
    """按名称导入命令模块并返回其 main"""
    return importlib.import_module(COMMANDS[name].module).main
