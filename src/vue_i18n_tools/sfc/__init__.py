"""
源码 -> 语法树

    parse_component  .vue 单文件组件
    parse_script     独立的 JS/TS/JSX/TSX 脚本
    parse_source     按文件扩展名选择
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..tree import NodeKind, SyntaxTree
from ..utils.logger import ParseError
from .markup import MarkupParser, parse_text, script_uses_jsx
from .script import ScriptParser

logger = logging.getLogger(__name__)

COMPONENT_EXTENSIONS = frozenset({".vue"})
JSX_EXTENSIONS = frozenset({".js", ".jsx", ".tsx", ".mjs", ".cjs"})
SCRIPT_EXTENSIONS = JSX_EXTENSIONS | {".ts", ".mts", ".cts"}


def parse_component(text: str, source_name: str = "<memory>") -> SyntaxTree:
    """解析 .vue 单文件组件"""
    tree = SyntaxTree(source_name)
    tree.root = tree.add(None, NodeKind.DOCUMENT)
    tree.is_component = True
    tree.reparser = parse_text
    try:
        MarkupParser(tree, text).parse_document(tree.root)
    except RecursionError as e:
        raise ParseError(f"Nesting too deep to parse {source_name}") from e
    return tree


def parse_script(text: str, jsx: bool = True, source_name: str = "<memory>") -> SyntaxTree:
    """解析独立脚本文件；根为名为 script 的 FRAGMENT"""
    tree = SyntaxTree(source_name)
    tree.root = tree.add(None, NodeKind.FRAGMENT, name="script")
    try:
        ScriptParser(tree, text, jsx=jsx).parse_program(tree.root)
    except RecursionError as e:
        raise ParseError(f"Nesting too deep to parse {source_name}") from e
    return tree


def parse_source(text: str, source_name: str = "<memory>") -> SyntaxTree:
    """按扩展名解析：.vue 为组件，.ts 不启用 JSX，其余脚本启用 JSX"""
    suffix = Path(source_name).suffix.lower()
    if suffix in COMPONENT_EXTENSIONS:
        return parse_component(text, source_name)
    if suffix not in SCRIPT_EXTENSIONS:
        logger.debug(f"Unknown extension {suffix!r} for {source_name}, parsing as script")
    return parse_script(text, jsx=suffix not in (".ts", ".mts", ".cts"), source_name=source_name)


__all__ = [
    'COMPONENT_EXTENSIONS',
    'SCRIPT_EXTENSIONS',
    'MarkupParser',
    'ScriptParser',
    'parse_component',
    'parse_script',
    'parse_source',
    'parse_text',
    'script_uses_jsx',
]
