"""
i18n 提取核心模块

提供中文检测、上下文判断、改写规则、遍历与引入补全
"""

from .changes import ChangeSet, ChangeStats, PendingChange
from .composer import TemplateComposer, TemplateMessage, build_call, compose_message
from .context import (
    is_directive_attribute,
    is_excluded_region,
    is_in_script_region,
    is_render_expression_context,
)
from .detector import has_chinese
from .imports import ImportEnsurer
from .processor import ProcessingResult, VueI18nProcessor, process_tree
from .registry import ExtractedEntry, KeyRegistry
from .rules import RewriteRules
from .walker import TreeWalker

__all__ = [
    'ChangeSet',
    'ChangeStats',
    'PendingChange',
    'TemplateComposer',
    'TemplateMessage',
    'build_call',
    'compose_message',
    'is_directive_attribute',
    'is_excluded_region',
    'is_in_script_region',
    'is_render_expression_context',
    'has_chinese',
    'ImportEnsurer',
    'ProcessingResult',
    'VueI18nProcessor',
    'process_tree',
    'ExtractedEntry',
    'KeyRegistry',
    'RewriteRules',
    'TreeWalker',
]
