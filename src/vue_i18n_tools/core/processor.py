"""
i18n 提取处理器

一次运行：可选的插值预处理 -> 遍历 -> 应用改动 -> 按需补充 useI18n 引入。

Usage:
    tree = parse_component(text)
    result = VueI18nProcessor(tree).process()
    new_text = tree.to_source()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..tree import SyntaxTree
from ..utils.config import ExtractorConfig
from .changes import ChangeSet
from .imports import ImportEnsurer
from .registry import KeyRegistry
from .rules import RewriteRules
from .walker import TreeWalker

logger = logging.getLogger(__name__)


@dataclass
class ProcessingResult:
    """key -> 原文（按首次出现顺序）及本次运行的统计"""

    entries: dict[str, str] = field(default_factory=dict)
    advisories: list[str] = field(default_factory=list)
    applied: int = 0
    skipped: int = 0
    normalized: int = 0
    import_added: bool = False

    @property
    def changed(self) -> bool:
        return self.applied > 0 or self.normalized > 0 or self.import_added

    def __len__(self) -> int:
        return len(self.entries)


class VueI18nProcessor:
    """Run the extractor over one parsed tree."""

    def __init__(self, tree: SyntaxTree, config: Optional[ExtractorConfig] = None):
        self.tree = tree
        self.config = config or ExtractorConfig()

    def process(self) -> ProcessingResult:
        tree = self.tree
        registry = KeyRegistry()
        changes = ChangeSet()
        rules = RewriteRules(tree, registry, changes, self.config)
        walker = TreeWalker(tree, rules)

        normalized = 0
        if self.config.normalize_interpolation:
            normalized = walker.normalize_interpolations()

        walker.walk()
        stats = changes.apply(tree)
        if stats.skipped:
            logger.debug(f"{stats.skipped} change(s) skipped on invalidated nodes in {tree.source_name}")

        import_added = False
        if len(registry) and tree.is_component and self.config.ensure_import:
            import_added = ImportEnsurer(tree, self.config).ensure()

        logger.debug(
            f"{tree.source_name}: {len(registry)} key(s), {stats.applied} change(s) applied"
        )
        return ProcessingResult(
            entries=registry.as_dict(),
            advisories=list(rules.advisories),
            applied=stats.applied,
            skipped=stats.skipped,
            normalized=normalized,
            import_added=import_added,
        )


def process_tree(tree: SyntaxTree, config: Optional[ExtractorConfig] = None) -> ProcessingResult:
    """便捷函数：处理一棵语法树（原地修改）"""
    return VueI18nProcessor(tree, config).process()
