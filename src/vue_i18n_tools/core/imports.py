"""
确保组件脚本引入翻译函数

    import { useI18n } from 'vue-i18n'
    const { t: $t } = useI18n();

脚本中已出现 hook 名（粗略的子串检查）时不做任何改动。
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..tree import NodeKind, SyntaxTree
from ..utils.config import ExtractorConfig

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r"import\b")


def find_last_import_line(lines: list[str]) -> int:
    """最后一条 import 语句结束所在的行号；多行 ``import { ... }`` 跟到右花括号所在行"""
    last = -1
    i = 0
    while i < len(lines):
        stripped = lines[i].strip()
        if _IMPORT_RE.match(stripped):
            end = i
            brace = stripped.find("{")
            if brace != -1 and "}" not in stripped[brace:]:
                while end + 1 < len(lines) and "}" not in lines[end]:
                    end += 1
                if "}" not in lines[end]:
                    end = i
            last = end
            i = end
        i += 1
    return last


def insert_hook_lines(content: str, import_line: str, init_line: str) -> str:
    """在脚本内容顶部插入 import，在最后一条 import 之后插入初始化语句"""
    newline = "\r\n" if "\r\n" in content else "\n"
    lines = content.split(newline)
    if lines and lines[0] == "":
        del lines[0]
    lines.insert(0, "")
    lines.insert(1, import_line)
    last_import = find_last_import_line(lines)
    if last_import == -1:
        lines.append(init_line)
    else:
        lines[last_import] = f"{lines[last_import]}{newline}{init_line}"
    return newline.join(lines)


class ImportEnsurer:
    """Guarantee that a component's script block binds the translation function."""

    def __init__(self, tree: SyntaxTree, config: Optional[ExtractorConfig] = None):
        self.tree = tree
        self.config = config or ExtractorConfig()

    def find_script(self) -> Optional[int]:
        """优先 <script setup>，否则第一个 <script>"""
        tree = self.tree
        scripts = [
            h for h in tree.iter_preorder()
            if tree.kind(h) is NodeKind.ELEMENT and tree.name(h) == "script"
        ]
        for script in scripts:
            for child in tree.children(script):
                if tree.kind(child) is NodeKind.ATTRIBUTE and tree.name(child) == "setup":
                    return script
        return scripts[0] if scripts else None

    def _append_default_script(self) -> int:
        tree = self.tree
        root = tree.root
        if tree.text(root) and not tree.text(root).endswith("\n"):
            tree.add(root, NodeKind.WHITESPACE, "\n")
        script = tree.add(root, NodeKind.ELEMENT, name="script")
        tree.add(script, NodeKind.TOKEN, f"<script {self.config.script_tag_attrs}".rstrip())
        tree.add(script, NodeKind.TAG_END, ">")
        body = tree.add(script, NodeKind.FRAGMENT, name="script")
        tree.add(body, NodeKind.WHITESPACE, "\n")
        tree.add(script, NodeKind.TOKEN, "</script>")
        tree.add(root, NodeKind.WHITESPACE, "\n")
        logger.debug(f"Appended default script block to {tree.source_name}")
        return script

    def ensure(self) -> bool:
        """
        Returns:
            True 表示脚本内容被改写
        """
        tree = self.tree
        if tree.root is None:
            return False
        script = self.find_script()
        if script is None:
            script = self._append_default_script()

        children = tree.children(script)
        tag_end = next((c for c in children if tree.kind(c) is NodeKind.TAG_END), None)
        if tag_end is None:
            logger.debug(f"Script element without start-tag end in {tree.source_name}, import skipped")
            return False

        body = tree.next_sibling(tag_end)
        if body is None or tree.text(body).startswith("</"):
            # 空的 <script></script>
            body = tree.new(NodeKind.FRAGMENT, name="script")
            tree.insert_child(script, children.index(tag_end) + 1, body)

        content = tree.text(body)
        if self.config.hook_member in content:
            return False

        new_content = insert_hook_lines(
            content,
            self.config.import_statement,
            self.config.initializer_statement,
        )
        if not content:
            new_content += "\n"
        tree.replace(body, new_content, NodeKind.TOKEN)
        logger.debug(f"Inserted {self.config.hook_member} import into {tree.source_name}")
        return True
