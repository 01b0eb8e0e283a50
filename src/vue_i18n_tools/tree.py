"""
语法树模型（arena + handle）

A component is held as a flat arena of nodes addressed by integer handles.
Leaves carry source text; a container's text is the concatenation of its
leaves, so serializing the root reproduces the source exactly.

Replacing or deleting a node marks its whole subtree invalid; handles stay
stable, which lets a change queue target nodes discovered earlier even after
other parts of the tree were rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional


class NodeKind(str, Enum):
    """Syntactic role tags resolved once by the tree adapter."""

    # markup containers
    DOCUMENT = "document"
    ELEMENT = "element"
    ATTRIBUTE = "attribute"
    ATTRIBUTE_VALUE = "attribute_value"
    MARKUP_TEXT = "markup_text"
    INTERPOLATION = "interpolation"
    COMMENT = "comment"
    # code containers
    FRAGMENT = "fragment"
    STATEMENT = "statement"
    BLOCK = "block"
    RETURN = "return"
    VARIABLE = "variable"
    ASSIGNMENT = "assignment"
    CALL = "call"
    ARGUMENTS = "arguments"
    CONDITIONAL = "conditional"
    FUNCTION = "function"
    OBJECT = "object"
    PROPERTY = "property"
    ARRAY = "array"
    EXPORT_DEFAULT = "export_default"
    ENUM = "enum"
    ENUM_MEMBER = "enum_member"
    EXPRESSION = "expression"
    BINARY_CONCAT = "binary_concat"
    TYPE = "type"
    # leaves
    STRING_LITERAL = "string_literal"
    TOKEN = "token"
    WHITESPACE = "whitespace"
    TEXT_CHARS = "text_chars"
    TAG_END = "tag_end"
    INTERPOLATION_OPEN = "interpolation_open"
    INTERPOLATION_CLOSE = "interpolation_close"


@dataclass
class SyntaxNode:
    handle: int
    kind: NodeKind
    text: str = ""
    name: Optional[str] = None
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    valid: bool = True


# (tree, markup text) -> detached handle of the re-parsed node
Reparser = Callable[["SyntaxTree", str], int]


class SyntaxTree:
    """节点仓库：所有节点按 handle 存放"""

    def __init__(self, source_name: str = "<memory>"):
        self.source_name = source_name
        self.root: Optional[int] = None
        self.is_component = False
        self.reparser: Optional[Reparser] = None
        self._nodes: list[SyntaxNode] = []

    # ---- construction ----

    def new(self, kind: NodeKind, text: str = "", name: Optional[str] = None) -> int:
        """Create a detached node and return its handle."""
        handle = len(self._nodes)
        self._nodes.append(SyntaxNode(handle=handle, kind=kind, text=text, name=name))
        return handle

    def add(
        self,
        parent: Optional[int],
        kind: NodeKind,
        text: str = "",
        name: Optional[str] = None,
    ) -> int:
        handle = self.new(kind, text, name)
        if parent is not None:
            self.append_child(parent, handle)
        return handle

    def append_child(self, parent: int, child: int) -> None:
        self.detach(child)
        self._nodes[parent].children.append(child)
        self._nodes[child].parent = parent

    def insert_child(self, parent: int, index: int, child: int) -> None:
        self.detach(child)
        self._nodes[parent].children.insert(index, child)
        self._nodes[child].parent = parent

    def set_kind(self, handle: int, kind: NodeKind) -> None:
        self._nodes[handle].kind = kind

    def detach(self, handle: int) -> None:
        parent = self._nodes[handle].parent
        if parent is not None:
            self._nodes[parent].children.remove(handle)
            self._nodes[handle].parent = None

    # ---- accessors ----

    def node(self, handle: int) -> SyntaxNode:
        return self._nodes[handle]

    def kind(self, handle: int) -> NodeKind:
        return self._nodes[handle].kind

    def name(self, handle: int) -> Optional[str]:
        return self._nodes[handle].name

    def parent(self, handle: int) -> Optional[int]:
        return self._nodes[handle].parent

    def children(self, handle: int) -> list[int]:
        return list(self._nodes[handle].children)

    def is_valid(self, handle: int) -> bool:
        return self._nodes[handle].valid

    def text(self, handle: int) -> str:
        """Source text of a node: its leaves in order."""
        parts: list[str] = []
        stack = [handle]
        while stack:
            node = self._nodes[stack.pop()]
            if node.children:
                stack.extend(reversed(node.children))
            else:
                parts.append(node.text)
        return "".join(parts)

    def to_source(self) -> str:
        if self.root is None:
            return ""
        return self.text(self.root)

    def iter_preorder(self, handle: Optional[int] = None) -> Iterator[int]:
        start = self.root if handle is None else handle
        if start is None:
            return
        stack = [start]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].children))

    def ancestors(self, handle: int) -> Iterator[int]:
        parent = self._nodes[handle].parent
        while parent is not None:
            yield parent
            parent = self._nodes[parent].parent

    def next_sibling(self, handle: int) -> Optional[int]:
        parent = self._nodes[handle].parent
        if parent is None:
            return None
        siblings = self._nodes[parent].children
        index = siblings.index(handle)
        return siblings[index + 1] if index + 1 < len(siblings) else None

    def find_first(self, kind: NodeKind, name: Optional[str] = None) -> Optional[int]:
        for handle in self.iter_preorder():
            node = self._nodes[handle]
            if node.kind is kind and (name is None or node.name == name):
                return handle
        return None

    # ---- mutation ----

    def _invalidate(self, handle: int) -> None:
        for current in self.iter_preorder(handle):
            self._nodes[current].valid = False

    def replace(self, handle: int, text: str, kind: NodeKind = NodeKind.TOKEN) -> int:
        """Replace a node (and its subtree) with a single leaf."""
        return self.replace_with(handle, self.new(kind, text))

    def replace_with(self, handle: int, new_handle: int) -> int:
        """Graft a detached node in place of ``handle``."""
        node = self._nodes[handle]
        if node.parent is None:
            if handle != self.root:
                raise ValueError(f"node {handle} is detached")
            self.root = new_handle
        else:
            siblings = self._nodes[node.parent].children
            siblings[siblings.index(handle)] = new_handle
            self._nodes[new_handle].parent = node.parent
            node.parent = None
        self._invalidate(handle)
        return new_handle

    def replace_parsed(self, handle: int, text: str) -> int:
        """Replace a node with the re-parsed form of ``text``."""
        if self.reparser is None:
            return self.replace(handle, text)
        return self.replace_with(handle, self.reparser(self, text))

    def delete(self, handle: int) -> None:
        self.detach(handle)
        self._invalidate(handle)

    def dump(self, handle: Optional[int] = None, indent: int = 0) -> str:
        """Debug outline of the tree."""
        start = self.root if handle is None else handle
        if start is None:
            return ""
        node = self._nodes[start]
        label = node.kind.value + (f"[{node.name}]" if node.name else "")
        if not node.children:
            label += f" {node.text!r}"
        lines = ["  " * indent + label]
        for child in node.children:
            lines.append(self.dump(child, indent + 1))
        return "\n".join(lines)
