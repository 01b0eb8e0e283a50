"""
JS/TS 语法解析（容错、无损）

递归下降 + 优先级爬升。只识别改写规则需要区分的结构：
语句、声明、return、调用及参数、赋值、三元、函数、对象/数组、``+`` 拼接链、
枚举、类型区域。其余语法保留为 TOKEN 叶子。

所有 token（含空白与注释）都会落入树中，序列化结果与输入完全一致。
类型注解、import/export 说明符、属性名中的字符串不会成为 STRING_LITERAL。
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..tree import NodeKind, SyntaxTree
from .lexer import COMMENT, EOF, IDENT, NUMBER, PUNCT, REGEX, STRING, TEMPLATE, TRIVIA, ScriptLexer, Token

logger = logging.getLogger(__name__)

ASSIGNMENT_OPERATORS = frozenset({
    "=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", ">>=", ">>>=",
    "&=", "|=", "^=", "&&=", "||=", "??=",
})

BINARY_PRECEDENCE = {
    "??": 1, "||": 2, "&&": 3, "|": 4, "^": 5, "&": 6,
    "==": 7, "!=": 7, "===": 7, "!==": 7,
    "<": 8, ">": 8, "<=": 8, ">=": 8, "instanceof": 8, "in": 8,
    "<<": 9, ">>": 9, ">>>": 9,
    "+": 10, "-": 10,
    "*": 11, "/": 11, "%": 11,
    "**": 12,
}
ADDITIVE_PRECEDENCE = 10

PREFIX_OPERATORS = frozenset({"!", "~", "+", "-", "++", "--"})
PREFIX_KEYWORDS = frozenset({"typeof", "void", "delete", "await", "yield"})

MEMBER_MODIFIERS = frozenset({
    "public", "private", "protected", "readonly", "static", "abstract",
    "override", "declare", "async", "get", "set", "accessor",
})
PARAMETER_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override"})

RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger", "default",
    "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
    "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
    "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
})

# 出现这些运算符时 `<` 不是类型实参
TYPE_ARGUMENT_FORBIDDEN = frozenset({
    "&&", "||", "??", "==", "===", "!=", "!==", "+", "-", "*", "/", "%", "**",
    "++", "--", "!", "+=", "-=", "<=", ">=", "=",
})

# 类型在这些 token 处结束（深度为 0 时）
TYPE_TERMINATORS = frozenset({
    ",", ")", "]", "}", ";", ">", ">>", ">>>", "=", "&&", "||", "??", "+", "-", "*",
})

# 这些 token 之后的换行不结束类型
TYPE_CONTINUATIONS = frozenset({"|", "&", ":", "=>", ",", "<", "?", ".", "(", "[", "{", "="})
TYPE_CONTINUATION_WORDS = frozenset({
    "extends", "keyof", "typeof", "infer", "is", "readonly", "unique", "new", "asserts",
})

_OPENERS = ("(", "[", "{")
_CLOSERS = (")", "]", "}")


class ScriptParser:
    """Lossless, error-tolerant JS/TS parser writing into a SyntaxTree."""

    def __init__(
        self,
        tree: SyntaxTree,
        source: str,
        start: int = 0,
        end: Optional[int] = None,
        jsx: bool = False,
    ):
        self.tree = tree
        self.source = source
        self.jsx = jsx
        self.lexer = ScriptLexer(source, start, end)
        self._tokens: list[Token] = []
        self._sig: list[int] = []
        self._pos = 0
        self._sig_pos = 0
        self._newline_pending = False
        self._consumed = 0
        self._statement_handlers: dict[str, Callable[[int], bool]] = {
            "import": self._parse_import,
            "export": self._parse_export,
            "const": self._parse_variable_statement,
            "let": self._parse_variable_statement,
            "var": self._parse_variable_statement,
            "return": self._parse_return,
            "throw": self._parse_throw,
            "if": self._parse_if,
            "for": self._parse_for,
            "while": self._parse_while,
            "with": self._parse_while,
            "switch": self._parse_while,
            "do": self._parse_do,
            "try": self._parse_try,
            "function": self._parse_function_statement,
            "async": self._parse_function_statement,
            "class": self._parse_class_statement,
            "abstract": self._parse_class_statement,
            "enum": self._parse_enum,
            "interface": self._parse_interface,
            "declare": self._parse_interface,
            "type": self._parse_type_alias,
            "namespace": self._parse_namespace,
            "module": self._parse_namespace,
            "break": self._parse_jump,
            "continue": self._parse_jump,
            "debugger": self._parse_jump,
            "case": self._parse_case,
            "default": self._parse_case,
        }

    # ========================================
    # 入口
    # ========================================

    def parse_program(self, container: int) -> int:
        """语句序列（脚本块、独立脚本文件）"""
        self.parse_statements(container, closing=None)
        self._flush_trivia(container)
        return container

    def parse_expressions(self, container: int) -> int:
        """表达式序列（插值、指令值、JSX 表达式容器）"""
        while self._peek().type != EOF:
            before = self._consumed
            self.parse_expression(container)
            if self._peek().is_punct(",", ";"):
                self._take(container)
            if self._consumed == before:
                self._take(container)
        self._flush_trivia(container)
        return container

    # ========================================
    # token 缓冲
    # ========================================

    def _lex(self) -> None:
        token = self.lexer.next()
        if token.type in TRIVIA:
            if "\n" in token.text:
                self._newline_pending = True
        else:
            token.newline_before = self._newline_pending
            self._newline_pending = False
            self._sig.append(len(self._tokens))
        self._tokens.append(token)

    def _lexed_eof(self) -> bool:
        return bool(self._tokens) and self._tokens[-1].type == EOF

    def _peek(self, k: int = 0) -> Token:
        while len(self._sig) - self._sig_pos <= k and not self._lexed_eof():
            self._lex()
        index = self._sig_pos + k
        if index < len(self._sig):
            return self._tokens[self._sig[index]]
        return self._tokens[self._sig[-1]]

    def _flush_trivia(self, container: int) -> None:
        self._peek()
        stop = self._sig[self._sig_pos]
        while self._pos < stop:
            token = self._tokens[self._pos]
            kind = NodeKind.COMMENT if token.type == COMMENT else NodeKind.WHITESPACE
            self.tree.add(container, kind, token.text)
            self._pos += 1

    def _take(self, container: int, kind: Optional[NodeKind] = None) -> Optional[int]:
        token = self._peek()
        self._flush_trivia(container)
        if token.type == EOF:
            return None
        if kind is None:
            kind = NodeKind.STRING_LITERAL if token.type in (STRING, TEMPLATE) else NodeKind.TOKEN
        handle = self.tree.add(container, kind, token.text)
        self._pos += 1
        self._sig_pos += 1
        self._consumed += 1
        return handle

    def _accept(self, container: int, *texts: str) -> bool:
        token = self._peek()
        if token.type in (PUNCT, IDENT) and token.text in texts:
            self._take(container, NodeKind.TOKEN)
            return True
        return False

    def _reseat(self, pos: int) -> None:
        """丢弃预读的 token，从 pos 重新扫描（JSX 元素之后）"""
        self._tokens.clear()
        self._sig.clear()
        self._pos = 0
        self._sig_pos = 0
        self._newline_pending = False
        self.lexer.reset(pos, Token(PUNCT, ")", pos, pos))

    def _wrap(self, left: int, kind: NodeKind) -> int:
        """用新节点包住已解析的左操作数"""
        tree = self.tree
        parent = tree.parent(left)
        node = tree.new(kind)
        tree.insert_child(parent, tree.children(parent).index(left), node)
        tree.append_child(node, left)
        return node

    # ========================================
    # 语句
    # ========================================

    def parse_statements(self, container: int, closing: Optional[str]) -> None:
        while True:
            token = self._peek()
            if token.type == EOF:
                return
            if closing is not None and token.is_punct(closing):
                return
            before = self._consumed
            self.parse_statement(container)
            if self._consumed == before:
                self._take(container)

    def parse_statement(self, container: int) -> None:
        self._flush_trivia(container)
        token = self._peek()
        if token.is_punct(";"):
            self._take(container)
            return
        if token.is_punct("{"):
            self.parse_block(container)
            return
        if token.is_punct("@"):
            while self._peek().is_punct("@"):
                self._parse_decorator(container)
            if self._peek().type != EOF:
                self.parse_statement(container)
            return
        if token.type == IDENT:
            handler = self._statement_handlers.get(token.text)
            if handler is not None and handler(container):
                return
            if token.text not in RESERVED_WORDS and self._peek(1).is_punct(":"):
                # label
                self._take(container)
                self._take(container)
                return
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self.parse_expression(statement)
        self._accept(statement, ";")

    def parse_block(self, container: int) -> int:
        block = self.tree.add(container, NodeKind.BLOCK)
        self._take(block)
        self.parse_statements(block, closing="}")
        self._accept(block, "}")
        return block

    def _parse_body(self, statement: int) -> None:
        if self._peek().type != EOF:
            self.parse_statement(statement)

    def _parse_import(self, container: int) -> bool:
        if self._peek(1).is_punct("(", "."):
            return False
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        while True:
            token = self._peek()
            if token.type == EOF or token.is_punct(";"):
                break
            if token.newline_before and token.is_word("import", "export", "const", "let", "var", "function", "class"):
                break
            self._take(statement, NodeKind.TOKEN)
            if token.type == STRING:
                if self._peek().is_word("with", "assert") and not self._peek().newline_before:
                    self._take(statement, NodeKind.TOKEN)
                    self._skip_balanced(statement)
                break
        self._accept(statement, ";")
        return True

    def _parse_export(self, container: int) -> bool:
        tree = self.tree
        following = self._peek(1)
        if following.is_word("default"):
            node = tree.add(container, NodeKind.EXPORT_DEFAULT)
            self._take(node)
            self._take(node)
            token = self._peek()
            if token.is_word("function") or (token.is_word("async") and self._peek(1).is_word("function")):
                self._parse_function(node)
            elif token.is_word("class", "abstract"):
                self._parse_class(node)
            else:
                self.parse_assignment(node)
            self._accept(node, ";")
            return True
        if following.is_punct("{", "*") or (following.is_word("type") and self._peek(2).is_punct("{", "*")):
            statement = tree.add(container, NodeKind.STATEMENT)
            self._take(statement)
            while True:
                token = self._peek()
                if token.type == EOF or token.is_punct(";"):
                    break
                self._take(statement, NodeKind.TOKEN)
                if token.type == STRING:
                    break
                if token.is_punct("}") and not self._peek().is_word("from"):
                    break
            self._accept(statement, ";")
            return True
        if following.is_punct("="):
            return False
        self._take(container)
        if self._peek().type != EOF:
            self.parse_statement(container)
        return True

    def _parse_variable_statement(self, container: int) -> bool:
        keyword = self._peek()
        following = self._peek(1)
        if keyword.text == "let" and not (following.type == IDENT or following.is_punct("[", "{")):
            return False
        if keyword.text == "const" and following.is_word("enum"):
            return self._parse_enum(container)
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        self._parse_declarators(statement)
        self._accept(statement, ";")
        return True

    def _parse_declarators(self, statement: int) -> None:
        tree = self.tree
        while True:
            declarator = tree.add(statement, NodeKind.VARIABLE)
            before = self._consumed
            token = self._peek()
            if token.is_punct("{", "["):
                self.parse_primary(declarator)
            elif token.type == IDENT:
                self._take(declarator)
            self._accept(declarator, "!")
            if self._accept(declarator, ":"):
                self.parse_type(declarator)
            if self._accept(declarator, "="):
                self.parse_assignment(declarator)
            if self._consumed == before:
                tree.delete(declarator)
                break
            if not self._accept(statement, ","):
                break

    def _parse_return(self, container: int) -> bool:
        node = self.tree.add(container, NodeKind.RETURN)
        self._take(node)
        token = self._peek()
        if not (token.type == EOF or token.is_punct(";", "}") or token.newline_before):
            self.parse_expression(node)
        self._accept(node, ";")
        return True

    def _parse_throw(self, container: int) -> bool:
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        self.parse_expression(statement)
        self._accept(statement, ";")
        return True

    def _parse_if(self, container: int) -> bool:
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        if self._peek().is_punct("("):
            self.parse_primary(statement)
        self._parse_body(statement)
        if self._accept(statement, "else"):
            self._parse_body(statement)
        return True

    def _parse_while(self, container: int) -> bool:
        """while / with / switch：关键字 + 括号 + 语句体"""
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        if self._peek().is_punct("("):
            self.parse_primary(statement)
        self._parse_body(statement)
        return True

    def _parse_for(self, container: int) -> bool:
        tree = self.tree
        statement = tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        self._accept(statement, "await")
        if self._peek().is_punct("("):
            header = tree.add(statement, NodeKind.EXPRESSION)
            self._take(header)
            while True:
                token = self._peek()
                if token.type == EOF or token.is_punct(")"):
                    break
                before = self._consumed
                if token.is_punct(";") or token.is_word("const", "let", "var", "of", "in"):
                    self._take(header)
                else:
                    self.parse_expression(header)
                if self._consumed == before:
                    self._take(header)
            self._accept(header, ")")
        self._parse_body(statement)
        return True

    def _parse_do(self, container: int) -> bool:
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        self._parse_body(statement)
        if self._accept(statement, "while") and self._peek().is_punct("("):
            self.parse_primary(statement)
        self._accept(statement, ";")
        return True

    def _parse_try(self, container: int) -> bool:
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        if self._peek().is_punct("{"):
            self.parse_block(statement)
        if self._accept(statement, "catch"):
            if self._peek().is_punct("("):
                self._parse_params(statement)
            if self._peek().is_punct("{"):
                self.parse_block(statement)
        if self._accept(statement, "finally") and self._peek().is_punct("{"):
            self.parse_block(statement)
        return True

    def _parse_jump(self, container: int) -> bool:
        """break / continue / debugger"""
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        token = self._peek()
        if token.type == IDENT and not token.newline_before and token.text not in RESERVED_WORDS:
            self._take(statement)
        self._accept(statement, ";")
        return True

    def _parse_case(self, container: int) -> bool:
        if self._peek().is_word("default") and not self._peek(1).is_punct(":"):
            return False
        statement = self.tree.add(container, NodeKind.STATEMENT)
        if self._peek().is_word("case"):
            self._take(statement)
            self.parse_expression(statement)
        else:
            self._take(statement)
        self._accept(statement, ":")
        return True

    def _parse_function_statement(self, container: int) -> bool:
        if self._peek().is_word("async"):
            following = self._peek(1)
            if not following.is_word("function") or following.newline_before:
                return False
        self._parse_function(container)
        return True

    def _parse_class_statement(self, container: int) -> bool:
        if self._peek().is_word("abstract") and not self._peek(1).is_word("class"):
            return False
        self._parse_class(container)
        return True

    def _parse_namespace(self, container: int) -> bool:
        following = self._peek(1)
        if following.newline_before or following.type not in (IDENT, STRING):
            return False
        statement = self.tree.add(container, NodeKind.STATEMENT)
        self._take(statement)
        while True:
            token = self._peek()
            if token.type == EOF or token.is_punct("{", ";"):
                break
            self._take(statement, NodeKind.TOKEN)
        if self._peek().is_punct("{"):
            self.parse_block(statement)
        return True

    # ========================================
    # 声明：函数、类、枚举、类型
    # ========================================

    def _parse_function(self, container: int) -> int:
        node = self.tree.add(container, NodeKind.FUNCTION)
        self._accept(node, "async")
        self._accept(node, "function")
        self._accept(node, "*")
        token = self._peek()
        if token.type == IDENT:
            self._take(node)
        self._parse_function_rest(node)
        return node

    def _parse_function_rest(self, node: int) -> None:
        """类型参数、参数列表、返回类型、函数体"""
        if self._peek().is_punct("<"):
            self._parse_angle_type(node)
        if self._peek().is_punct("("):
            self._parse_params(node)
        if self._accept(node, ":"):
            self.parse_type(node, stop_at_brace=True)
        if self._peek().is_punct("{"):
            self.parse_block(node)
        else:
            self._accept(node, ";")

    def _parse_params(self, container: int) -> int:
        params = self.tree.add(container, NodeKind.EXPRESSION)
        self._take(params)
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct(")"):
                self._take(params)
                break
            before = self._consumed
            if token.is_punct(","):
                self._take(params)
                continue
            while self._peek().is_punct("@"):
                self._parse_decorator(params)
            while (
                self._peek().is_word(*PARAMETER_MODIFIERS)
                and (self._peek(1).type == IDENT or self._peek(1).is_punct("{", "["))
            ):
                self._take(params)
            self._accept(params, "...")
            token = self._peek()
            if token.is_punct("{", "["):
                self.parse_primary(params)
            elif token.type == IDENT:
                self._take(params)
            self._accept(params, "?")
            if self._accept(params, ":"):
                self.parse_type(params)
            if self._accept(params, "="):
                self.parse_assignment(params)
            if self._consumed == before:
                if self._peek().is_punct("}", ";"):
                    break
                self._take(params)
        return params

    def _parse_decorator(self, container: int) -> None:
        self._take(container)
        self.parse_call_member(container)

    def _parse_class(self, container: int, kind: NodeKind = NodeKind.STATEMENT) -> int:
        tree = self.tree
        node = tree.add(container, kind)
        while self._peek().is_word("abstract", "declare"):
            self._take(node)
        self._accept(node, "class")
        token = self._peek()
        if token.type == IDENT and not token.is_word("extends", "implements"):
            self._take(node)
        if self._peek().is_punct("<"):
            self._parse_angle_type(node)
        if self._peek().is_word("extends", "implements"):
            heritage = tree.add(node, NodeKind.TYPE)
            depth = 0
            while True:
                token = self._peek()
                if token.type == EOF or (depth == 0 and token.is_punct("{")):
                    break
                self._take(heritage, NodeKind.TOKEN)
                depth = max(0, depth + self._depth_delta(token))
        if self._peek().is_punct("{"):
            self._parse_class_body(node)
        return node

    def _parse_class_body(self, node: int) -> None:
        body = self.tree.add(node, NodeKind.BLOCK)
        self._take(body)
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct("}"):
                self._take(body)
                break
            before = self._consumed
            if token.is_punct(";"):
                self._take(body)
                continue
            if token.is_word("static") and self._peek(1).is_punct("{"):
                self._take(body)
                self.parse_block(body)
                continue
            self._parse_class_member(body)
            if self._consumed == before:
                self._take(body)

    def _parse_class_member(self, body: int) -> None:
        tree = self.tree
        member = tree.add(body, NodeKind.PROPERTY)
        while self._peek().is_punct("@"):
            self._parse_decorator(member)
        while self._peek().is_word(*MEMBER_MODIFIERS) and self._is_modifier():
            self._take(member)
        self._accept(member, "*")
        self._parse_property_key(member)
        self._accept(member, "?", "!")
        if self._peek().is_punct("(", "<"):
            tree.set_kind(member, NodeKind.FUNCTION)
            self._parse_function_rest(member)
            return
        if self._accept(member, ":"):
            self.parse_type(member)
        if self._accept(member, "="):
            self.parse_assignment(member)
        self._accept(member, ";")

    def _is_modifier(self) -> bool:
        following = self._peek(1)
        if following.newline_before:
            return False
        return not following.is_punct("(", "=", ";", ":", "?", "!", "}", "<", ",")

    def _parse_property_key(self, node: int) -> None:
        token = self._peek()
        if token.is_punct("["):
            self._take(node)
            self.parse_assignment(node)
            self._accept(node, "]")
        elif token.is_punct("#"):
            self._take(node)
            if self._peek().type == IDENT:
                self._take(node)
        elif token.type in (IDENT, STRING, NUMBER, TEMPLATE):
            self._take(node, NodeKind.TOKEN)

    def _parse_enum(self, container: int) -> bool:
        tree = self.tree
        node = tree.add(container, NodeKind.ENUM)
        while self._peek().is_word("const", "declare"):
            self._take(node)
        self._accept(node, "enum")
        token = self._peek()
        if token.type == IDENT:
            tree.node(node).name = token.text
            self._take(node)
        if not self._accept(node, "{"):
            return True
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct("}"):
                self._take(node)
                break
            if token.is_punct(","):
                self._take(node)
                continue
            before = self._consumed
            member = tree.add(node, NodeKind.ENUM_MEMBER)
            if token.type in (IDENT, STRING, NUMBER):
                self._take(member, NodeKind.TOKEN)
            elif token.is_punct("["):
                self._take(member)
                self.parse_assignment(member)
                self._accept(member, "]")
            if self._accept(member, "="):
                self.parse_assignment(member)
            if self._consumed == before:
                tree.delete(member)
                self._take(node)
        return True

    def _parse_interface(self, container: int) -> bool:
        """interface / declare：整条语句作为类型区域"""
        following = self._peek(1)
        if following.newline_before or following.type not in (IDENT, STRING):
            return False
        node = self.tree.add(container, NodeKind.TYPE)
        self._skip_type_statement(node)
        return True

    def _parse_type_alias(self, container: int) -> bool:
        following = self._peek(1)
        if following.newline_before or following.type != IDENT:
            return False
        node = self.tree.add(container, NodeKind.TYPE)
        self._take(node, NodeKind.TOKEN)
        self._take(node, NodeKind.TOKEN)
        if self._peek().is_punct("<"):
            self._parse_angle_type(node)
        if self._accept(node, "="):
            self.parse_type(node)
        self._accept(node, ";")
        return True

    def _skip_type_statement(self, node: int) -> None:
        depth = 0
        previous: Optional[Token] = None
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if depth == 0 and previous is not None:
                if token.is_punct(";"):
                    self._take(node, NodeKind.TOKEN)
                    break
                if token.is_punct("}"):
                    break
                if (
                    token.newline_before
                    and not self._type_continues(previous)
                    and not token.is_punct("{", "|", "&", ".", "=>")
                    and not token.is_word("extends", "implements")
                ):
                    break
            self._take(node, NodeKind.TOKEN)
            if token.is_punct(*_OPENERS):
                depth += 1
            elif token.is_punct(*_CLOSERS):
                depth -= 1
                if depth <= 0 and token.text == "}":
                    break
                depth = max(depth, 0)
            previous = token

    # ========================================
    # 类型区域
    # ========================================

    @staticmethod
    def _depth_delta(token: Token) -> int:
        if token.type != PUNCT:
            return 0
        if token.text in _OPENERS or token.text == "<":
            return 1
        if token.text in _CLOSERS:
            return -1
        if token.text in (">", ">>", ">>>"):
            return -len(token.text)
        return 0

    @staticmethod
    def _type_continues(previous: Token) -> bool:
        return (
            (previous.type == PUNCT and previous.text in TYPE_CONTINUATIONS)
            or (previous.type == IDENT and previous.text in TYPE_CONTINUATION_WORDS)
        )

    def parse_type(self, container: int, stop_at_arrow: bool = False, stop_at_brace: bool = False) -> int:
        """类型表达式：所有 token 以 TOKEN 叶子存放"""
        node = self.tree.add(container, NodeKind.TYPE)
        depth = 0
        previous: Optional[Token] = None
        pending_conditional = 0
        saw_extends = False
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if depth == 0:
                if token.type == PUNCT and token.text in TYPE_TERMINATORS:
                    break
                if token.is_word("as", "satisfies", "in", "of", "instanceof"):
                    break
                if token.is_punct("=>") and stop_at_arrow:
                    break
                if previous is not None and not self._type_continues(previous):
                    if token.is_punct("{") and stop_at_brace:
                        break
                    if token.newline_before and not (
                        token.is_punct("|", "&", ".", "[", "=>", "?", ":")
                        or token.is_word("extends", "is")
                    ):
                        break
                if token.is_punct("?"):
                    if not saw_extends:
                        break
                    pending_conditional += 1
                elif token.is_punct(":"):
                    if not pending_conditional:
                        break
                    pending_conditional -= 1
                elif token.is_word("extends"):
                    saw_extends = True
            self._take(node, NodeKind.TOKEN)
            depth = max(0, depth + self._depth_delta(token))
            previous = token
        return node

    def _parse_angle_type(self, container: int) -> int:
        """``<...>`` 类型参数 / 类型实参"""
        node = self.tree.add(container, NodeKind.TYPE)
        depth = 0
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            self._take(node, NodeKind.TOKEN)
            depth += self._depth_delta(token)
            if depth <= 0:
                break
        return node

    def _looks_like_type_arguments(self) -> bool:
        depth = 0
        for i in range(256):
            token = self._peek(i)
            if token.type == EOF:
                return False
            if token.type != PUNCT:
                continue
            if token.text == "<":
                depth += 1
            elif token.text in (">", ">>", ">>>"):
                depth -= len(token.text)
                if depth < 0:
                    return False
                if depth == 0:
                    following = self._peek(i + 1)
                    return following.is_punct("(") or following.type == TEMPLATE
            elif token.text in TYPE_ARGUMENT_FORBIDDEN:
                return False
        return False

    # ========================================
    # 表达式
    # ========================================

    def parse_expression(self, container: int) -> int:
        first = self.parse_assignment(container)
        if not self._peek().is_punct(","):
            return first
        node = self._wrap(first, NodeKind.EXPRESSION)
        while self._accept(node, ","):
            self.parse_assignment(node)
        return node

    def parse_assignment(self, container: int) -> int:
        if self._is_arrow_start():
            return self._parse_arrow(container)
        left = self.parse_conditional(container)
        token = self._peek()
        if token.type == PUNCT and token.text in ASSIGNMENT_OPERATORS:
            node = self._wrap(left, NodeKind.ASSIGNMENT)
            self._take(node)
            self.parse_assignment(node)
            return node
        return left

    def _is_arrow_start(self) -> bool:
        token = self._peek()
        offset = 0
        if token.is_word("async"):
            following = self._peek(1)
            if following.newline_before:
                return False
            if following.type == IDENT and self._peek(2).is_punct("=>"):
                return True
            if not following.is_punct("("):
                return False
            offset = 1
            token = following
        if offset == 0 and token.type == IDENT and token.text not in RESERVED_WORDS:
            return self._peek(1).is_punct("=>")
        if token.is_punct("("):
            return self._scan_arrow_params(offset)
        return False

    def _scan_arrow_params(self, start: int) -> bool:
        depth = 0
        for i in range(start, start + 2000):
            token = self._peek(i)
            if token.type == EOF:
                return False
            if token.is_punct(*_OPENERS):
                depth += 1
            elif token.is_punct(*_CLOSERS):
                depth -= 1
                if depth == 0:
                    following = self._peek(i + 1)
                    if following.is_punct("=>"):
                        return True
                    if following.is_punct(":"):
                        return self._scan_return_type_arrow(i + 2)
                    return False
        return False

    def _scan_return_type_arrow(self, start: int) -> bool:
        depth = 0
        for i in range(start, start + 200):
            token = self._peek(i)
            if token.type == EOF:
                return False
            if depth == 0:
                if token.is_punct("=>"):
                    return True
                if token.is_punct(",", ";", ")", "]", "}", "=", "?", ":"):
                    return False
            depth = max(0, depth + self._depth_delta(token))
        return False

    def _parse_arrow(self, container: int) -> int:
        node = self.tree.add(container, NodeKind.FUNCTION)
        self._accept(node, "async")
        if self._peek().type == IDENT:
            self._take(node)
        else:
            self._parse_params(node)
        if self._accept(node, ":"):
            self.parse_type(node, stop_at_arrow=True)
        self._accept(node, "=>")
        if self._peek().is_punct("{"):
            self.parse_block(node)
        else:
            self.parse_assignment(node)
        return node

    def parse_conditional(self, container: int) -> int:
        test = self.parse_binary(container, 0)
        if not self._peek().is_punct("?"):
            return test
        node = self._wrap(test, NodeKind.CONDITIONAL)
        self._take(node)
        self.parse_assignment(node)
        if self._accept(node, ":"):
            self.parse_assignment(node)
        return node

    def _binary_precedence(self, token: Token) -> Optional[int]:
        if token.type == PUNCT:
            return BINARY_PRECEDENCE.get(token.text)
        if token.type == IDENT and token.text in ("instanceof", "in"):
            return BINARY_PRECEDENCE[token.text]
        return None

    def parse_binary(self, container: int, min_precedence: int) -> int:
        left = self.parse_unary(container)
        while True:
            token = self._peek()
            if token.is_word("as", "satisfies") and not token.newline_before:
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._take(node)
                self.parse_type(node)
                left = node
                continue
            precedence = self._binary_precedence(token)
            if precedence is None or precedence < min_precedence:
                return left
            if precedence == ADDITIVE_PRECEDENCE:
                left = self._parse_additive_chain(left)
                continue
            node = self._wrap(left, NodeKind.EXPRESSION)
            self._take(node)
            self.parse_binary(node, precedence if token.text == "**" else precedence + 1)
            left = node

    def _parse_additive_chain(self, left: int) -> int:
        """``a + b + c`` 拼成一个节点；全部是 + 时为 BINARY_CONCAT"""
        node = self._wrap(left, NodeKind.EXPRESSION)
        all_plus = True
        while self._peek().is_punct("+", "-"):
            if self._peek().text == "-":
                all_plus = False
            self._take(node)
            self.parse_binary(node, ADDITIVE_PRECEDENCE + 1)
        if all_plus:
            self.tree.set_kind(node, NodeKind.BINARY_CONCAT)
        return node

    def parse_unary(self, container: int) -> int:
        token = self._peek()
        is_prefix = (
            (token.type == PUNCT and token.text in PREFIX_OPERATORS)
            or (token.type == IDENT and token.text in PREFIX_KEYWORDS)
        )
        if not is_prefix:
            return self.parse_postfix(container)
        node = self.tree.add(container, NodeKind.EXPRESSION)
        self._take(node)
        if token.text in ("yield", "await"):
            following = self._peek()
            if following.newline_before or following.type == EOF or following.is_punct(")", "]", "}", ";", ",", ":"):
                return node
            self._accept(node, "*")
        self.parse_unary(node)
        return node

    def parse_postfix(self, container: int) -> int:
        expression = self.parse_call_member(container)
        token = self._peek()
        if token.is_punct("++", "--") and not token.newline_before:
            node = self._wrap(expression, NodeKind.EXPRESSION)
            self._take(node)
            return node
        return expression

    def parse_call_member(self, container: int) -> int:
        tree = self.tree
        if self._peek().is_word("new") and not self._peek(1).is_punct("."):
            left = tree.add(container, NodeKind.EXPRESSION)
            self._take(left)
            self.parse_call_member(left)
        else:
            left = self.parse_primary(container)
        while True:
            token = self._peek()
            if token.is_punct(".", "?."):
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._take(node)
                left = node
                if token.text == "?." and self._peek().is_punct("(", "["):
                    continue
                self._accept(node, "#")
                if self._peek().type == IDENT:
                    self._take(node)
            elif token.is_punct("["):
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._take(node)
                self.parse_expression(node)
                self._accept(node, "]")
                left = node
            elif token.is_punct("("):
                node = self._wrap(left, NodeKind.CALL)
                self._parse_arguments(tree.add(node, NodeKind.ARGUMENTS))
                left = node
            elif token.type == TEMPLATE:
                # 标签模板，如 css`...`
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._take(node, NodeKind.TOKEN)
                left = node
            elif token.is_punct("!") and not token.newline_before:
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._take(node)
                left = node
            elif token.is_punct("<") and self._looks_like_type_arguments():
                node = self._wrap(left, NodeKind.EXPRESSION)
                self._parse_angle_type(node)
                left = node
            else:
                return left

    def _parse_arguments(self, arguments: int) -> None:
        self._take(arguments)
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct(")"):
                self._take(arguments)
                break
            if token.is_punct("}", ";", "]"):
                break
            before = self._consumed
            if token.is_punct(","):
                self._take(arguments)
                continue
            self._accept(arguments, "...")
            self.parse_assignment(arguments)
            if self._consumed == before:
                self._take(arguments)

    def parse_primary(self, container: int) -> int:
        tree = self.tree
        token = self._peek()
        if token.type in (STRING, TEMPLATE):
            return self._take(container, NodeKind.STRING_LITERAL)
        if token.type in (NUMBER, REGEX):
            return self._take(container, NodeKind.TOKEN)
        if token.type == IDENT:
            if token.is_word("function") or (
                token.is_word("async") and self._peek(1).is_word("function") and not self._peek(1).newline_before
            ):
                return self._parse_function(container)
            if token.is_word("class"):
                return self._parse_class(container, NodeKind.EXPRESSION)
            return self._take(container, NodeKind.TOKEN)
        if token.is_punct("("):
            node = tree.add(container, NodeKind.EXPRESSION)
            self._take(node)
            if not self._peek().is_punct(")"):
                self.parse_expression(node)
            self._accept(node, ")")
            return node
        if token.is_punct("["):
            return self._parse_array(container)
        if token.is_punct("{"):
            return self._parse_object(container)
        if token.is_punct("<"):
            if self.jsx:
                return self._parse_jsx(container)
            # <T>(x) => x 或 <T>value
            node = tree.add(container, NodeKind.EXPRESSION)
            self._parse_angle_type(node)
            self.parse_assignment(node)
            return node
        if token.is_punct("#"):
            node = tree.add(container, NodeKind.EXPRESSION)
            self._take(node)
            if self._peek().type == IDENT:
                self._take(node)
            return node
        if token.is_punct("@"):
            node = tree.add(container, NodeKind.EXPRESSION)
            self._parse_decorator(node)
            return node
        if token.type == EOF or token.is_punct(")", "]", "}", ";", ","):
            return tree.add(container, NodeKind.EXPRESSION)
        return self._take(container, NodeKind.TOKEN)

    def _parse_array(self, container: int) -> int:
        node = self.tree.add(container, NodeKind.ARRAY)
        self._take(node)
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct("]"):
                self._take(node)
                break
            if token.is_punct(")", "}", ";"):
                break
            before = self._consumed
            if token.is_punct(","):
                self._take(node)
                continue
            self._accept(node, "...")
            self.parse_assignment(node)
            if self._consumed == before:
                self._take(node)
        return node

    def _parse_object(self, container: int) -> int:
        tree = self.tree
        node = tree.add(container, NodeKind.OBJECT)
        self._take(node)
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            if token.is_punct("}"):
                self._take(node)
                break
            if token.is_punct(")", "]", ";"):
                break
            before = self._consumed
            if token.is_punct(","):
                self._take(node)
                continue
            if token.is_punct("..."):
                self._take(node)
                self.parse_assignment(node)
                continue
            prop = tree.add(node, NodeKind.PROPERTY)
            if token.is_word("get", "set", "async") and not self._peek(1).is_punct(",", ":", "(", "}", "=", "<"):
                self._take(prop)
            self._accept(prop, "*")
            self._parse_property_key(prop)
            following = self._peek()
            if following.is_punct(":"):
                self._take(prop)
                self.parse_assignment(prop)
            elif following.is_punct("(", "<"):
                self._parse_function_rest(prop)
            elif following.is_punct("="):
                self._take(prop)
                self.parse_assignment(prop)
            if self._consumed == before:
                tree.delete(prop)
                self._take(node)
        return node

    def _skip_balanced(self, container: int) -> None:
        """原样收下一个括号配平的片段"""
        depth = 0
        while True:
            token = self._peek()
            if token.type == EOF:
                break
            self._take(container, NodeKind.TOKEN)
            if token.is_punct(*_OPENERS):
                depth += 1
            elif token.is_punct(*_CLOSERS):
                depth -= 1
            if depth <= 0:
                break

    def _parse_jsx(self, container: int) -> int:
        from .markup import MarkupParser

        token = self._peek()
        self._flush_trivia(container)
        parser = MarkupParser(self.tree, self.source, jsx=True)
        handle, end = parser.parse_jsx_element(container, token.start, self.lexer.end)
        self._reseat(end)
        return handle
