"""
jsoutline - Script Parser
Turns the token stream into a list of top-level code nodes.

There is no grammar: each production recognizes one construct (comment,
string/regex, bracket group, function, block, statement) and returns a
ParseResult with its node, or None if the construct does not start at the
cursor. All productions share one ErrorState; the first error recorded in a
pass is the one reported, and the tree built so far is always kept.
"""

import logging
from typing import Callable, List, NamedTuple, Optional, Tuple

from .config import ParserOptions
from .errors import ErrorKind, ErrorState
from .nodes import (
    ArgumentNode, BlockNode, BracketedNode, CodeNode, CommentNode,
    FunctionCallNode, FunctionNode, StatementNode, StringNode, UnknownNode,
)
from .tokenizer import Token

logger = logging.getLogger(__name__)

KEYWORDS = frozenset({
    'null', 'true', 'false', 'case', 'catch', 'default', 'finally', 'for',
    'instanceof', 'new', 'var', 'continue', 'function', 'return', 'void',
    'delete', 'if', 'this', 'do', 'while', 'else', 'in', 'switch', 'throw',
    'try', 'typeof', 'with',
})

# A '/' directly after one of these starts a regular expression
REGEX_PRECEDING_CHARS = frozenset("=(:?")


def is_keyword(text: str) -> bool:
    return text.lower() in KEYWORDS


class ParseResult(NamedTuple):
    node: Optional[CodeNode]
    error: ErrorState


class Parser:
    def __init__(self, tokens: List[Token], options: Optional[ParserOptions] = None,
                 error: Optional[ErrorState] = None):
        self._tokens = tokens
        self._pos = 0
        self._last: Optional[Token] = None
        self._options = options or ParserOptions()
        self._error = error if error is not None else ErrorState()
        self._depth = 0   # open brackets and blocks around the cursor

    @property
    def error(self) -> ErrorState:
        return self._error

    # ------------------------------------------------------------------ helpers

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _peek(self, offset: int = 0) -> Optional[Token]:
        index = self._pos + offset
        if 0 <= index < len(self._tokens):
            return self._tokens[index]
        return None

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._last = tok
        self._pos += 1
        return tok

    def _rewind(self, pos: int) -> None:
        self._pos = pos
        self._last = self._tokens[pos - 1] if pos > 0 else None

    def _whitespace_since_last(self) -> str:
        return Token.whitespace_between(self._last, self._peek())

    def _result(self, node: Optional[CodeNode]) -> ParseResult:
        return ParseResult(node, self._error)

    def _fail(self, kind: ErrorKind, message: str, line: int = -1, column: int = 0) -> ParseResult:
        self._error.set(kind, message, line, column)
        return ParseResult(None, self._error)

    def _end_of_input(self) -> ParseResult:
        if self._last is None:
            return self._fail(ErrorKind.UNEXPECTED_END, "Unexpected end of file.")
        return self._fail(ErrorKind.UNEXPECTED_END, "Unexpected end of file.",
                          self._last.line, self._last.pos_end)

    def _first_of(self, *productions: Callable[[], ParseResult], gated: bool = False) -> ParseResult:
        """
        Run productions in order and return the first result with a node.

        With ``gated``, everything but comments is skipped once an error is
        set, so one real failure does not cascade into follow-up errors.
        """
        for production in productions:
            if gated and self._error.has_error and production != self._parse_comment:
                continue
            result = production()
            if result.node is not None:
                return result
        return self._result(None)

    def _nested(self, begin: Token, body: Callable[[Token], ParseResult]) -> ParseResult:
        """
        Run ``body`` for the bracket or block opened by ``begin`` one level
        deeper. Past ``max_nesting_depth`` the opener is left unconsumed and
        an error is recorded instead.
        """
        if self._depth >= self._options.max_nesting_depth:
            return self._fail(ErrorKind.NESTING_TOO_DEEP,
                              f"Nesting deeper than {self._options.max_nesting_depth} levels.",
                              begin.line, begin.pos_start)
        self._depth += 1
        try:
            return body(begin)
        finally:
            self._depth -= 1

    def _report_lockup(self, node: CodeNode) -> None:
        logger.warning("Parser did not advance at line %d, column %d (%s)",
                       node.line, node.column, type(node).__name__)
        self._error.set(ErrorKind.INTERNAL, "Internal JavaScript parser error",
                        node.line, node.column)

    # ------------------------------------------------------------------ public

    def parse(self) -> List[CodeNode]:
        nodes: List[CodeNode] = []
        while not self._at_end():
            start = self._pos
            result = self._first_of(
                self._parse_comment, self._parse_string, self._parse_bracketed,
                self._parse_function, self._parse_block, self._parse_statement,
                gated=True,
            )
            if result.node is not None:
                if self._pos == start:
                    self._report_lockup(result.node)
                    break
                nodes.append(result.node)
            elif not self._at_end() and self._pos == start:
                self._advance()   # nothing starts here, skip the token
        return nodes

    # ------------------------------------------------------------------ comments & strings

    def _parse_comment(self) -> ParseResult:
        first, marker = self._peek(), self._peek(1)
        if (first is None or marker is None or not first.is_char('/')
                or not first.adjacent_to(marker)):
            return self._result(None)

        if marker.is_char('/'):
            self._advance()
            self._advance()
            text = ""
            while not self._at_end() and self._peek().line == first.line:
                text += self._whitespace_since_last()
                text += self._advance().text
            return self._result(CommentNode(
                text=text.strip(), line=first.line, column=first.pos_start,
                end_line=self._last.line, column_end=self._last.pos_end))

        if marker.is_char('*'):
            self._advance()
            self._advance()
            text = ""
            while not self._at_end():
                tok, after = self._peek(), self._peek(1)
                if (tok.is_char('*') and after is not None and after.is_char('/')
                        and tok.adjacent_to(after)):
                    self._advance()
                    self._advance()
                    return self._result(CommentNode(
                        text=text.strip(), line=first.line, column=first.pos_start,
                        end_line=self._last.line, column_end=self._last.pos_end,
                        block_style=True))
                text += self._whitespace_since_last()
                text += self._advance().text
            return self._fail(ErrorKind.UNCLOSED_COMMENT, "Unclosed multiline comment.",
                              self._last.line, self._last.pos_end)

        return self._result(None)

    def _regex_allowed(self) -> bool:
        """
        Division/regex heuristic: a '/' starts a regular expression only as
        the very first token or right after '=', '(', ':' or '?'.
        """
        if self._pos == 0:
            return True
        return self._tokens[self._pos - 1].text in REGEX_PRECEDING_CHARS

    def _parse_string(self) -> ParseResult:
        begin = self._peek()
        if begin is None:
            return self._result(None)
        if begin.is_char('/'):
            if not self._regex_allowed():
                return self._result(None)
        elif not (begin.is_char('"') or begin.is_char("'")):
            return self._result(None)

        delimiter = begin.text
        self._advance()
        text, escaped = "", False
        while not self._at_end():
            tok = self._peek()
            if tok.line != begin.line:
                break
            text += self._whitespace_since_last()
            if tok.is_char(delimiter) and not escaped:
                self._advance()
                return self._result(StringNode(
                    text=text, line=begin.line, column=begin.pos_start,
                    column_end=tok.pos_end, delimiter=delimiter))
            escaped = tok.is_char('\\') and not escaped
            text += tok.text
            self._advance()

        if delimiter == '/':
            return self._fail(ErrorKind.UNCLOSED_REGEX,
                              "Unclosed regular expression, missing / at end.",
                              self._last.line, self._last.pos_end)
        return self._fail(ErrorKind.UNCLOSED_STRING,
                          f"Unclosed string, missing {delimiter} at end.",
                          self._last.line, self._last.pos_end)

    # ------------------------------------------------------------------ brackets

    def _parse_bracketed(self) -> ParseResult:
        begin = self._peek()
        if begin is None or not (begin.is_char('(') or begin.is_char('[')):
            return self._result(None)
        return self._nested(begin, self._read_bracketed)

    def _read_bracketed(self, begin: Token) -> ParseResult:
        closing = ')' if begin.is_char('(') else ']'
        self._advance()

        children: List[CodeNode] = []
        fragment: List[Token] = []
        text = ""
        while not self._at_end():
            tok = self._peek()
            ws = self._whitespace_since_last()
            if tok.is_char(closing):
                _flush_fragment(fragment, children)
                text += ws
                self._advance()
                return self._result(BracketedNode(
                    text=text, line=begin.line, column=begin.pos_start,
                    end_line=tok.line, column_end=tok.pos_end,
                    children=children, bracket=begin.text))
            if tok.is_char('}'):
                break

            result = self._first_of(self._parse_comment, self._parse_string,
                                    self._parse_bracketed, self._parse_block,
                                    self._parse_function)
            if result.node is not None:
                _flush_fragment(fragment, children)
                text += ws + result.node.to_string()
                children.append(result.node)
                continue

            tok = self._peek()
            if tok is None:
                break
            text += self._whitespace_since_last() + tok.text
            if fragment and fragment[-1].line != tok.line:
                _flush_fragment(fragment, children)
            if tok.is_char(','):
                _flush_fragment(fragment, children)
                children.append(UnknownNode(text=',', line=tok.line, column=tok.pos_start,
                                            column_end=tok.pos_end))
            else:
                fragment.append(tok)
            self._advance()

        return self._fail(ErrorKind.UNCLOSED_BRACKET,
                          f"Unclosed bracket, expected '{closing}'.",
                          begin.line, begin.pos_end)

    # ------------------------------------------------------------------ functions

    def _bound_function_name(self) -> Optional[Tuple[Token, int]]:
        """
        Match 'var name = function', 'name = function' or 'name: function'
        at the cursor without moving it. Returns the name token and the number
        of tokens up to and including 'function'.
        """
        first = self._peek()
        if first.text == 'var':
            name, assign, keyword, length = self._peek(1), self._peek(2), self._peek(3), 4
            operators = ('=',)
        else:
            name, assign, keyword, length = first, self._peek(1), self._peek(2), 3
            operators = ('=', ':')
        if name is None or not name.is_name or is_keyword(name.text):
            return None
        if assign is None or assign.text not in operators:
            return None
        if keyword is None or keyword.text != 'function':
            return None
        return name, length

    def _parse_function(self) -> ParseResult:
        first = self._peek()
        if first is None or not first.is_name:
            return self._result(None)
        start = self._pos

        name: Optional[str] = None
        anonymous = False
        if first.text == 'function':
            self._advance()
        else:
            bound = self._bound_function_name()
            if bound is None:
                return self._result(None)
            name_token, length = bound
            name, anonymous = name_token.text, True
            for _ in range(length):
                self._advance()

        tok = self._peek()
        if tok is not None and tok.is_name:
            # 'var f = function g(...)' keeps the bound name
            if name is None:
                name = tok.text
            self._advance()
            tok = self._peek()
        if tok is None:
            result = self._end_of_input()
            self._rewind(start)
            return result
        if not tok.is_char('('):
            self._fail(ErrorKind.EXPECTED_PAREN, "Expected '('.", tok.line, tok.pos_start)
            self._rewind(start)
            return self._result(None)
        self._advance()

        arguments = self._parse_arguments()

        definition: Optional[BlockNode] = None
        if self._at_end():
            self._end_of_input()
        else:
            self._advance()   # ')' or the token that broke the argument list
            definition = self._parse_block().node
            if definition is None:
                self._fail(ErrorKind.MISSING_BODY, "Function definition is missing.",
                           self._last.line, self._last.pos_start)

        return self._result(FunctionNode(
            name=name, line=first.line, column=first.pos_start,
            end_line=self._last.line, column_end=self._last.pos_end,
            arguments=arguments, definition=definition,
            anonymous=anonymous or name is None))

    def _parse_arguments(self) -> List[ArgumentNode]:
        """Read names and ',' alternately up to ')'; the cursor stops on the last token read."""
        arguments: List[ArgumentNode] = []
        expect_name, trailing_comma = True, False
        while not self._at_end():
            tok = self._peek()
            if tok.is_char(')'):
                if trailing_comma:
                    self._fail(ErrorKind.EXPECTED_ARGUMENT, "Expected argument or ')'.",
                               tok.line, tok.pos_start)
                break
            if expect_name:
                if not tok.is_name:
                    self._fail(ErrorKind.EXPECTED_ARGUMENT, "Expected argument or ')'.",
                               tok.line, tok.pos_start)
                    break
                arguments.append(ArgumentNode(text=tok.text, line=tok.line,
                                              column=tok.pos_start, column_end=tok.pos_end))
            elif not tok.is_char(','):
                self._fail(ErrorKind.EXPECTED_COMMA, "Expected ',' or ')'.",
                           tok.line, tok.pos_start)
                break
            trailing_comma = tok.is_char(',')
            expect_name = not expect_name
            self._advance()
        return arguments

    # ------------------------------------------------------------------ blocks & statements

    def _parse_block(self) -> ParseResult:
        first = self._peek()
        if first is None or not first.is_char('{'):
            return self._result(None)
        return self._nested(first, self._read_block)

    def _read_block(self, first: Token) -> ParseResult:
        self._advance()

        children: List[CodeNode] = []
        while not self._at_end():
            start = self._pos
            result = self._first_of(self._parse_comment, self._parse_string,
                                    self._parse_bracketed, self._parse_function,
                                    self._parse_block, gated=True)
            if result.node is not None:
                if self._pos == start:
                    self._report_lockup(result.node)
                    break
                children.append(result.node)
                continue

            tok = self._peek()
            if tok is None:
                break
            if tok.is_char('}'):
                self._advance()
                return self._result(BlockNode(
                    line=first.line, column=first.pos_start,
                    end_line=tok.line, column_end=tok.pos_end, children=children))

            result = self._parse_statement(in_block=True)
            if result.node is not None:
                children.append(result.node)
            elif not self._at_end() and self._pos == start:
                self._advance()

        return self._fail(ErrorKind.UNCLOSED_BLOCK,
                          f"Unclosed block, missing '}}'. Block started at line {first.line}.",
                          self._last.line, self._last.pos_end)

    def _parse_statement(self, in_block: bool = False) -> ParseResult:
        first = self._peek()
        if first is None:
            return self._result(None)

        text = ""
        children: List[CodeNode] = []
        previous: Optional[Token] = None   # last token consumed by this statement
        call_tokens: List[Token] = []       # plain tokens since the last child node
        while not self._at_end():
            tok = self._peek()
            ws = Token.whitespace_between(previous, tok)
            if tok.is_char(';'):
                self._advance()
                return self._statement(text + ws + ';', first, children)
            if tok.is_char('}'):
                self._check_missing_semicolon(previous)
                if in_block:
                    # The '}' closes the enclosing block
                    if previous is None:
                        return self._result(None)
                    return self._statement(text, first, children)
                self._advance()
                return self._statement(text + ws + '}', first, children)

            node = self._first_of(self._parse_comment, self._parse_string).node
            if node is None:
                node = self._parse_bracketed().node
                if node is not None:
                    text += ws + node.to_string()
                    node = self._as_function_call(call_tokens, node)
            else:
                text += ws + node.to_string()
            if node is not None:
                children.append(node)
                previous = self._last
                call_tokens = []
                continue

            node = self._first_of(self._parse_block, self._parse_function).node
            if node is not None:
                text += ws + node.to_string()
                children.append(node)
                if not self._at_end() and self._peek().is_char(';'):
                    self._advance()
                    text += ';'
                return self._statement(text, first, children)

            tok = self._peek()
            if tok is None:
                break
            text += Token.whitespace_between(previous, tok) + tok.text
            previous = self._advance()
            call_tokens.append(previous)

        result = self._end_of_input()
        if previous is None:
            return result
        # Keep what was read of the unterminated statement
        return self._statement(text, first, children)

    def _statement(self, text: str, first: Token, children: List[CodeNode]) -> ParseResult:
        return self._result(StatementNode(
            text=text, line=first.line, column=first.pos_start,
            end_line=self._last.line, column_end=self._last.pos_end, children=children))

    def _as_function_call(self, preceding: List[Token], bracketed: CodeNode) -> CodeNode:
        """
        Wrap a '(...)' group that directly follows 'object.function' or a
        plain non-keyword name into a FunctionCallNode.
        """
        if bracketed.bracket != '(' or not preceding or not preceding[-1].is_name:
            return bracketed
        member = preceding[-1]
        if len(preceding) >= 2 and preceding[-2].is_char('.'):
            if len(preceding) < 3 or not preceding[-3].is_name:
                return bracketed
            if len(preceding) > 3 and preceding[-4].is_char('.'):
                return bracketed   # longer member chain, eg. 'a.b.c(...)'
            receiver = preceding[-3]
            return FunctionCallNode(receiver=receiver.text, member=member.text,
                                    line=receiver.line, column=receiver.pos_start,
                                    arguments=bracketed)
        if is_keyword(member.text):
            return bracketed
        return FunctionCallNode(member=member.text, line=member.line,
                                column=member.pos_start, arguments=bracketed)

    def _check_missing_semicolon(self, previous: Optional[Token]) -> None:
        """Optional check: a statement runs into '}' without a terminating ';'."""
        if self._options.detect_missing_semicolon and previous is not None:
            self._error.set(ErrorKind.MISSING_SEMICOLON,
                            "Missing ';' at the end of the statement.",
                            previous.line, previous.pos_end)


def _flush_fragment(fragment: List[Token], children: List[CodeNode]) -> None:
    """Move the collected tokens into one UnknownNode."""
    if not fragment:
        return
    text = fragment[0].text
    for prev, tok in zip(fragment, fragment[1:]):
        text += Token.whitespace_between(prev, tok) + tok.text
    children.append(UnknownNode(text=text, line=fragment[0].line,
                                column=fragment[0].pos_start,
                                column_end=fragment[-1].pos_end))
    fragment.clear()
