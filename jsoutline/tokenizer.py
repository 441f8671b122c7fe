"""
jsoutline - Tokenizer
Splits script source into line-scoped tokens for the parser.

No classification happens here: strings, regular expressions and comments are
recognized later by the parser from sequences of single-character tokens.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


# Characters that end a name token (besides whitespace)
DELIMITERS = "-=#!$%&~;:,<>^`´/.+*\\(){}[]'\"?|"

_NAME_START = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_")

_TOKEN_BEGIN_RE = re.compile(r'\S')
_TOKEN_END_RE   = re.compile(r'\s|[' + re.escape(DELIMITERS) + r']')


@dataclass
class Token:
    text: str
    line: int
    pos_start: int
    pos_end: int          # inclusive
    is_name: bool = False

    def is_char(self, ch: str) -> bool:
        return self.text == ch

    def adjacent_to(self, other: "Token") -> bool:
        """True if ``other`` follows this token directly, without whitespace."""
        return other.line == self.line and other.pos_start == self.pos_end + 1

    @staticmethod
    def whitespace_between(first: Optional["Token"], second: Optional["Token"]) -> str:
        """
        Whitespace that separates two tokens in the document.

        Empty exactly when the tokens are adjacent. Spaces before a line break
        are dropped; the result is only used to rebuild readable node text.
        """
        if first is None or second is None:
            return ""
        new_lines = second.line - first.line
        if new_lines > 0:
            return "\n" * new_lines + " " * second.pos_start
        return " " * max(0, second.pos_start - first.pos_end - 1)

    def __repr__(self):
        return (f"Token({self.text!r}, line={self.line}, "
                f"cols={self.pos_start}-{self.pos_end}{', name' if self.is_name else ''})")


def tokenize(source: str) -> List[Token]:
    """
    Convert script source into a list of Tokens.

    Lines are numbered from 1, columns from 0. Never raises: every
    non-whitespace character ends up in some token.
    """
    tokens: List[Token] = []
    for line_index, line in enumerate(source.split('\n')):
        pos = 0
        while True:
            m = _TOKEN_BEGIN_RE.search(line, pos)
            if not m:
                break
            start = m.start()

            # Only words beginning with a letter, digit or '_' are concatenated
            if line[start].lower() in _NAME_START:
                end_match = _TOKEN_END_RE.search(line, start + 1)
                end = end_match.start() if end_match else len(line)
                is_name = True
            else:
                end = start + 1
                is_name = False

            tokens.append(Token(line[start:end], line_index + 1, start, end - 1, is_name))
            pos = end

    return tokens
