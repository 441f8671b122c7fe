"""
jsoutline - Code Node Definitions
The tree produced by the parser. Every node kind is one dataclass tagged by a
NodeType flag; children are owned top-down, parents are weak back-references.
"""

import weakref
from dataclasses import dataclass, field
from enum import Flag
from typing import ClassVar, Iterator, List, Optional, Type, TypeVar


class NodeType(Flag):
    NONE          = 0x0000   # placeholder, not associated with code
    BLOCK         = 0x0001
    FUNCTION      = 0x0002
    ARGUMENT      = 0x0004
    STATEMENT     = 0x0008
    COMMENT       = 0x0010
    STRING        = 0x0020
    FUNCTION_CALL = 0x0040
    BRACKETED     = 0x0080
    UNKNOWN       = 0x0100
    ALL           = 0x01FF


ANONYMOUS_NAME = "[anonymous]"

N = TypeVar("N", bound="CodeNode")


@dataclass(eq=False)
class CodeNode:
    """Base class for all code nodes. Lines start at 1, columns at 0 (inclusive end)."""
    node_type: ClassVar[NodeType] = NodeType.NONE

    text: str = ""
    line: int = 0
    column: int = 0
    end_line: int = -1
    column_end: int = 0
    children: List["CodeNode"] = field(default_factory=list, repr=False)
    _parent: Optional[weakref.ReferenceType] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.end_line < self.line:
            self.end_line = self.line
        for child in self.children:
            child._parent = weakref.ref(self)

    # ------------------------------------------------------------------ identity

    @property
    def id(self) -> str:
        """Lookup key for completion and documentation providers."""
        return self.text

    @property
    def parent(self) -> Optional["CodeNode"]:
        return self._parent() if self._parent is not None else None

    @property
    def is_multiline(self) -> bool:
        return self.line != self.end_line

    def to_string(self, short: bool = False) -> str:
        return self.text

    # ------------------------------------------------------------------ navigation

    def is_in_range(self, line: int, column: int = -1) -> bool:
        """Whether ``line`` (and ``column`` unless -1) lies inside this node."""
        if line == self.line and line == self.end_line:
            return column == -1 or self.column <= column <= self.column_end
        if line == self.line:
            return column == -1 or column >= self.column
        if line == self.end_line:
            return column == -1 or column <= self.column_end
        return self.line < line < self.end_line

    def child_from_position(self, line: int, column: int = -1) -> Optional["CodeNode"]:
        """The most specific node at the position, this node itself, or None."""
        for child in self.children:
            if child.is_in_range(line, column):
                return child.child_from_position(line, column)
        return self if self.is_in_range(line, column) else None

    def search_up(self, node_class: Type[N], max_levels: int = -1) -> Optional[N]:
        """This node or the nearest ancestor that is a ``node_class``."""
        node: Optional[CodeNode] = self
        while node is not None:
            if isinstance(node, node_class):
                return node
            if max_levels == 0:
                break
            max_levels -= 1
            node = node.parent
        return None

    def top_level_parent(self) -> "CodeNode":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator["CodeNode"]:
        """Pre-order iteration over this node and all descendants."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(eq=False)
class EmptyNode(CodeNode):
    """Synthetic placeholder, eg. the function count at the top of an outline."""
    node_type: ClassVar[NodeType] = NodeType.NONE
    line: int = -1
    end_line: int = -1

    @property
    def id(self) -> str:
        return ""


@dataclass(eq=False)
class UnknownNode(CodeNode):
    """A fragment the parser does not understand, eg. a ',' in a bracket group."""
    node_type: ClassVar[NodeType] = NodeType.UNKNOWN


@dataclass(eq=False)
class CommentNode(CodeNode):
    """A '//' or '/* */' comment. ``text`` excludes the markers."""
    node_type: ClassVar[NodeType] = NodeType.COMMENT
    block_style: bool = False

    def content(self) -> str:
        return self.text

    def to_string(self, short: bool = False) -> str:
        if self.block_style:
            return "/*" + self.text + "*/"
        return "//" + self.text


@dataclass(eq=False)
class StringNode(CodeNode):
    """A string literal or a regular expression. ``text`` excludes delimiters."""
    node_type: ClassVar[NodeType] = NodeType.STRING
    delimiter: str = '"'

    @property
    def id(self) -> str:
        return "str:" + self.text

    @property
    def is_regex(self) -> bool:
        return self.delimiter == '/'

    def content(self) -> str:
        return self.text

    def to_string(self, short: bool = False) -> str:
        return self.delimiter + self.text + self.delimiter


@dataclass(eq=False)
class StatementNode(CodeNode):
    """A statement the parser has no special node for."""
    node_type: ClassVar[NodeType] = NodeType.STATEMENT


@dataclass(eq=False)
class BracketedNode(CodeNode):
    """Children read inside '(...)' or '[...]'."""
    node_type: ClassVar[NodeType] = NodeType.BRACKETED
    bracket: str = "("

    @property
    def closing_bracket(self) -> str:
        return ")" if self.bracket == "(" else "]"

    def content(self) -> str:
        return self.text

    def to_string(self, short: bool = False) -> str:
        return self.bracket + self.text + self.closing_bracket

    def comma_separated_count(self) -> int:
        return 1 + sum(1 for child in self.children if _is_comma(child))

    def comma_separated(self, pos: int) -> List[CodeNode]:
        """Children of the ``pos``-th comma separated group (commas excluded)."""
        group, current = [], 0
        for child in self.children:
            if _is_comma(child):
                current += 1
                if current > pos:
                    break
                continue
            if current == pos:
                group.append(child)
        return group


def _is_comma(node: CodeNode) -> bool:
    return isinstance(node, UnknownNode) and node.text == ","


@dataclass(eq=False)
class FunctionCallNode(CodeNode):
    """A call like 'object.function(...)', or 'function(...)' without receiver."""
    node_type: ClassVar[NodeType] = NodeType.FUNCTION_CALL
    receiver: str = ""
    member: str = ""
    arguments: Optional[BracketedNode] = None

    def __post_init__(self):
        self.text = f"{self.receiver}.{self.member}" if self.receiver else self.member
        if self.arguments is not None:
            self.children = [self.arguments]
            self.end_line = self.arguments.end_line
            self.column_end = self.arguments.column_end
        super().__post_init__()

    @property
    def id(self) -> str:
        return "call:" + self.text

    def to_string(self, short: bool = False) -> str:
        args = self.arguments.to_string(short) if self.arguments is not None else "()"
        return self.text + args


@dataclass(eq=False)
class BlockNode(CodeNode):
    """A code block enclosed by '{' and '}'."""
    node_type: ClassVar[NodeType] = NodeType.BLOCK

    def content(self) -> str:
        return "".join(child.to_string() + "\n" for child in self.children).strip()

    def to_string(self, short: bool = False) -> str:
        return "{" + "".join(child.to_string(short) + "\n" for child in self.children) + "}"


@dataclass(eq=False)
class ArgumentNode(CodeNode):
    """A formal parameter of a function definition."""
    node_type: ClassVar[NodeType] = NodeType.ARGUMENT

    @property
    def id(self) -> str:
        return "arg:" + self.text


@dataclass(eq=False)
class FunctionNode(CodeNode):
    """
    A function definition.

    ``name`` is None for 'function (...) {...}' expressions. ``anonymous`` is
    also set for function expressions bound to a name ('var f = function').
    ``definition`` is None only if a missing body was already reported.
    """
    node_type: ClassVar[NodeType] = NodeType.FUNCTION
    name: Optional[str] = None
    arguments: List[ArgumentNode] = field(default_factory=list, repr=False)
    definition: Optional[BlockNode] = field(default=None, repr=False)
    anonymous: bool = False

    def __post_init__(self):
        self.text = self.name or ANONYMOUS_NAME
        self.children = list(self.arguments)
        if self.definition is not None:
            self.children.append(self.definition)
            self.end_line = self.definition.end_line
            self.column_end = self.definition.column_end
        super().__post_init__()

    @property
    def id(self) -> str:
        return f"func:{self.text}()"

    def signature(self) -> str:
        if not self.arguments:
            return f"{self.text}()"
        return f"{self.text}( {', '.join(arg.text for arg in self.arguments)} )"

    def to_string(self, short: bool = False) -> str:
        if short or self.definition is None:
            return self.signature()
        return self.signature() + " " + self.definition.to_string()

