"""
jsoutline - outline parser for service provider scripts.
"""

from .config import ParserOptions
from .errors import ErrorKind, ErrorState, ScriptSyntaxError
from .model import OutlineModel
from .nodes import (
    ArgumentNode, BlockNode, BracketedNode, CodeNode, CommentNode, EmptyNode,
    FunctionCallNode, FunctionNode, NodeType, StatementNode, StringNode,
    UnknownNode,
)
from .outline import ParseOutcome, nodes_to_json, parse_script
from .parser import Parser, ParseResult
from .tokenizer import Token, tokenize

__version__ = "0.1.0"
