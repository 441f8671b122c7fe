"""
jsoutline - Parser Options
Switches for the optional checks. The defaults reproduce the plain parser.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping


@dataclass
class ParserOptions:
    # Report statements that run into a '}' without a terminating ';'
    detect_missing_semicolon: bool = False
    # Known objects and their method names, owned by the completion provider
    known_members: Mapping[str, Iterable[str]] = field(default_factory=dict)
    # Deepest accepted nesting of brackets and blocks
    max_nesting_depth: int = 100
