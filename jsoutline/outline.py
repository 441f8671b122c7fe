"""
jsoutline - Parse Orchestrator
Runs tokenizer, parser and validator in sequence and returns the node list
together with the pass's error state.
"""

import dataclasses
import json
import logging
from typing import Any, List, NamedTuple, Optional

from .config import ParserOptions
from .errors import ErrorState
from .nodes import CodeNode
from .parser import Parser
from .tokenizer import tokenize
from .validator import Validator

logger = logging.getLogger(__name__)


class ParseOutcome(NamedTuple):
    nodes: List[CodeNode]
    error: ErrorState


def parse_script(
    source: str,
    options: Optional[ParserOptions] = None,
    strict: bool = False,
) -> ParseOutcome:
    """
    Parse script source into top-level code nodes.

    Parameters
    ----------
    source   : the whole document text
    options  : optional checks and the known-member table
    strict   : raise instead of returning a set error state

    Returns
    -------
    ParseOutcome(nodes, error). ``nodes`` holds whatever could be parsed,
    also when ``error.has_error`` is set.

    Raises
    ------
    ScriptSyntaxError if ``strict`` and an error was recorded
    """
    options = options or ParserOptions()
    error = ErrorState()

    # ── Phase 1: Tokenizing ───────────────────────────────────────────────────
    tokens = tokenize(source)
    logger.debug("Tokenized %d tokens", len(tokens))

    # ── Phase 2: Parsing ──────────────────────────────────────────────────────
    nodes = Parser(tokens, options=options, error=error).parse()
    logger.debug("Parsed %d top-level nodes", len(nodes))
    if error.has_error:
        logger.debug("Syntax error at line %d: %s", error.line, error.message)

    # ── Phase 3: Validation ───────────────────────────────────────────────────
    Validator(error, options.known_members).validate(nodes)

    if strict:
        error.raise_if_error()
    return ParseOutcome(nodes, error)


# ── Serialization ─────────────────────────────────────────────────────────────

# Node fields that repeat what ``children`` already holds
_CHILD_ALIASES = {"arguments", "definition", "children"}


def nodes_to_json(nodes: List[CodeNode], indent: int = 2) -> str:
    return json.dumps([node_to_dict(node) for node in nodes], indent=indent)


def node_to_dict(node: Optional[CodeNode]) -> Any:
    if node is None:
        return None
    d = {"_type": type(node).__name__, "id": node.id}
    for f in dataclasses.fields(node):
        if f.name.startswith("_") or f.name in _CHILD_ALIASES:
            continue
        d[f.name] = getattr(node, f.name)
    d["children"] = [node_to_dict(child) for child in node.children]
    return d


def outcome_to_dict(outcome: ParseOutcome) -> dict:
    return {
        "nodes": [node_to_dict(node) for node in outcome.nodes],
        "error": outcome.error.to_dict(),
    }
