"""
jsoutline - Outline Model
Holds the committed top-level node list of one parse and answers the
position and type queries of the editor (outline, navigation, hover).

The first row is always a synthetic EmptyNode whose text summarizes the
function count; it is rebuilt after every mutation.
"""

import logging
from typing import Iterable, List, Optional

from .nodes import CodeNode, EmptyNode, FunctionNode, NodeType

logger = logging.getLogger(__name__)

NODE_TYPE_NAMES = {
    NodeType.NONE:          "(none)",
    NodeType.BLOCK:         "Block",
    NodeType.FUNCTION:      "Function",
    NodeType.ARGUMENT:      "Argument",
    NodeType.STATEMENT:     "Statement",
    NodeType.COMMENT:       "Comment",
    NodeType.STRING:        "String",
    NodeType.FUNCTION_CALL: "Function Call",
    NodeType.BRACKETED:     "Bracketed",
    NodeType.UNKNOWN:       "(unknown)",
}


def placeholder_text(function_count: int) -> str:
    if function_count == 0:
        return "(no functions)"
    if function_count == 1:
        return "1 function:"
    return f"{function_count} functions:"


class OutlineModel:
    def __init__(self, nodes: Optional[Iterable[CodeNode]] = None):
        self._nodes: List[CodeNode] = []
        self._refresh_placeholder()
        if nodes is not None:
            self.set_nodes(nodes)

    # ------------------------------------------------------------------ static helpers

    @staticmethod
    def node_type_name(node_type: NodeType) -> str:
        return NODE_TYPE_NAMES.get(node_type, "(unknown)")

    @staticmethod
    def child_functions(node: CodeNode) -> List[FunctionNode]:
        """Functions defined anywhere below ``node``."""
        return [child for child in node.walk()
                if child is not node and isinstance(child, FunctionNode)]

    # ------------------------------------------------------------------ rows

    @property
    def placeholder(self) -> EmptyNode:
        return self._nodes[0]

    def nodes(self) -> List[CodeNode]:
        """All rows, placeholder first."""
        return list(self._nodes)

    def code_nodes(self) -> List[CodeNode]:
        return self._nodes[1:]

    def row_count(self) -> int:
        return len(self._nodes)

    def node_from_row(self, row: int) -> CodeNode:
        if not 0 <= row < len(self._nodes):
            raise ValueError(f"Row {row} out of range (0..{len(self._nodes) - 1})")
        return self._nodes[row]

    def index_of(self, node: CodeNode) -> int:
        for row, candidate in enumerate(self._nodes):
            if candidate is node:
                return row
        return -1

    def functions(self) -> List[FunctionNode]:
        return [node for node in self._nodes if isinstance(node, FunctionNode)]

    def function_names(self) -> List[str]:
        return [function.text for function in self.functions()]

    # ------------------------------------------------------------------ mutations

    def clear(self) -> None:
        self._nodes = []
        self._refresh_placeholder()

    def set_nodes(self, nodes: Iterable[CodeNode]) -> None:
        """Replace all rows with the top-level nodes of a new parse."""
        self._nodes = []
        self.append_nodes(nodes)

    def append_nodes(self, nodes: Iterable[CodeNode]) -> None:
        new_nodes = [node for node in nodes if not isinstance(node, EmptyNode)]
        for node in new_nodes:
            if node.parent is not None:
                logger.warning("Top-level node at line %d has a parent", node.line)
        combined = self.code_nodes() + new_nodes
        # Stable, so nodes starting on the same line keep their order
        combined.sort(key=lambda node: node.line)
        self._nodes = combined
        self._refresh_placeholder()

    def remove_rows(self, row: int, count: int) -> None:
        if row < 0 or count < 0 or row + count > len(self._nodes):
            raise ValueError(f"Cannot remove rows {row}..{row + count - 1} "
                             f"of {len(self._nodes)}")
        del self._nodes[row:row + count]
        self._refresh_placeholder()

    def _refresh_placeholder(self) -> None:
        code = [node for node in self._nodes if not isinstance(node, EmptyNode)]
        function_count = sum(1 for node in code if isinstance(node, FunctionNode))
        self._nodes = [EmptyNode(text=placeholder_text(function_count))] + code
        logger.debug("Outline holds %d nodes, %d functions", len(code), function_count)

    # ------------------------------------------------------------------ queries

    def node_at_position(self, line: int, column: int = -1,
                         descend: bool = False) -> Optional[CodeNode]:
        """
        The top-level node containing the position, or with ``descend`` the
        most specific node below it. None if no node contains the position.
        """
        for node in self.code_nodes():
            if node.is_in_range(line, column):
                return node.child_from_position(line, column) if descend else node
        return None

    def id_at_position(self, line: int, column: int) -> Optional[str]:
        """Id of the most specific node starting on ``line`` at the position, for hover text."""
        node = self.node_at_position(line, column, descend=True)
        if node is None or node.line != line or not node.id:
            return None
        return node.id

    def node_before_line(self, line: int, node_types: NodeType = NodeType.ALL) -> CodeNode:
        """
        The closest matching node starting before ``line``, or one containing
        it. Falls back to the placeholder.
        """
        found: Optional[CodeNode] = None
        for node in self._nodes:
            if not _matches(node, node_types):
                continue
            if node.line < line:
                found = node
            elif node.line > line:
                break
            if node.line <= line <= node.end_line:
                return node
        return found if found is not None else self.placeholder

    def node_after_line(self, line: int, node_types: NodeType = NodeType.ALL) -> CodeNode:
        """
        The closest matching node starting after ``line``, or one containing
        it. Falls back to the placeholder.
        """
        found: Optional[CodeNode] = None
        for node in reversed(self._nodes):
            if not _matches(node, node_types):
                continue
            if node.line > line:
                found = node
            elif node.line < line:
                break
            if node.line <= line <= node.end_line:
                return node
        return found if found is not None else self.placeholder


def _matches(node: CodeNode, node_types: NodeType) -> bool:
    return not isinstance(node, EmptyNode) and node.node_type in node_types
