"""
jsoutline - Validator
Whole-program checks over a finished parse:
  - Calls 'object.method(...)' on a known object use a known method name
  - No two top-level functions share a name
Both checks only report through the sticky ErrorState, so they never replace
an error the parser already recorded, and never discard the tree.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from .errors import ErrorKind, ErrorState
from .nodes import CodeNode, FunctionCallNode, FunctionNode


class Validator:
    def __init__(self, error: ErrorState,
                 known_members: Optional[Mapping[str, Iterable[str]]] = None):
        self._error = error
        self._known_members: Dict[str, List[str]] = {
            obj: list(methods) for obj, methods in (known_members or {}).items()
        }

    def validate(self, nodes: List[CodeNode]) -> ErrorState:
        for node in nodes:
            self._visit(node)
        self.check_duplicate_functions(nodes)
        return self._error

    # ------------------------------------------------------------------ visitor

    def _visit(self, node: CodeNode) -> None:
        method = f"_visit_{type(node).__name__}"
        visitor = getattr(self, method, self._visit_generic)
        visitor(node)

    def _visit_generic(self, node: CodeNode) -> None:
        for child in node.children:
            self._visit(child)

    def _visit_FunctionCallNode(self, node: FunctionCallNode) -> None:
        if node.receiver:
            self.check_member(node.receiver, node.member, node.line, node.column)
        self._visit_generic(node)

    # ------------------------------------------------------------------ checks

    def check_member(self, receiver: str, member: str, line: int, column: int) -> bool:
        """Returns False (and records an error) if ``receiver`` is known but lacks ``member``."""
        methods = self._known_members.get(receiver)
        if methods is None or member in methods:
            return True
        self._error.set(
            ErrorKind.UNKNOWN_MEMBER,
            f"The object '{receiver}' has no method '{member}' "
            f"(available methods: {', '.join(methods)}).",
            line, column,
        )
        return False

    def check_duplicate_functions(self, nodes: List[CodeNode]) -> None:
        # Keyed by name only, arguments are ignored
        seen: Dict[str, FunctionNode] = {}
        for node in nodes:
            if not isinstance(node, FunctionNode) or node.name is None:
                continue
            key = node.name + "()"
            previous = seen.get(key)
            if previous is None:
                seen[key] = node
                continue
            self._error.set(
                ErrorKind.DUPLICATE_FUNCTION,
                f"Multiple definitions of function '{node.name}', "
                f"previously defined at line {previous.line}",
                node.line, node.column, previous.line,
            )
