"""Tree-sitter powered scanner for module-level atom definitions."""

from __future__ import annotations

from typing import List, Optional

from ..logging import get_logger
from ..models import AtomDefinition, SourcePosition

try:  # pragma: no cover - optional dependency
    import tree_sitter_typescript
    from tree_sitter import Language, Node, Parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    tree_sitter_typescript = None  # type: ignore[assignment]
    Language = Node = Parser = None  # type: ignore[assignment,misc]
    TREE_SITTER_AVAILABLE = False

logger = get_logger("scanners.atoms")

ATOM_FACTORIES = frozenset(
    {"atom", "atomWithStorage", "atomWithReset", "atomWithDefault", "atomWithReducer"}
)
_FUNCTION_NODES = frozenset({"arrow_function", "function_expression", "function"})
_DEFAULT_GETTER = "get"


class AtomScanner:
    """Finds ``const x = atom(...)`` declarations in TS/TSX source.

    A declaration is derived when the factory's first argument is a function;
    its dependencies are the identifiers passed to the getter inside it.
    """

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self._enabled = TREE_SITTER_AVAILABLE if enabled is None else enabled
        self._parser: Optional[Parser] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def scan(self, source: str) -> List[AtomDefinition]:
        parser = self._get_parser()
        if parser is None:
            logger.debug("tree-sitter unavailable; skipping atom scan")
            return []
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        atoms: List[AtomDefinition] = []
        seen = set()
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "variable_declarator":
                atom = self._atom_from_declarator(node, source_bytes)
                if atom is not None and atom.name not in seen:
                    atoms.append(atom)
                    seen.add(atom.name)
            stack.extend(reversed(node.named_children))
        logger.debug("Scanned %d atom definitions", len(atoms))
        return atoms

    def _get_parser(self) -> Optional[Parser]:
        if not self._enabled:
            return None
        if self._parser is None:
            self._parser = Parser(Language(tree_sitter_typescript.language_tsx()))
        return self._parser

    def _atom_from_declarator(self, declarator: Node, source_bytes: bytes) -> Optional[AtomDefinition]:
        name_node = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if name_node is None or value is None or name_node.type != "identifier":
            return None
        if value.type != "call_expression":
            return None
        callee = value.child_by_field_name("function")
        if callee is None or _text(callee, source_bytes) not in ATOM_FACTORIES:
            return None
        arguments = value.child_by_field_name("arguments")
        first = arguments.named_children[0] if arguments is not None and arguments.named_children else None
        derived = first is not None and first.type in _FUNCTION_NODES
        dependencies = _getter_dependencies(first, source_bytes) if derived else []
        row, column = name_node.start_point[0], name_node.start_point[1]
        return AtomDefinition(
            name=_text(name_node, source_bytes),
            derived=derived,
            dependencies=tuple(dependencies),
            position=SourcePosition(line=row + 1, column=column),
        )


def scan_atom_definitions(source: str) -> List[AtomDefinition]:
    """Return atom definitions found in ``source``; empty when tree-sitter is missing."""
    return AtomScanner().scan(source)


def _text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _getter_name(function: Node, source_bytes: bytes) -> str:
    single = function.child_by_field_name("parameter")
    if single is not None:
        return _text(single, source_bytes)
    parameters = function.child_by_field_name("parameters")
    if parameters is not None and parameters.named_children:
        first = parameters.named_children[0]
        pattern = first.child_by_field_name("pattern") or first
        if pattern.type == "identifier":
            return _text(pattern, source_bytes)
    return _DEFAULT_GETTER


def _getter_dependencies(function: Node, source_bytes: bytes) -> List[str]:
    """Identifiers passed to the getter anywhere inside ``function``'s body."""
    getter = _getter_name(function, source_bytes)
    body = function.child_by_field_name("body")
    if body is None:
        return []
    dependencies: List[str] = []
    stack = [body]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            callee = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if (
                callee is not None
                and arguments is not None
                and _text(callee, source_bytes) == getter
                and arguments.named_children
                and arguments.named_children[0].type == "identifier"
            ):
                name = _text(arguments.named_children[0], source_bytes)
                if name not in dependencies:
                    dependencies.append(name)
        stack.extend(reversed(node.named_children))
    return dependencies


__all__ = ["ATOM_FACTORIES", "AtomScanner", "TREE_SITTER_AVAILABLE", "scan_atom_definitions"]
