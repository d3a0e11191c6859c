"""Render-tree walk producing element nodes and the output subgraph tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import (
    EXTERNAL_OUTPUT,
    Conditional,
    DFDNode,
    Element,
    Iteration,
    RenderNode,
    Subgraph,
)
from ..processors.session import AnalysisSession
from .index import resolve_scope

logger = get_logger("assembler.subgraphs")

ROOT_LABEL = "JSX Output"
LOOP_LABEL = "{loop}"
EXPORTED_LABEL = "exported handlers"

KIND_OUTPUT = "output"
KIND_CONDITIONAL = "conditional"
KIND_LOOP = "loop"
KIND_EXPORTED = "exported-handlers"

CONTROLS_VISIBILITY = "controls visibility"
ITERATES_OVER = "iterates over"


@dataclass
class PlacedElement:
    """An element that received a node, with loop item names in scope."""

    element: Element
    node: DFDNode
    scope: Dict[str, str] = field(default_factory=dict)


@dataclass
class ControlFlow:
    """Variables deciding whether (or how often) a subgraph renders."""

    subgraph_id: str
    variables: List[str]
    label: str


@dataclass
class OutputLayout:
    root: Subgraph
    elements: List[PlacedElement] = field(default_factory=list)
    controls: List[ControlFlow] = field(default_factory=list)


def condition_label(expression: str, negate: bool = False) -> str:
    """``{expr}`` for a true branch, ``{!expr}`` for the opposite branch."""
    expr = expression.strip()
    if negate:
        expr = expr[1:] if expr.startswith("!") and not expr.startswith("!=") else f"!{expr}"
    return f"{{{expr}}}"


def has_bound_content(nodes: Sequence[RenderNode]) -> bool:
    """Return True when any element below ``nodes`` carries a binding or any block is controlled."""
    stack: List[RenderNode] = list(nodes)
    while stack:
        current = stack.pop()
        if isinstance(current, Element):
            if current.has_bindings:
                return True
            stack.extend(current.children)
        elif isinstance(current, Conditional):
            return True
        elif isinstance(current, Iteration):
            return True
    return False


def _iteration_variables(iteration: Iteration) -> List[str]:
    return list(iteration.variables) or [iteration.collection]


# Stack frame: render node, enclosing subgraph id, enclosing subgraph kind,
# include the element even without bindings, loop item scope.
_Frame = Tuple[RenderNode, str, str, bool, Dict[str, str]]


class OutputWalker:
    """Walks the render tree with an explicit stack.

    Elements without bindings are transparent: their children are placed in
    the enclosing subgraph. An iteration whose nearest enclosing subgraph is
    already a loop joins that loop instead of nesting a new one; a conditional
    in between starts a fresh scope.
    """

    def __init__(self, session: AnalysisSession) -> None:
        self.session = session
        self.graph = session.graph

    def walk(
        self, output: Sequence[RenderNode], exported: Sequence[DFDNode] = ()
    ) -> OutputLayout:
        """Lay out ``output`` under the root; ``exported`` handler nodes get their own group."""
        root = self._subgraph(ROOT_LABEL, None, KIND_OUTPUT)
        layout = OutputLayout(root=root)
        stack: List[_Frame] = []
        self._push(stack, output, root.id, KIND_OUTPUT, False, {})
        while stack:
            node, parent_id, parent_kind, force, scope = stack.pop()
            if isinstance(node, Element):
                self._place_element(layout, node, parent_id, parent_kind, force, scope, stack)
            elif isinstance(node, Conditional):
                self._open_conditional(layout, node, parent_id, scope, stack)
            elif isinstance(node, Iteration):
                self._open_loop(layout, node, parent_id, parent_kind, scope, stack)
        if exported:
            group = self._subgraph(EXPORTED_LABEL, root.id, KIND_EXPORTED)
            for handler in exported:
                group.members.append(handler.id)
                handler.metadata["subgraph"] = group.id
        self._prune(layout)
        return layout

    def _push(
        self,
        stack: List[_Frame],
        nodes: Sequence[RenderNode],
        parent_id: str,
        parent_kind: str,
        force: bool,
        scope: Dict[str, str],
    ) -> None:
        for node in reversed(nodes):
            stack.append((node, parent_id, parent_kind, force, scope))

    def _place_element(
        self,
        layout: OutputLayout,
        element: Element,
        parent_id: str,
        parent_kind: str,
        force: bool,
        scope: Dict[str, str],
        stack: List[_Frame],
    ) -> None:
        if element.has_bindings or force:
            node = DFDNode(
                id=self.session.next_id("jsx"),
                label=f"<{element.tag}>",
                type=EXTERNAL_OUTPUT,
                position=element.position,
                metadata={"tag": element.tag, "subgraph": parent_id},
            )
            self.graph.add_node(node)
            self.graph.subgraph(parent_id).members.append(node.id)
            layout.elements.append(PlacedElement(element=element, node=node, scope=scope))
        self._push(stack, element.children, parent_id, parent_kind, False, scope)

    def _open_conditional(
        self,
        layout: OutputLayout,
        conditional: Conditional,
        parent_id: str,
        scope: Dict[str, str],
        stack: List[_Frame],
    ) -> None:
        variables = [resolve_scope(name, scope) for name in conditional.variables]
        # Frames are popped in reverse, so the false branch is pushed first.
        branches = []
        for negate, nodes in ((False, conditional.when_true), (True, conditional.when_false)):
            if not nodes:
                continue
            subgraph = self._subgraph(
                condition_label(conditional.expression, negate),
                parent_id,
                KIND_CONDITIONAL,
                expression=conditional.expression,
                negated=negate,
            )
            layout.controls.append(ControlFlow(subgraph.id, variables, CONTROLS_VISIBILITY))
            branches.append((subgraph.id, nodes))
        for subgraph_id, nodes in reversed(branches):
            force = not has_bound_content(nodes)
            self._push(stack, nodes, subgraph_id, KIND_CONDITIONAL, force, scope)

    def _open_loop(
        self,
        layout: OutputLayout,
        iteration: Iteration,
        parent_id: str,
        parent_kind: str,
        scope: Dict[str, str],
        stack: List[_Frame],
    ) -> None:
        variables = [resolve_scope(name, scope) for name in _iteration_variables(iteration)]
        if parent_kind == KIND_LOOP:
            loop_id = parent_id
            self.graph.subgraph(loop_id).metadata.setdefault("merged", []).append(
                iteration.collection
            )
            logger.debug("Merged nested iteration over %s into %s", iteration.collection, loop_id)
        else:
            loop_id = self._subgraph(
                LOOP_LABEL, parent_id, KIND_LOOP, collection=iteration.collection
            ).id
        layout.controls.append(ControlFlow(loop_id, variables, ITERATES_OVER))
        inner_scope = dict(scope)
        if iteration.item and variables:
            inner_scope[iteration.item] = variables[0]
        self._push(stack, iteration.body, loop_id, KIND_LOOP, False, inner_scope)

    def _subgraph(
        self, label: str, parent_id: Optional[str], kind: str, **metadata: object
    ) -> Subgraph:
        subgraph = Subgraph(
            id=self.session.next_id("subgraph"),
            label=label,
            parent=parent_id,
            kind=kind,
            metadata=dict(metadata),
        )
        self.graph.add_subgraph(subgraph)
        if parent_id is not None:
            self.graph.subgraph(parent_id).members.append(subgraph.id)
        return subgraph

    def _prune(self, layout: OutputLayout) -> None:
        """Drop subgraphs that ended up with no members, innermost first."""
        removed = set()
        for subgraph in reversed(self.graph.subgraphs):
            if subgraph.parent is None or subgraph.members:
                continue
            logger.debug("Pruning empty subgraph %s (%s)", subgraph.id, subgraph.label)
            self.graph.subgraph(subgraph.parent).members.remove(subgraph.id)
            self.graph.remove_node(subgraph.id)
            removed.add(subgraph.id)
        layout.controls = [flow for flow in layout.controls if flow.subgraph_id not in removed]


__all__ = [
    "CONTROLS_VISIBILITY",
    "ControlFlow",
    "EXPORTED_LABEL",
    "ITERATES_OVER",
    "KIND_CONDITIONAL",
    "KIND_EXPORTED",
    "KIND_LOOP",
    "KIND_OUTPUT",
    "LOOP_LABEL",
    "OutputLayout",
    "OutputWalker",
    "PlacedElement",
    "ROOT_LABEL",
    "condition_label",
    "has_bound_content",
]
