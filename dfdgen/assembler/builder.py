"""Graph assembly: connects processor output to props, processes and rendered markup."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

from ..classification.heuristics import is_event_attribute
from ..classification.type_shapes import is_function_type
from ..logging import get_logger
from ..models import (
    EXPR_REFERENCE,
    EXTERNAL_INPUT,
    EXTERNAL_OUTPUT,
    PROCESS,
    ROLE_DATA,
    ROLE_FUNCTION,
    AttributeBinding,
    DFDGraph,
    DFDNode,
    ProcessInfo,
    Prop,
)
from ..processors.session import AnalysisSession
from .edges import merge_edges
from .index import Binding, VariableIndex, resolve_scope
from .subgraphs import ControlFlow, OutputWalker, PlacedElement

logger = get_logger("assembler")

_CALLBACK_PROP = re.compile(r"^on[A-Z]")
_TWO_WAY_PREFIXES = ("bind:", "v-model:")
_TWO_WAY_NAMES = frozenset({"v-model", "bind:value"})


def is_function_prop(prop: Prop) -> bool:
    """Function guess for a prop: extractor flag, callable type or ``onX`` name."""
    if prop.is_function:
        return True
    if prop.type_string and is_function_type(prop.type_string):
        return True
    return bool(_CALLBACK_PROP.match(prop.name))


def is_two_way_attribute(name: str) -> bool:
    return name in _TWO_WAY_NAMES or name.startswith(_TWO_WAY_PREFIXES)


def _callee_binding(binding: Binding, callee: str) -> Binding:
    # ``items.join(...)`` is a method call on ``items``; ``user.name.trim()`` reads ``name``.
    if binding.member and callee.count(".") == 1:
        return replace(binding, member=None)
    return binding


class GraphAssembler:
    """Adds props, processes and render-tree nodes to a session's graph and links them.

    Processor output is already committed to ``session.graph`` when the
    assembler runs. Edges are only added between existing nodes and are
    de-duplicated once every pass has run.
    """

    def __init__(self, session: AnalysisSession) -> None:
        self.session = session
        self.analysis = session.analysis
        self.graph: DFDGraph = session.graph
        self.index = VariableIndex()
        self._props: Dict[str, DFDNode] = {}
        self._externals: Dict[str, DFDNode] = {}

    def assemble(self) -> DFDGraph:
        self._add_props()
        processes = self._add_processes(self.analysis.processes)
        processes += self._add_processes(self.analysis.exported_handlers, exported=True)
        self.index = VariableIndex.from_nodes(self.graph.nodes)

        self._link_initializers()
        self._link_dependencies()
        for info, node in processes:
            self._link_process(info, node)

        exported = [node for _, node in processes if node.metadata.get("exported")]
        layout = OutputWalker(self.session).walk(self.analysis.output, exported)
        for flow in layout.controls:
            self._link_control(flow)
        for placed in layout.elements:
            self._link_element(placed)

        merged = merge_edges(self.graph.edges)
        logger.debug(
            "Assembled %s: %d nodes, %d edges (%d before merge)",
            self.graph.component,
            len(self.graph.nodes),
            len(merged),
            len(self.graph.edges),
        )
        self.graph.replace_edges(merged)
        return self.graph

    # -- nodes -------------------------------------------------------------

    def _add_props(self) -> None:
        for prop in self.analysis.props:
            if prop.name in self._props:
                continue
            function = is_function_prop(prop)
            metadata = {
                "prop": True,
                "variables": {prop.name: ROLE_FUNCTION if function else ROLE_DATA},
            }
            if prop.type_string:
                metadata["type_string"] = prop.type_string
            node = DFDNode(
                id=self.session.next_id("prop"),
                label=prop.name,
                type=EXTERNAL_OUTPUT if function else EXTERNAL_INPUT,
                position=prop.position,
                metadata=metadata,
            )
            self.graph.add_node(node)
            self._props[prop.name] = node

    def _add_processes(
        self, processes: Sequence[ProcessInfo], **metadata: object
    ) -> List[tuple[ProcessInfo, DFDNode]]:
        added: List[tuple[ProcessInfo, DFDNode]] = []
        for info in processes:
            node = self._process_node(info, process_name=info.name, **metadata)
            added.append((info, node))
            if info.cleanup is not None:
                cleanup = self._process_node(
                    info.cleanup,
                    label=info.cleanup.name or f"{info.name} cleanup",
                    cleanup_of=info.name,
                )
                added.append((info.cleanup, cleanup))
                node.metadata["cleanup"] = cleanup.id
        return added

    def _process_node(
        self,
        info: ProcessInfo,
        *,
        process_name: Optional[str] = None,
        label: Optional[str] = None,
        **metadata: object,
    ) -> DFDNode:
        payload = {"kind": info.kind, **metadata}
        if process_name:
            payload["process"] = process_name
        node = DFDNode(
            id=self.session.next_id("process"),
            label=label or info.name,
            type=PROCESS,
            position=info.position,
            metadata=payload,
        )
        self.graph.add_node(node)
        return node

    def _external_node(self, callee: str) -> DFDNode:
        node = self._externals.get(callee)
        if node is None:
            node = DFDNode(
                id=self.session.next_id("external"),
                label=callee,
                type=EXTERNAL_OUTPUT,
                metadata={"external_call": True},
            )
            self.graph.add_node(node)
            self._externals[callee] = node
        return node

    # -- edges -------------------------------------------------------------

    def _link(self, source: DFDNode, target: DFDNode, label: str) -> None:
        if source.id != target.id:
            self.graph.add_edge(source.id, target.id, label)

    def _link_initializers(self) -> None:
        for node in self.graph.nodes:
            reference = node.metadata.get("initial_reference")
            prop = self._props.get(reference) if reference else None
            if prop is not None:
                self._link(prop, node, "initializes")

    def _link_dependencies(self) -> None:
        for node in self.graph.nodes:
            dependencies = node.metadata.get("dependencies")
            if not dependencies:
                continue
            label = node.metadata.get("dependency_label", "derives")
            for dependency in dependencies:
                source = self.index.resolve_label(dependency)
                if source is not None and not source.metadata.get("process"):
                    self._link(source, node, label)

    def _link_process(self, info: ProcessInfo, node: DFDNode) -> None:
        for reference in info.references:
            binding = self.index.resolve(reference)
            if binding is None or binding.is_function or binding.is_process:
                continue
            self._link(binding.node, node, binding.label("reads"))
        self._link_calls(node, info.calls)
        self._link_assignments(node, info.assigns)
        for callee in info.external_calls:
            if self.index.resolve(callee) is None:
                self._link(node, self._external_node(callee), "calls")
        for dependency in info.dependencies:
            binding = self.index.resolve(dependency)
            if binding is not None and not binding.is_function:
                self._link(binding.node, node, binding.label("triggers"))
        cleanup_id = node.metadata.get("cleanup")
        if cleanup_id:
            self._link(node, self.graph.node(cleanup_id), "cleanup")

    def _link_calls(self, source: DFDNode, calls: Iterable[str]) -> None:
        for call in calls:
            binding = self.index.resolve(call)
            if binding is None or binding.node.id == source.id:
                continue
            if binding.is_process:
                self._link(source, binding.node, "calls")
            elif binding.is_dispatcher:
                self._link(source, binding.node, "dispatch")
            elif binding.is_writer:
                self._link(source, binding.node, binding.label("updates"))
            elif binding.is_function:
                self._link(source, binding.node, f"calls: {binding.member or binding.variable}")
            else:
                # method call on a data value, e.g. ``items.filter(...)``
                self._link(binding.node, source, _callee_binding(binding, call).label("reads"))

    def _link_assignments(self, source: DFDNode, assigns: Iterable[str]) -> None:
        for target in assigns:
            binding = self.index.resolve(target)
            if binding is not None:
                self._link(source, binding.node, binding.label("updates"))

    def _link_control(self, flow: ControlFlow) -> None:
        subgraph = self.graph.get(flow.subgraph_id)
        if subgraph is None:
            return
        for variable in flow.variables:
            binding = self.index.resolve(variable)
            if binding is not None:
                self._link(binding.node, subgraph, binding.label(flow.label))

    def _link_element(self, placed: PlacedElement) -> None:
        element, node, scope = placed.element, placed.node, placed.scope
        for reference in element.display:
            binding = self.index.resolve(resolve_scope(reference, scope))
            if binding is not None:
                self._link(binding.node, node, binding.label("display"))
        for call in element.display_calls:
            self._link_display_call(node, call.callee, call.arguments, scope)
        for attribute in element.attributes:
            if is_two_way_attribute(attribute.name):
                self._link_two_way(node, attribute, scope)
            elif is_event_attribute(attribute.name):
                self._link_handler(node, attribute, scope)
            else:
                self._link_attribute(node, attribute, scope)

    def _link_display_call(
        self, element: DFDNode, callee: str, arguments: Sequence[str], scope: Dict[str, str]
    ) -> None:
        binding = self.index.resolve(resolve_scope(callee, scope))
        resolved = [self.index.resolve(resolve_scope(argument, scope)) for argument in arguments]
        if binding is not None and (binding.is_process or binding.is_function):
            # the callee transforms its arguments before they reach the output
            for argument in resolved:
                if argument is not None and not argument.is_function:
                    self._link(argument.node, binding.node, argument.label("input"))
            self._link(binding.node, element, "display")
            return
        if binding is not None:
            self._link(binding.node, element, _callee_binding(binding, callee).label("display"))
        for argument in resolved:
            if argument is not None:
                self._link(argument.node, element, argument.label("display"))

    def _link_attribute(self, element: DFDNode, attribute: AttributeBinding, scope: Dict[str, str]) -> None:
        references: List[str] = []
        if attribute.reference:
            references.append(attribute.reference)
        references.extend(attribute.references)
        references.extend(attribute.calls)
        for reference in references:
            binding = self.index.resolve(resolve_scope(reference, scope))
            if binding is not None:
                self._link(binding.node, element, binding.label("binds"))

    def _link_two_way(self, element: DFDNode, attribute: AttributeBinding, scope: Dict[str, str]) -> None:
        references = [attribute.reference] if attribute.reference else list(attribute.references)
        for reference in references:
            binding = self.index.resolve(resolve_scope(reference, scope))
            if binding is None:
                continue
            self._link(binding.node, element, binding.label("value"))
            self._link(element, binding.node, binding.label("updates"))

    def _link_handler(self, element: DFDNode, attribute: AttributeBinding, scope: Dict[str, str]) -> None:
        """Event bindings connect the element to the process that runs.

        ``onClick={save}`` and ``onClick={() => save()}`` both reach the
        ``save`` process. Any other handler body gets its own process node
        carrying the updates and calls it makes.
        """
        if attribute.kind == EXPR_REFERENCE:
            if not attribute.reference:
                return
            reference = resolve_scope(attribute.reference, scope)
            binding = self.index.resolve(reference)
            if binding is None:
                return
            if binding.is_process:
                self._link(element, binding.node, attribute.name)
                return
            if binding.role == ROLE_DATA and not binding.is_writer:
                logger.debug(
                    "Event attribute %s references data value %s; skipping", attribute.name, reference
                )
                return
            calls: List[str] = [reference]
            assigns: List[str] = []
        else:
            calls = [resolve_scope(call, scope) for call in attribute.calls]
            assigns = [resolve_scope(target, scope) for target in attribute.assigns]
            if len(calls) == 1 and not assigns:
                binding = self.index.resolve(calls[0])
                if binding is not None and binding.is_process:
                    self._link(element, binding.node, attribute.name)
                    return

        if not any(self.index.resolve(name) is not None for name in [*calls, *assigns]):
            return
        metadata = {"kind": "inline-handler", "inline": True, "element": element.id}
        if attribute.source:
            metadata["source"] = attribute.source
        handler = DFDNode(
            id=self.session.next_id("handler"),
            label=f"{attribute.name} handler",
            type=PROCESS,
            metadata=metadata,
        )
        self.graph.add_node(handler)
        self._link(element, handler, attribute.name)
        self._link_calls_from_handler(handler, calls)
        self._link_assignments(handler, assigns)

    def _link_calls_from_handler(self, handler: DFDNode, calls: Sequence[str]) -> None:
        # Inline handlers only carry outgoing flows; reads stay with the element.
        writes = []
        for call in calls:
            binding = self.index.resolve(call)
            if binding is not None and (binding.is_function or binding.is_process or binding.is_writer):
                writes.append(call)
        self._link_calls(handler, writes)


__all__ = ["GraphAssembler", "is_function_prop", "is_two_way_attribute"]
