"""Per-analysis state shared between processor calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..models import AtomDefinition, ComponentAnalysis, DFDGraph, DFDNode
from .base import ProcessorError, ProcessorResult


@dataclass(frozen=True)
class ProcessorFault:
    """A processor failure recorded during dispatch."""

    processor_id: str
    hook: str
    message: str


class AnalysisSession:
    """Holds the graph under construction and every analysis-scoped cache.

    A session lives for exactly one analysis. Starting a new analysis means
    creating a new session, which resets id counters and resource keys.
    """

    def __init__(
        self,
        analysis: ComponentAnalysis,
        atoms: Optional[Iterable[AtomDefinition]] = None,
    ) -> None:
        self.analysis = analysis
        self.graph = DFDGraph(analysis.name)
        self.atoms: Dict[str, AtomDefinition] = {atom.name: atom for atom in atoms or ()}
        self.faults: List[ProcessorFault] = []
        self._counters: Dict[str, int] = {}
        self._resources: Dict[str, str] = {}

    @property
    def framework(self) -> Optional[str]:
        return self.analysis.framework

    @property
    def file_path(self) -> Optional[str]:
        return self.analysis.file_path

    def next_id(self, prefix: str) -> str:
        counter = self._counters.get(prefix, 0)
        self._counters[prefix] = counter + 1
        return f"{prefix}_{counter}"

    def resource(self, key: str) -> Optional[DFDNode]:
        node_id = self._resources.get(key)
        if node_id is None:
            return None
        return self.graph.get(node_id)

    def resource_keys(self) -> Dict[str, str]:
        return dict(self._resources)

    def shared_node(
        self, result: ProcessorResult, key: str, factory: Callable[[], DFDNode]
    ) -> DFDNode:
        """Return the node bound to ``key``, creating it through ``result`` if needed."""
        existing = self.resource(key)
        if existing is not None:
            return existing
        pending_id = result.resources.get(key)
        if pending_id is not None:
            pending = result.pending(pending_id)
            if pending is not None:
                return pending
        node = factory()
        result.add_node(node, resource_key=key)
        return node

    def commit(self, result: ProcessorResult) -> None:
        """Apply ``result`` to the graph, or raise without applying anything."""
        new_ids: Dict[str, DFDNode] = {}
        for node in result.nodes:
            if node.id in self.graph or node.id in new_ids:
                raise ProcessorError(f"Duplicate node id '{node.id}'")
            new_ids[node.id] = node

        def _known(node_id: str) -> bool:
            return node_id in self.graph or node_id in new_ids

        for edge in result.edges:
            if not (_known(edge.source) and _known(edge.target)):
                raise ProcessorError(
                    f"Edge {edge.source} -> {edge.target} references an unknown node"
                )
        for key, node_id in result.resources.items():
            if not _known(node_id):
                raise ProcessorError(f"Resource '{key}' bound to unknown node '{node_id}'")
        for node_id, _ in result.updates:
            if node_id not in self.graph:
                raise ProcessorError(f"Cannot update unknown node '{node_id}'")

        for node in result.nodes:
            self.graph.add_node(node)
        for subgraph in result.subgraphs:
            self.graph.add_subgraph(subgraph)
        for edge in result.edges:
            self.graph.add_edge(edge.source, edge.target, edge.label)
        self._resources.update(result.resources)
        for node_id, patch in result.updates:
            merge_metadata(self.graph.node(node_id).metadata, patch)

    def record_fault(self, processor_id: str, hook: str, message: str) -> None:
        self.faults.append(ProcessorFault(processor_id=processor_id, hook=hook, message=message))


def merge_metadata(target: Dict[str, Any], patch: Mapping[str, Any]) -> None:
    """Merge ``patch`` into ``target``: lists gain missing items, dicts are updated."""
    for key, value in patch.items():
        current = target.get(key)
        if isinstance(current, list) and isinstance(value, (list, tuple)):
            for item in value:
                if item not in current:
                    current.append(item)
        elif isinstance(current, dict) and isinstance(value, Mapping):
            current.update(value)
        else:
            target[key] = value


__all__ = ["AnalysisSession", "ProcessorFault", "merge_metadata"]
