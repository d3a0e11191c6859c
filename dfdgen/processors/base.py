"""Base classes and shared helpers for library processors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Pattern, Tuple, Union

from ..models import DFDEdge, DFDNode, HookInvocation, Subgraph

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .session import AnalysisSession

BUILTIN_PRIORITY = 100
LIBRARY_PRIORITY = 50
FALLBACK_PRIORITY = 0

HookName = Union[str, Pattern[str]]

_LOCAL_IMPORT_PREFIXES = (".", "/", "@/", "~/", "$lib/")


class ProcessorError(RuntimeError):
    """Raised by a processor that cannot translate an invocation."""


def is_package_name(library: Optional[str]) -> bool:
    """Return True when ``library`` names an installed package rather than a local module."""
    if not library:
        return False
    return not library.startswith(_LOCAL_IMPORT_PREFIXES)


@dataclass(frozen=True)
class ProcessorMetadata:
    """Identity and matching rules of a processor."""

    id: str
    library: str
    package_patterns: Tuple[str, ...] = ()
    hook_names: Tuple[HookName, ...] = ()
    priority: int = LIBRARY_PRIORITY
    description: str = ""
    frameworks: Tuple[str, ...] = ()

    def handles_name(self, name: str) -> bool:
        for candidate in self.hook_names:
            if isinstance(candidate, str):
                if candidate == name:
                    return True
            elif candidate.fullmatch(name):
                return True
        return False

    def handles_package(self, library: str) -> bool:
        return any(fnmatchcase(library, pattern) for pattern in self.package_patterns)

    def applies_to(self, framework: Optional[str]) -> bool:
        return not self.frameworks or framework is None or framework in self.frameworks


@dataclass
class ProcessorResult:
    """Output of one processor call, committed to the session as a unit.

    ``resources`` binds resource keys to node ids (new or existing) and
    ``updates`` merges metadata into nodes created by earlier invocations.
    """

    nodes: List[DFDNode] = field(default_factory=list)
    edges: List[DFDEdge] = field(default_factory=list)
    subgraphs: List[Subgraph] = field(default_factory=list)
    resources: Dict[str, str] = field(default_factory=dict)
    updates: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)
    handled: bool = True

    def add_node(self, node: DFDNode, *, resource_key: Optional[str] = None) -> DFDNode:
        self.nodes.append(node)
        if resource_key is not None:
            self.resources[resource_key] = node.id
        return node

    def add_edge(self, source: str, target: str, label: str) -> DFDEdge:
        edge = DFDEdge(source=source, target=target, label=label)
        if edge not in self.edges:
            self.edges.append(edge)
        return edge

    def update(self, node_id: str, **metadata: Any) -> None:
        self.updates.append((node_id, metadata))

    def pending(self, node_id: str) -> Optional[DFDNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class Processor(ABC):
    """Translates one recognised hook invocation into DFD nodes and edges.

    Processors hold no per-analysis state: anything that must be shared
    between invocations (URL nodes, atom nodes, servers) lives in the
    :class:`~dfdgen.processors.session.AnalysisSession` passed to
    :meth:`process`.
    """

    metadata: ClassVar[ProcessorMetadata]

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def priority(self) -> int:
        return self.metadata.priority

    def matches(self, invocation: HookInvocation, framework: Optional[str] = None) -> bool:
        meta = self.metadata
        if not meta.applies_to(framework):
            return False
        if not meta.handles_name(invocation.name):
            return False
        if meta.package_patterns and is_package_name(invocation.library):
            return meta.handles_package(invocation.library or "")
        return True

    @abstractmethod
    def process(self, invocation: HookInvocation, session: "AnalysisSession") -> ProcessorResult:
        """Return the nodes and edges contributed by ``invocation``."""


def build_node(
    session: "AnalysisSession",
    prefix: str,
    label: str,
    node_type: str,
    invocation: Optional[HookInvocation] = None,
    **metadata: Any,
) -> DFDNode:
    """Allocate an id from the session counters and build a node."""
    payload = {key: value for key, value in metadata.items() if value is not None}
    if invocation is not None:
        payload.setdefault("hook", invocation.name)
        if invocation.library:
            payload.setdefault("library", invocation.library)
    return DFDNode(
        id=session.next_id(prefix),
        label=label,
        type=node_type,
        position=invocation.position if invocation is not None else None,
        metadata=payload,
    )


__all__ = [
    "BUILTIN_PRIORITY",
    "FALLBACK_PRIORITY",
    "LIBRARY_PRIORITY",
    "Processor",
    "ProcessorError",
    "ProcessorMetadata",
    "ProcessorResult",
    "build_node",
    "is_package_name",
]
