"""Core data models shared across dfdgen components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

# Node types understood by diagram renderers.
EXTERNAL_INPUT = "external-entity-input"
EXTERNAL_OUTPUT = "external-entity-output"
DATA_STORE = "data-store"
PROCESS = "process"
SUBGRAPH = "subgraph"

NODE_TYPES = frozenset({EXTERNAL_INPUT, EXTERNAL_OUTPUT, DATA_STORE, PROCESS, SUBGRAPH})

# Per-variable roles assigned by the classifier.
ROLE_DATA = "data"
ROLE_FUNCTION = "function"

# Argument facts produced by extractors.
ARG_LITERAL = "literal"
ARG_IDENTIFIER = "identifier"
ARG_OPAQUE = "opaque"

# Binding shapes of a hook invocation's left-hand side.
BINDING_NONE = "none"
BINDING_IDENTIFIER = "identifier"
BINDING_ARRAY = "array"
BINDING_OBJECT = "object"

FRAMEWORKS = ("react", "vue", "svelte")


@dataclass(frozen=True)
class SourcePosition:
    """One-based line and zero-based column inside the analysed file."""

    line: int
    column: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True)
class Argument:
    """A fact about one argument passed to a hook invocation."""

    kind: str
    value: Optional[str] = None

    @property
    def is_literal(self) -> bool:
        return self.kind == ARG_LITERAL

    @property
    def is_identifier(self) -> bool:
        return self.kind == ARG_IDENTIFIER


@dataclass(frozen=True)
class Prop:
    """Component input with the extractor's initial data/function guess."""

    name: str
    is_function: bool = False
    type_string: Optional[str] = None
    position: Optional[SourcePosition] = None


@dataclass
class HookInvocation:
    """A single hook/composable call site and the variables it binds.

    ``aliases`` maps a bound variable to the returned property it was
    destructured from (``const { data: user } = useSWR(...)`` gives
    ``{"user": "data"}``). Classification results are written exactly once by
    :meth:`classify`.
    """

    name: str
    variables: List[str] = field(default_factory=list)
    arguments: List[Argument] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    position: Optional[SourcePosition] = None
    library: Optional[str] = None
    binding: str = BINDING_NONE
    aliases: Dict[str, str] = field(default_factory=dict)
    category: Optional[str] = None
    roles: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    _classified: bool = field(default=False, repr=False, compare=False)

    @property
    def classified(self) -> bool:
        return self._classified

    def classify(
        self, category: str, roles: Dict[str, str], metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        if self._classified:
            raise RuntimeError(f"Hook invocation '{self.name}' has already been classified")
        self.category = category
        self.roles = dict(roles)
        self.metadata = dict(metadata or {})
        self._classified = True

    def fresh_copy(self) -> "HookInvocation":
        """Return an unclassified copy so one analysis can be processed again."""
        return replace(
            self,
            variables=list(self.variables),
            arguments=list(self.arguments),
            dependencies=list(self.dependencies),
            aliases=dict(self.aliases),
            category=None,
            roles={},
            metadata={},
            _classified=False,
        )

    def property_of(self, variable: str) -> str:
        return self.aliases.get(variable, variable)

    def first_argument(self) -> Optional[Argument]:
        return self.arguments[0] if self.arguments else None

    def first_literal(self) -> Optional[str]:
        for argument in self.arguments:
            if argument.is_literal and argument.value:
                return argument.value
        return None

    def first_identifier(self) -> Optional[str]:
        argument = self.first_argument()
        if argument is not None and argument.is_identifier and argument.value:
            return argument.value
        return None

    def identifier_arguments(self) -> List[str]:
        return [arg.value for arg in self.arguments if arg.is_identifier and arg.value]


# Process kind for methods exposed to a parent through a ref (``useImperativeHandle``).
EXPORTED_HANDLER = "exported-handler"

@dataclass
class ProcessInfo:
    """A named local function, handler or effect defined inside the component."""

    name: str
    kind: str = "function"
    references: List[str] = field(default_factory=list)
    calls: List[str] = field(default_factory=list)
    assigns: List[str] = field(default_factory=list)
    external_calls: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    cleanup: Optional["ProcessInfo"] = None
    position: Optional[SourcePosition] = None


# Attribute expression kinds.
EXPR_REFERENCE = "reference"
EXPR_ARROW = "arrow"
EXPR_EXPRESSION = "expression"


@dataclass
class AttributeBinding:
    """An attribute whose value references component-scope variables.

    ``reference`` holds the variable for ``attr={name}``; ``calls``,
    ``references`` and ``assigns`` describe the body of an inline arrow or a
    free expression such as ``count++``.
    """

    name: str
    kind: str = EXPR_REFERENCE
    reference: Optional[str] = None
    calls: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    assigns: List[str] = field(default_factory=list)
    source: Optional[str] = None


@dataclass
class DisplayCall:
    """A rendered call expression such as ``{format(message)}``."""

    callee: str
    arguments: List[str] = field(default_factory=list)


@dataclass
class Element:
    """A rendered markup element."""

    tag: str
    display: List[str] = field(default_factory=list)
    display_calls: List[DisplayCall] = field(default_factory=list)
    attributes: List[AttributeBinding] = field(default_factory=list)
    children: List["RenderNode"] = field(default_factory=list)
    position: Optional[SourcePosition] = None

    @property
    def has_bindings(self) -> bool:
        return bool(self.display or self.display_calls or self.attributes)


@dataclass
class Conditional:
    """A conditionally rendered block (``&&``, ternary, ``v-if``, ``{#if}``)."""

    expression: str
    variables: List[str] = field(default_factory=list)
    when_true: List["RenderNode"] = field(default_factory=list)
    when_false: List["RenderNode"] = field(default_factory=list)
    position: Optional[SourcePosition] = None


@dataclass
class Iteration:
    """A repeated block (``.map``, ``v-for``, ``{#each}``)."""

    collection: str
    variables: List[str] = field(default_factory=list)
    item: Optional[str] = None
    body: List["RenderNode"] = field(default_factory=list)
    position: Optional[SourcePosition] = None


RenderNode = Union[Element, Conditional, Iteration]


@dataclass(frozen=True)
class AtomDefinition:
    """A module-level atom declaration found by the static atom scanner."""

    name: str
    derived: bool = False
    dependencies: Tuple[str, ...] = ()
    position: Optional[SourcePosition] = None


@dataclass(frozen=True)
class ComponentAnalysis:
    """Structural facts extracted from one component by a framework extractor."""

    name: str
    framework: Optional[str] = None
    file_path: Optional[str] = None
    props: Tuple[Prop, ...] = ()
    hooks: Tuple[HookInvocation, ...] = ()
    processes: Tuple[ProcessInfo, ...] = ()
    atoms: Tuple[AtomDefinition, ...] = ()
    output: Tuple[RenderNode, ...] = ()
    types: Dict[str, str] = field(default_factory=dict)
    exported_handlers: Tuple[ProcessInfo, ...] = ()


@dataclass
class DFDNode:
    """A node of the data-flow diagram."""

    id: str
    label: str
    type: str
    position: Optional[SourcePosition] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "label": self.label, "type": self.type}
        if self.position is not None:
            payload["position"] = self.position.to_dict()
        payload["metadata"] = _plain(self.metadata)
        return payload


@dataclass(frozen=True)
class DFDEdge:
    """A directed, labelled flow between two existing nodes."""

    source: str
    target: str
    label: str

    @property
    def base_label(self) -> str:
        return self.label.split(":", 1)[0].strip()

    @property
    def has_sub_label(self) -> bool:
        return ":" in self.label

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.source, "to": self.target, "label": self.label}


@dataclass
class Subgraph:
    """A grouping of rendered output; forms a tree rooted at the output subgraph."""

    id: str
    label: str
    parent: Optional[str] = None
    kind: str = "output"
    members: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "parent": self.parent,
            "kind": self.kind,
            "members": list(self.members),
        }


class DFDGraph:
    """Nodes, edges and subgraphs describing a single component."""

    def __init__(self, component: str) -> None:
        self.component = component
        self._nodes: Dict[str, DFDNode] = {}
        self._edges: List[DFDEdge] = []
        self._subgraphs: Dict[str, Subgraph] = {}

    @property
    def nodes(self) -> List[DFDNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[DFDEdge]:
        return list(self._edges)

    @property
    def subgraphs(self) -> List[Subgraph]:
        return list(self._subgraphs.values())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[DFDNode]:
        return iter(self._nodes.values())

    def node(self, node_id: str) -> DFDNode:
        return self._nodes[node_id]

    def get(self, node_id: str) -> Optional[DFDNode]:
        return self._nodes.get(node_id)

    def add_node(self, node: DFDNode) -> DFDNode:
        if node.type not in NODE_TYPES:
            raise ValueError(f"Unknown node type '{node.type}' for node '{node.id}'")
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id '{node.id}'")
        self._nodes[node.id] = node
        return node

    def remove_node(self, node_id: str) -> None:
        self._nodes.pop(node_id, None)
        self._subgraphs.pop(node_id, None)
        self._edges = [
            edge for edge in self._edges if edge.source != node_id and edge.target != node_id
        ]

    def add_edge(self, source: str, target: str, label: str) -> DFDEdge:
        for endpoint in (source, target):
            if endpoint not in self._nodes:
                raise ValueError(f"Edge endpoint '{endpoint}' does not exist")
        edge = DFDEdge(source=source, target=target, label=label)
        self._edges.append(edge)
        return edge

    def replace_edges(self, edges: List[DFDEdge]) -> None:
        self._edges = list(edges)

    def add_subgraph(self, subgraph: Subgraph) -> Subgraph:
        if subgraph.parent is not None and subgraph.parent not in self._subgraphs:
            raise ValueError(f"Unknown parent subgraph '{subgraph.parent}'")
        self.add_node(
            DFDNode(
                id=subgraph.id,
                label=subgraph.label,
                type=SUBGRAPH,
                metadata={"kind": subgraph.kind, "parent": subgraph.parent},
            )
        )
        self._subgraphs[subgraph.id] = subgraph
        return subgraph

    def subgraph(self, subgraph_id: str) -> Subgraph:
        return self._subgraphs[subgraph_id]

    def edges_between(self, source: str, target: str) -> List[DFDEdge]:
        return [edge for edge in self._edges if edge.source == source and edge.target == target]

    def nodes_labelled(self, label: str) -> List[DFDNode]:
        return [node for node in self._nodes.values() if node.label == label]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "analyzable": True,
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self._edges],
            "subgraphs": [subgraph.to_dict() for subgraph in self._subgraphs.values()],
        }


@dataclass(frozen=True)
class NotAnalyzable:
    """Explicit result for a component whose structure could not be extracted."""

    reason: str
    component: Optional[str] = None
    file_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "file": self.file_path,
            "analyzable": False,
            "reason": self.reason,
        }


AnalysisResult = Union[DFDGraph, NotAnalyzable]


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return [_plain(item) for item in items]
    if isinstance(value, SourcePosition):
        return value.to_dict()
    return value


__all__ = [
    "ARG_IDENTIFIER",
    "ARG_LITERAL",
    "ARG_OPAQUE",
    "AnalysisResult",
    "Argument",
    "AtomDefinition",
    "AttributeBinding",
    "BINDING_ARRAY",
    "BINDING_IDENTIFIER",
    "BINDING_NONE",
    "BINDING_OBJECT",
    "ComponentAnalysis",
    "Conditional",
    "DATA_STORE",
    "DFDEdge",
    "DFDGraph",
    "DFDNode",
    "DisplayCall",
    "EXPORTED_HANDLER",
    "EXPR_ARROW",
    "EXPR_EXPRESSION",
    "EXPR_REFERENCE",
    "EXTERNAL_INPUT",
    "EXTERNAL_OUTPUT",
    "Element",
    "FRAMEWORKS",
    "HookInvocation",
    "Iteration",
    "NODE_TYPES",
    "NotAnalyzable",
    "PROCESS",
    "ProcessInfo",
    "Prop",
    "ROLE_DATA",
    "ROLE_FUNCTION",
    "RenderNode",
    "SUBGRAPH",
    "SourcePosition",
    "Subgraph",
]
