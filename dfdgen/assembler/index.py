"""Lookup from component-scope variable names to the nodes that own them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..models import PROCESS, ROLE_DATA, ROLE_FUNCTION, DFDNode

_ACCESS = re.compile(r"\?\.|\[[^\]]*\]|!\.")

# Metadata keys whose entries name the individual properties of a consolidated node.
_PROPERTY_KEYS = ("properties", "data_properties", "state_properties", "data_values")


@dataclass(frozen=True)
class Binding:
    """A variable resolved to its owning node."""

    variable: str
    node: DFDNode
    role: str
    property: str
    member: Optional[str] = None

    @property
    def is_function(self) -> bool:
        return self.role == ROLE_FUNCTION

    @property
    def is_process(self) -> bool:
        return self.node.type == PROCESS and self.node.metadata.get("process") is not None

    @property
    def is_writer(self) -> bool:
        return self.variable in self.node.metadata.get("writers", ())

    @property
    def is_dispatcher(self) -> bool:
        return self.variable in self.node.metadata.get("dispatchers", ())

    def sub_label(self) -> Optional[str]:
        """Name used after the colon of a labelled edge, if the node needs one."""
        if self.member:
            return self.member
        for key in _PROPERTY_KEYS:
            values = self.node.metadata.get(key)
            if isinstance(values, (list, tuple)) and self.property in values and len(values) > 1:
                return self.property
        return None

    def label(self, base: str) -> str:
        sub = self.sub_label()
        return f"{base}: {sub}" if sub else base


def split_reference(reference: str) -> Tuple[str, Optional[str]]:
    """Split ``user?.profile.name`` into ``("user", "profile")``."""
    parts = [part for part in _ACCESS.sub(".", reference.strip()).split(".") if part]
    if not parts:
        return "", None
    return parts[0], parts[1] if len(parts) > 1 else None


def resolve_scope(reference: str, scope: Dict[str, str]) -> str:
    """Loop item references resolve to the iterated collection."""
    head, _ = split_reference(reference)
    return scope.get(head, reference)


class VariableIndex:
    """Maps names to nodes: hook variables first, then processes, props and labels.

    The first node to claim a name keeps it; graph order is creation order,
    so hook-owned nodes shadow later nodes that happen to share a label.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[DFDNode, str, str]] = {}
        self._labels: Dict[str, DFDNode] = {}

    @classmethod
    def from_nodes(cls, nodes: Iterable[DFDNode]) -> "VariableIndex":
        index = cls()
        for node in nodes:
            index.add_node(node)
        return index

    def add_node(self, node: DFDNode) -> None:
        variables = node.metadata.get("variables")
        aliases = node.metadata.get("aliases") or {}
        if isinstance(variables, dict):
            for variable, role in variables.items():
                self.claim(variable, node, role, aliases.get(variable, variable))
        if node.type == PROCESS and node.metadata.get("process"):
            self.claim(node.metadata["process"], node, ROLE_FUNCTION)
        self._labels.setdefault(node.label, node)

    def claim(self, variable: str, node: DFDNode, role: str, prop: Optional[str] = None) -> None:
        self._entries.setdefault(variable, (node, role, prop or variable))

    def __contains__(self, variable: object) -> bool:
        return variable in self._entries

    def resolve(self, reference: str) -> Optional[Binding]:
        head, member = split_reference(reference)
        entry = self._entries.get(head)
        if entry is None:
            return None
        node, role, prop = entry
        return Binding(variable=head, node=node, role=role, property=prop, member=member)

    def resolve_label(self, name: str) -> Optional[DFDNode]:
        """Resolve ``name`` as a variable, falling back to a node label (atom names)."""
        binding = self.resolve(name)
        if binding is not None:
            return binding.node
        return self._labels.get(name)

    def role_of(self, reference: str) -> str:
        binding = self.resolve(reference)
        return binding.role if binding is not None else ROLE_DATA


__all__ = ["Binding", "VariableIndex", "resolve_scope", "split_reference"]
