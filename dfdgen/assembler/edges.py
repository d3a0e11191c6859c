"""Edge de-duplication."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from ..models import DFDEdge


def merge_edges(edges: Iterable[DFDEdge]) -> List[DFDEdge]:
    """Collapse edges sharing source, target and base label.

    Sub-labels of the collapsed edges are joined (``calls: increment, reset``);
    an unlabelled duplicate adds nothing. The merged edge takes the position of
    the first edge in its group.
    """

    groups: Dict[Tuple[str, str, str], List[str]] = {}
    order: List[Tuple[str, str, str]] = []
    for edge in edges:
        key = (edge.source, edge.target, edge.base_label)
        if key not in groups:
            groups[key] = []
            order.append(key)
        if edge.has_sub_label:
            for part in edge.label.split(":", 1)[1].split(","):
                sub = part.strip()
                if sub and sub not in groups[key]:
                    groups[key].append(sub)

    merged: List[DFDEdge] = []
    for source, target, base in order:
        subs = groups[(source, target, base)]
        label = f"{base}: {', '.join(subs)}" if subs else base
        merged.append(DFDEdge(source=source, target=target, label=label))
    return merged


__all__ = ["merge_edges"]
