"""Node shapes shared by the framework builtin processors."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..models import DATA_STORE, ROLE_DATA, ROLE_FUNCTION, DFDNode, HookInvocation
from .base import build_node
from .session import AnalysisSession


def roles_for(invocation: HookInvocation) -> Dict[str, str]:
    """Classifier roles, defaulting unclassified variables to data."""
    return {variable: invocation.roles.get(variable, ROLE_DATA) for variable in invocation.variables}


def state_node(
    session: AnalysisSession,
    invocation: HookInvocation,
    *,
    category: str,
    processor: str,
    self_writable: bool = False,
    **metadata: object,
) -> Optional[DFDNode]:
    """One data-store holding a value and the functions that write it.

    The label is the first data variable. ``self_writable`` marks values that
    are mutated by assignment (Vue refs, Svelte ``$state``), so the value
    variable itself counts as a writer.
    """
    roles = roles_for(invocation)
    if not roles:
        return None
    readers = [name for name, role in roles.items() if role == ROLE_DATA]
    writers = [name for name, role in roles.items() if role == ROLE_FUNCTION]
    if self_writable:
        writers = readers[:1] + writers
    label = readers[0] if readers else invocation.variables[0]
    initial = invocation.first_identifier() or invocation.first_literal()
    return build_node(
        session,
        "state",
        label,
        DATA_STORE,
        invocation,
        category=category,
        processor=processor,
        read_variable=readers[0] if readers else None,
        write_variable=writers[-1] if writers and not self_writable else None,
        variables=roles,
        writers=writers,
        initial_value=initial,
        initial_reference=invocation.first_identifier(),
        **metadata,
    )


def derived_node(
    session: AnalysisSession,
    invocation: HookInvocation,
    *,
    category: str,
    processor: str,
    dependencies: Optional[List[str]] = None,
) -> Optional[DFDNode]:
    """A read-only value computed from other variables."""
    if not invocation.variables:
        return None
    label = invocation.variables[0]
    deps = list(dependencies if dependencies is not None else invocation.dependencies)
    return build_node(
        session,
        "computed",
        label,
        DATA_STORE,
        invocation,
        category=category,
        processor=processor,
        read_variable=label,
        variables={variable: ROLE_DATA for variable in invocation.variables},
        derived=True,
        dependencies=deps,
        dependency_label="derives",
    )


__all__ = ["derived_node", "roles_for", "state_node"]
