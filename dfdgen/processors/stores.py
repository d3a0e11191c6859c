"""Processors for global store libraries: Zustand, Pinia and MobX."""

from __future__ import annotations

import re
from typing import Dict, List

from ..classification.heuristics import looks_like_action
from ..logging import get_logger
from ..models import BINDING_IDENTIFIER, DATA_STORE, ROLE_DATA, ROLE_FUNCTION, HookInvocation
from .base import (
    LIBRARY_PRIORITY,
    Processor,
    ProcessorMetadata,
    ProcessorResult,
    build_node,
    is_package_name,
)
from .common import state_node
from .session import AnalysisSession

logger = get_logger("processors.stores")

ZUSTAND_PRIORITY = 80
PINIA_PRIORITY = 95


def _store_roles(invocation: HookInvocation) -> Dict[str, str]:
    """Selectors hold data; destructured members are actions when they read like one."""
    if invocation.binding == BINDING_IDENTIFIER:
        return {variable: ROLE_DATA for variable in invocation.variables}
    roles: Dict[str, str] = {}
    for variable in invocation.variables:
        role = invocation.roles.get(variable)
        if role is None:
            member = invocation.property_of(variable)
            role = ROLE_FUNCTION if looks_like_action(member) else ROLE_DATA
        roles[variable] = role
    return roles


class _StoreProcessor(Processor):
    """A store hook resolves to one node per store name within an analysis."""

    node_prefix = "store"
    category = "store"

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        roles = _store_roles(invocation)
        actions = [name for name, role in roles.items() if role == ROLE_FUNCTION]
        writers: List[str] = list(actions)
        if invocation.binding == BINDING_IDENTIFIER and self.identifier_is_store(invocation):
            # ``store.increment()`` calls go through the store variable
            writers.extend(invocation.variables)
        key = f"store:{invocation.name}"
        existing = session.resource(key)
        if existing is not None:
            result.update(
                existing.id,
                variables=roles,
                writers=writers,
                actions=actions,
                invocation_count=existing.metadata.get("invocation_count", 1) + 1,
            )
            target_id = existing.id
        else:
            node = build_node(
                session,
                self.node_prefix,
                invocation.name,
                DATA_STORE,
                invocation,
                category=self.category,
                processor=self.id,
                store_name=invocation.name,
                variables=roles,
                writers=writers,
                actions=actions,
                state_properties=[
                    invocation.property_of(name) for name, role in roles.items() if role == ROLE_DATA
                ],
                invocation_count=1,
            )
            result.add_node(node, resource_key=key)
            target_id = node.id
        if invocation.binding == BINDING_IDENTIFIER:
            for variable in invocation.variables:
                result.resources[f"store-variable:{variable}"] = target_id
        return result

    def identifier_is_store(self, invocation: HookInvocation) -> bool:
        return not invocation.arguments


class ZustandProcessor(_StoreProcessor):
    metadata = ProcessorMetadata(
        id="zustand",
        library="zustand",
        package_patterns=("zustand", "zustand/*"),
        hook_names=(re.compile(r"use\w*Store"),),
        priority=ZUSTAND_PRIORITY,
        description="Zustand store hooks",
        frameworks=("react",),
    )
    node_prefix = "zustand_store"
    category = "zustand-store"


class PiniaProcessor(_StoreProcessor):
    metadata = ProcessorMetadata(
        id="pinia",
        library="pinia",
        package_patterns=("pinia",),
        hook_names=(re.compile(r"use\w+Store"), "storeToRefs"),
        priority=PINIA_PRIORITY,
        description="Pinia stores and storeToRefs",
        frameworks=("vue",),
    )
    node_prefix = "pinia_store"
    category = "pinia-store"

    def matches(self, invocation: HookInvocation, framework: str | None = None) -> bool:
        # Without a framework or import source a ``use*Store`` hook is left to Zustand.
        if framework is None and not is_package_name(invocation.library):
            return False
        return super().matches(invocation, framework)

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        if invocation.name == "storeToRefs":
            return self._store_to_refs(invocation, session)
        return super().process(invocation, session)

    def identifier_is_store(self, invocation: HookInvocation) -> bool:
        return True

    def _store_to_refs(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        store_variable = invocation.first_identifier()
        store = session.resource(f"store-variable:{store_variable}") if store_variable else None
        if store is None:
            logger.warning("storeToRefs argument does not name a known store; skipping")
            result.handled = False
            return result
        refs = {variable: ROLE_DATA for variable in invocation.variables}
        result.update(store.id, variables=refs, refs=list(refs))
        return result


class MobXProcessor(Processor):
    metadata = ProcessorMetadata(
        id="mobx",
        library="mobx-react-lite",
        package_patterns=("mobx-react-lite", "mobx-react", "mobx"),
        hook_names=("useLocalObservable", "useObserver"),
        priority=LIBRARY_PRIORITY,
        description="MobX local observables",
        frameworks=("react",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        if invocation.name == "useLocalObservable":
            node = state_node(
                session,
                invocation,
                category="mobx-observable",
                processor=self.id,
                self_writable=True,
            )
            if node is not None:
                result.add_node(node)
        return result


__all__ = ["MobXProcessor", "PiniaProcessor", "ZustandProcessor"]
