"""Processors for Svelte runes and ``svelte/store``."""

from __future__ import annotations

from ..models import HookInvocation
from .base import (
    BUILTIN_PRIORITY,
    LIBRARY_PRIORITY,
    Processor,
    ProcessorMetadata,
    ProcessorResult,
)
from .common import derived_node, state_node
from .session import AnalysisSession

_STATE_RUNES = frozenset({"$state", "$state.raw", "$bindable"})
_DERIVED_RUNES = frozenset({"$derived", "$derived.by"})
# $props is covered by the analysis' prop list.
_SILENT_RUNES = frozenset({"$effect", "$effect.pre", "$inspect", "$props"})


class SvelteRunesProcessor(Processor):
    metadata = ProcessorMetadata(
        id="svelte",
        library="svelte",
        hook_names=tuple(sorted(_STATE_RUNES | _DERIVED_RUNES | _SILENT_RUNES)),
        priority=BUILTIN_PRIORITY,
        description="Svelte 5 runes",
        frameworks=("svelte",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        node = None
        if invocation.name in _STATE_RUNES:
            node = state_node(
                session, invocation, category="rune-state", processor=self.id, self_writable=True
            )
        elif invocation.name in _DERIVED_RUNES:
            node = derived_node(session, invocation, category="rune-derived", processor=self.id)
        if node is not None:
            result.add_node(node)
        return result


class SvelteStoreProcessor(Processor):
    metadata = ProcessorMetadata(
        id="svelte-store",
        library="svelte/store",
        package_patterns=("svelte/store",),
        hook_names=("writable", "readable", "derived", "get"),
        priority=LIBRARY_PRIORITY,
        description="Svelte writable, readable and derived stores",
        frameworks=("svelte",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        name = invocation.name
        node = None
        if name == "writable":
            # ``count.set`` / ``count.update`` resolve to the store variable
            node = state_node(
                session, invocation, category="writable-store", processor=self.id, self_writable=True
            )
        elif name == "readable":
            node = state_node(session, invocation, category="readable-store", processor=self.id)
        elif name == "derived":
            node = derived_node(
                session,
                invocation,
                category="derived-store",
                processor=self.id,
                dependencies=invocation.dependencies or invocation.identifier_arguments(),
            )
        if node is not None:
            result.add_node(node)
        return result


__all__ = ["SvelteRunesProcessor", "SvelteStoreProcessor"]
