"""Processor for Vue Composition API builtins."""

from __future__ import annotations

from ..models import EXTERNAL_INPUT, EXTERNAL_OUTPUT, ROLE_DATA, HookInvocation
from .base import BUILTIN_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .common import derived_node, state_node
from .session import AnalysisSession

_REACTIVE = frozenset({"ref", "shallowRef", "reactive", "shallowReactive", "toRef", "customRef"})
_DERIVED = frozenset({"computed", "readonly"})
_SILENT = frozenset(
    {
        "watch",
        "watchEffect",
        "watchPostEffect",
        "onMounted",
        "onUnmounted",
        "onBeforeMount",
        "onBeforeUnmount",
        "onUpdated",
        "onBeforeUpdate",
        "onActivated",
        "onDeactivated",
        "nextTick",
    }
)


class VueProcessor(Processor):
    metadata = ProcessorMetadata(
        id="vue",
        library="vue",
        package_patterns=("vue", "@vue/*"),
        hook_names=tuple(sorted(_REACTIVE | _DERIVED | _SILENT | {"provide", "inject"})),
        priority=BUILTIN_PRIORITY,
        description="Vue reactivity, dependency injection and lifecycle",
        frameworks=("vue",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        name = invocation.name
        node = None
        if name in _REACTIVE:
            node = state_node(
                session, invocation, category="ref", processor=self.id, self_writable=True
            )
        elif name in _DERIVED:
            dependencies = invocation.dependencies or invocation.identifier_arguments()
            node = derived_node(
                session, invocation, category="computed", processor=self.id, dependencies=dependencies
            )
        elif name == "inject":
            key = invocation.first_literal() or invocation.first_identifier()
            for variable in invocation.variables:
                result.add_node(
                    build_node(
                        session,
                        "context",
                        variable,
                        EXTERNAL_INPUT,
                        invocation,
                        category="inject",
                        processor=self.id,
                        injection_key=key,
                        variables={variable: ROLE_DATA},
                    )
                )
        elif name == "provide":
            key = invocation.first_literal() or invocation.first_identifier() or "provide"
            provided = invocation.identifier_arguments()
            values = provided[1:] if invocation.first_identifier() else provided
            node = build_node(
                session,
                "provide",
                f"provide: {key}",
                EXTERNAL_OUTPUT,
                invocation,
                category="provide",
                processor=self.id,
                injection_key=key,
                dependencies=values,
                dependency_label="provides",
            )
        if node is not None:
            result.add_node(node)
        return result


__all__ = ["VueProcessor"]
