"""React Hook Form processor: all returned handles on one consolidated node."""

from __future__ import annotations

from ..models import DATA_STORE, ROLE_FUNCTION, HookInvocation
from .base import LIBRARY_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .return_maps import REACT_HOOK_FORM_MAPS, bind_properties, summarize
from .session import AnalysisSession


class ReactHookFormProcessor(Processor):
    metadata = ProcessorMetadata(
        id="react-hook-form",
        library="react-hook-form",
        package_patterns=("react-hook-form",),
        hook_names=tuple(REACT_HOOK_FORM_MAPS),
        priority=LIBRARY_PRIORITY,
        description="React Hook Form state and handlers",
        frameworks=("react",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        mapping = REACT_HOOK_FORM_MAPS[invocation.name]
        bound = bind_properties(invocation, mapping)
        summary = summarize(bound, mapping, invocation.binding)
        # handles that mutate the form state
        summary["writers"] = [item.variable for item in bound if item.role == ROLE_FUNCTION]
        result = ProcessorResult()
        result.add_node(
            build_node(
                session,
                "library_hook",
                invocation.name,
                DATA_STORE,
                invocation,
                category="form",
                is_library_hook=True,
                processor=self.id,
                **summary,
            )
        )
        return result


__all__ = ["ReactHookFormProcessor"]
