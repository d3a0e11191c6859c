"""Routing processors sharing the analysis-wide URL input/output nodes."""

from __future__ import annotations

from typing import Dict, Mapping, Tuple

from ..models import (
    BINDING_ARRAY,
    EXTERNAL_INPUT,
    EXTERNAL_OUTPUT,
    PROCESS,
    ROLE_DATA,
    ROLE_FUNCTION,
    DFDNode,
    HookInvocation,
)
from .base import LIBRARY_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .session import AnalysisSession

URL_INPUT_KEY = "url:input"
URL_OUTPUT_KEY = "url:output"

# How a navigation hook relates to the URL.
READS = "reads"
NAVIGATES = "navigates"
BOTH = "both"
GUARD = "guard"


def url_input_node(session: AnalysisSession, result: ProcessorResult) -> DFDNode:
    return session.shared_node(
        result,
        URL_INPUT_KEY,
        lambda: build_node(session, "url_input", "URL: Input", EXTERNAL_INPUT, category="url"),
    )


def url_output_node(session: AnalysisSession, result: ProcessorResult) -> DFDNode:
    return session.shared_node(
        result,
        URL_OUTPUT_KEY,
        lambda: build_node(session, "url_output", "URL: Output", EXTERNAL_OUTPUT, category="url"),
    )


class NavigationProcessor(Processor):
    """Gives each routing hook its own node wired to the shared URL nodes.

    ``hook_kinds`` tags each hook as reading the URL, navigating, both, or a
    route guard. ``positional_roles`` covers tuple-returning hooks such as
    ``useSearchParams`` in React Router.
    """

    hook_kinds: Mapping[str, str] = {}
    positional_roles: Mapping[str, Tuple[str, ...]] = {}

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        kind = self.hook_kinds.get(invocation.name, READS)
        node = build_node(
            session,
            "library_hook",
            invocation.name,
            PROCESS,
            invocation,
            category="navigation",
            is_library_hook=True,
            processor=self.id,
            navigation=kind,
            variables=self._roles(invocation, kind),
        )
        result.add_node(node)
        if kind in (READS, BOTH, GUARD):
            url_input = url_input_node(session, result)
            result.add_edge(url_input.id, node.id, "provides")
        if kind in (NAVIGATES, BOTH):
            url_output = url_output_node(session, result)
            result.add_edge(node.id, url_output.id, "navigates")
        return result

    def _roles(self, invocation: HookInvocation, kind: str) -> Dict[str, str]:
        positional = self.positional_roles.get(invocation.name)
        roles: Dict[str, str] = {}
        variables = list(invocation.variables)
        if not variables and not invocation.name.startswith(("use", "on")):
            # imported stores and functions (``page``, ``goto``) are used by name
            variables = [invocation.name]
        for index, variable in enumerate(variables):
            if positional and invocation.binding == BINDING_ARRAY and index < len(positional):
                roles[variable] = positional[index]
            elif kind == NAVIGATES:
                roles[variable] = ROLE_FUNCTION
            else:
                roles[variable] = ROLE_DATA
        return roles


class NextNavigationProcessor(NavigationProcessor):
    metadata = ProcessorMetadata(
        id="next",
        library="next",
        package_patterns=("next/navigation", "next/router"),
        hook_names=("useRouter", "usePathname", "useSearchParams", "useParams"),
        priority=LIBRARY_PRIORITY,
        description="Next.js navigation hooks",
        frameworks=("react",),
    )
    hook_kinds = {
        "useRouter": NAVIGATES,
        "usePathname": READS,
        "useSearchParams": READS,
        "useParams": READS,
    }


class ReactRouterProcessor(NavigationProcessor):
    metadata = ProcessorMetadata(
        id="react-router",
        library="react-router",
        package_patterns=("react-router", "react-router-dom"),
        hook_names=("useNavigate", "useParams", "useLocation", "useSearchParams"),
        priority=LIBRARY_PRIORITY,
        description="React Router hooks",
        frameworks=("react",),
    )
    hook_kinds = {
        "useNavigate": NAVIGATES,
        "useParams": READS,
        "useLocation": READS,
        "useSearchParams": BOTH,
    }
    positional_roles = {"useSearchParams": (ROLE_DATA, ROLE_FUNCTION)}


class TanStackRouterProcessor(NavigationProcessor):
    metadata = ProcessorMetadata(
        id="tanstack-router",
        library="@tanstack/react-router",
        package_patterns=("@tanstack/*-router",),
        hook_names=(
            "useRouter",
            "useRouterState",
            "useSearch",
            "useParams",
            "useNavigate",
            "useLocation",
        ),
        priority=LIBRARY_PRIORITY,
        description="TanStack Router hooks",
        frameworks=("react",),
    )
    hook_kinds = {
        "useRouter": NAVIGATES,
        "useNavigate": NAVIGATES,
        "useRouterState": READS,
        "useSearch": READS,
        "useParams": READS,
        "useLocation": READS,
    }


class VueRouterProcessor(NavigationProcessor):
    metadata = ProcessorMetadata(
        id="vue-router",
        library="vue-router",
        package_patterns=("vue-router",),
        hook_names=("useRoute", "useRouter", "onBeforeRouteUpdate", "onBeforeRouteLeave"),
        priority=LIBRARY_PRIORITY,
        description="Vue Router composables and guards",
        frameworks=("vue",),
    )
    hook_kinds = {
        "useRoute": READS,
        "useRouter": NAVIGATES,
        "onBeforeRouteUpdate": GUARD,
        "onBeforeRouteLeave": GUARD,
    }


class SvelteKitProcessor(NavigationProcessor):
    metadata = ProcessorMetadata(
        id="sveltekit",
        library="@sveltejs/kit",
        package_patterns=("$app/*",),
        hook_names=("page", "navigating", "updated", "goto", "beforeNavigate", "afterNavigate"),
        priority=LIBRARY_PRIORITY,
        description="SvelteKit page stores and navigation",
        frameworks=("svelte",),
    )
    hook_kinds = {
        "page": READS,
        "navigating": READS,
        "updated": READS,
        "goto": NAVIGATES,
        "beforeNavigate": GUARD,
        "afterNavigate": GUARD,
    }


__all__ = [
    "NavigationProcessor",
    "NextNavigationProcessor",
    "ReactRouterProcessor",
    "SvelteKitProcessor",
    "TanStackRouterProcessor",
    "URL_INPUT_KEY",
    "URL_OUTPUT_KEY",
    "VueRouterProcessor",
    "url_input_node",
    "url_output_node",
]
