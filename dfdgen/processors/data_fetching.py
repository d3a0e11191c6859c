"""Processors for remote-query libraries (SWR, TanStack Query, Apollo, RTK Query, tRPC)."""

from __future__ import annotations

import re
from typing import Mapping, Optional

from ..logging import get_logger
from ..models import DATA_STORE, EXTERNAL_INPUT, DFDNode, HookInvocation
from .base import LIBRARY_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .return_maps import (
    APOLLO_MAPS,
    OPERATION_CONFIG,
    OPERATION_MUTATION,
    RTK_MUTATION_MAP,
    RTK_QUERY_MAP,
    SWR_MAPS,
    TANSTACK_QUERY_MAPS,
    TRPC_MUTATION_MAP,
    TRPC_QUERY_MAP,
    ReturnMap,
    bind_properties,
    summarize,
)
from .session import AnalysisSession

logger = get_logger("processors.data_fetching")

GENERIC_SERVER_KEY = "server:*"


def server_node(session: AnalysisSession, result: ProcessorResult, endpoint: Optional[str]) -> DFDNode:
    """Return the Server node for ``endpoint``, shared across the analysis."""
    key = f"server:{endpoint}" if endpoint else GENERIC_SERVER_KEY
    label = f"Server: {endpoint}" if endpoint else "Server"

    def _create() -> DFDNode:
        return build_node(
            session,
            "server",
            label,
            EXTERNAL_INPUT,
            category="server",
            endpoint=endpoint,
        )

    return session.shared_node(result, key, _create)


class RemoteQueryProcessor(Processor):
    """Consolidates a remote query/mutation hook into one node fed by a Server node."""

    fetch_label = "fetch"
    mutate_label = "mutate"

    def return_map_for(self, invocation: HookInvocation) -> ReturnMap:
        raise NotImplementedError

    def endpoint_for(self, invocation: HookInvocation) -> Optional[str]:
        return invocation.first_literal()

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        mapping = self.return_map_for(invocation)
        bound = bind_properties(invocation, mapping)
        node = build_node(
            session,
            "library_hook",
            invocation.name,
            DATA_STORE,
            invocation,
            category="library-hook",
            is_library_hook=True,
            processor=self.id,
            operation=mapping.operation,
            **summarize(bound, mapping, invocation.binding),
        )
        result.add_node(node)

        if mapping.operation == OPERATION_CONFIG:
            endpoint = None
        else:
            endpoint = self.endpoint_for(invocation)
            if endpoint is None:
                logger.warning(
                    "No static endpoint for %s at %s; omitting its Server node",
                    invocation.name,
                    _where(invocation),
                )
                return result

        server = server_node(session, result, endpoint)
        node.metadata["server_node_id"] = server.id
        if endpoint:
            node.metadata["endpoint"] = endpoint
        if mapping.operation in (OPERATION_MUTATION, OPERATION_CONFIG):
            result.add_edge(node.id, server.id, self.mutate_label)
        else:
            result.add_edge(server.id, node.id, self.fetch_label)
        return result


def _where(invocation: HookInvocation) -> str:
    if invocation.position is None:
        return "unknown position"
    return f"line {invocation.position.line}"


class _MappedRemoteProcessor(RemoteQueryProcessor):
    maps: Mapping[str, ReturnMap] = {}

    def return_map_for(self, invocation: HookInvocation) -> ReturnMap:
        return self.maps[invocation.name]


class SWRProcessor(_MappedRemoteProcessor):
    metadata = ProcessorMetadata(
        id="swr",
        library="swr",
        package_patterns=("swr", "swr/*"),
        hook_names=tuple(SWR_MAPS),
        priority=LIBRARY_PRIORITY,
        description="SWR data fetching hooks",
    )
    maps = SWR_MAPS


class TanStackQueryProcessor(_MappedRemoteProcessor):
    metadata = ProcessorMetadata(
        id="tanstack-query",
        library="@tanstack/react-query",
        package_patterns=("@tanstack/*-query", "react-query"),
        hook_names=tuple(TANSTACK_QUERY_MAPS),
        priority=LIBRARY_PRIORITY,
        description="TanStack Query hooks",
    )
    maps = TANSTACK_QUERY_MAPS


class ApolloProcessor(_MappedRemoteProcessor):
    metadata = ProcessorMetadata(
        id="apollo",
        library="@apollo/client",
        package_patterns=("@apollo/client", "@apollo/client/*"),
        hook_names=tuple(APOLLO_MAPS),
        priority=LIBRARY_PRIORITY,
        description="Apollo Client GraphQL hooks",
    )
    maps = APOLLO_MAPS

    def endpoint_for(self, invocation: HookInvocation) -> Optional[str]:
        # the query document constant names the operation
        return invocation.first_identifier() or invocation.first_literal()


_RTK_QUERY = re.compile(r"^use(?:Lazy)?(\w+)Query$")
_RTK_MUTATION = re.compile(r"^use(\w+)Mutation$")


class RTKQueryProcessor(RemoteQueryProcessor):
    metadata = ProcessorMetadata(
        id="rtk-query",
        library="@reduxjs/toolkit",
        package_patterns=("@reduxjs/toolkit", "@reduxjs/toolkit/*"),
        hook_names=(re.compile(r"use\w+Query"), re.compile(r"use\w+Mutation")),
        priority=LIBRARY_PRIORITY,
        description="RTK Query generated endpoint hooks",
    )

    def return_map_for(self, invocation: HookInvocation) -> ReturnMap:
        if _RTK_MUTATION.match(invocation.name):
            return RTK_MUTATION_MAP
        return RTK_QUERY_MAP

    def endpoint_for(self, invocation: HookInvocation) -> Optional[str]:
        match = _RTK_MUTATION.match(invocation.name) or _RTK_QUERY.match(invocation.name)
        if match is None:
            return None
        name = match.group(1)
        return name[:1].lower() + name[1:]


class TRPCProcessor(RemoteQueryProcessor):
    metadata = ProcessorMetadata(
        id="trpc",
        library="@trpc/react-query",
        package_patterns=("@trpc/*",),
        hook_names=(re.compile(r"(?:trpc|api)\..+\.useQuery"), re.compile(r"(?:trpc|api)\..+\.useMutation")),
        priority=LIBRARY_PRIORITY,
        description="tRPC procedure hooks",
    )
    fetch_label = "query"

    def return_map_for(self, invocation: HookInvocation) -> ReturnMap:
        if invocation.name.endswith(".useMutation"):
            return TRPC_MUTATION_MAP
        return TRPC_QUERY_MAP

    def endpoint_for(self, invocation: HookInvocation) -> Optional[str]:
        # trpc.user.byId.useQuery -> user.byId
        parts = invocation.name.split(".")
        return ".".join(parts[1:-1]) or None


__all__ = [
    "ApolloProcessor",
    "RTKQueryProcessor",
    "RemoteQueryProcessor",
    "SWRProcessor",
    "TRPCProcessor",
    "TanStackQueryProcessor",
    "server_node",
]
