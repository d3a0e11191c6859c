"""Declarative return-value maps for library hooks.

Each map tags the properties a hook returns with the DFD element type they
become. Properties missing from a map default to ``data-store``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..models import (
    BINDING_ARRAY,
    BINDING_IDENTIFIER,
    DATA_STORE,
    EXTERNAL_INPUT,
    PROCESS,
    ROLE_DATA,
    ROLE_FUNCTION,
    HookInvocation,
)

INPUT = EXTERNAL_INPUT
STORE = DATA_STORE

OPERATION_QUERY = "query"
OPERATION_MUTATION = "mutation"
OPERATION_CONFIG = "config"
OPERATION_LOCAL = "local"


@dataclass(frozen=True)
class ReturnMap:
    """Property name to element type for one hook."""

    hook: str
    properties: Tuple[Tuple[str, str], ...]
    operation: str = OPERATION_QUERY
    positional: Tuple[str, ...] = ()

    def element_type(self, property_name: str) -> str:
        for name, element_type in self.properties:
            if name == property_name:
                return element_type
        return STORE

    def role(self, property_name: str) -> str:
        return ROLE_FUNCTION if self.element_type(property_name) == PROCESS else ROLE_DATA

    @property
    def property_names(self) -> List[str]:
        return [name for name, _ in self.properties]


@dataclass(frozen=True)
class BoundProperty:
    """A variable bound to one returned property."""

    variable: str
    property: str
    element_type: str

    @property
    def role(self) -> str:
        return ROLE_FUNCTION if self.element_type == PROCESS else ROLE_DATA


def return_map(
    hook: str,
    operation: str = OPERATION_QUERY,
    positional: Tuple[str, ...] = (),
    **properties: str,
) -> ReturnMap:
    return ReturnMap(
        hook=hook,
        properties=tuple(properties.items()),
        operation=operation,
        positional=positional,
    )


def bind_properties(invocation: HookInvocation, mapping: ReturnMap) -> List[BoundProperty]:
    """Resolve each bound variable of ``invocation`` to the property it holds.

    Identifier bindings hold the whole returned object and are always data.
    """
    bound: List[BoundProperty] = []
    if invocation.binding == BINDING_IDENTIFIER:
        for variable in invocation.variables:
            bound.append(BoundProperty(variable, variable, STORE))
        return bound
    for index, variable in enumerate(invocation.variables):
        if variable in invocation.aliases:
            property_name = invocation.aliases[variable]
        elif invocation.binding == BINDING_ARRAY and index < len(mapping.positional):
            property_name = mapping.positional[index]
        else:
            property_name = variable
        bound.append(BoundProperty(variable, property_name, mapping.element_type(property_name)))
    return bound


def summarize(bound: List[BoundProperty], mapping: Optional[ReturnMap], binding: str) -> Dict[str, object]:
    """Node metadata describing the bound properties."""
    if binding == BINDING_IDENTIFIER and mapping is not None:
        properties = mapping.property_names
        property_metadata = {name: element_type for name, element_type in mapping.properties}
    else:
        properties = [item.property for item in bound]
        property_metadata = {item.property: item.element_type for item in bound}
    return {
        "properties": properties,
        "data_properties": [name for name in properties if property_metadata.get(name, STORE) != PROCESS],
        "process_properties": [name for name in properties if property_metadata.get(name) == PROCESS],
        "property_metadata": property_metadata,
        "variables": {item.variable: item.role for item in bound},
        "aliases": {item.variable: item.property for item in bound if item.variable != item.property},
    }


SWR_MAPS: Mapping[str, ReturnMap] = {
    "useSWR": return_map(
        "useSWR", data=INPUT, error=STORE, isLoading=STORE, isValidating=STORE, mutate=PROCESS
    ),
    "useSWRInfinite": return_map(
        "useSWRInfinite",
        data=INPUT,
        error=STORE,
        isLoading=STORE,
        isValidating=STORE,
        size=STORE,
        setSize=PROCESS,
        mutate=PROCESS,
    ),
    "useSWRMutation": return_map(
        "useSWRMutation",
        OPERATION_MUTATION,
        data=INPUT,
        error=STORE,
        trigger=PROCESS,
        isMutating=STORE,
        reset=PROCESS,
    ),
    "useSWRConfig": return_map("useSWRConfig", OPERATION_CONFIG, mutate=PROCESS, cache=STORE),
}

TANSTACK_QUERY_MAPS: Mapping[str, ReturnMap] = {
    "useQuery": return_map(
        "useQuery",
        data=INPUT,
        error=STORE,
        isLoading=STORE,
        isFetching=STORE,
        isError=STORE,
        isPending=STORE,
        refetch=PROCESS,
        status=STORE,
    ),
    "useSuspenseQuery": return_map(
        "useSuspenseQuery", data=INPUT, error=STORE, isFetching=STORE, refetch=PROCESS, status=STORE
    ),
    "useMutation": return_map(
        "useMutation",
        OPERATION_MUTATION,
        mutate=PROCESS,
        mutateAsync=PROCESS,
        data=INPUT,
        error=STORE,
        isLoading=STORE,
        isPending=STORE,
        isError=STORE,
        status=STORE,
        reset=PROCESS,
    ),
    "useInfiniteQuery": return_map(
        "useInfiniteQuery",
        data=INPUT,
        error=STORE,
        isLoading=STORE,
        isFetching=STORE,
        isError=STORE,
        hasNextPage=STORE,
        isFetchingNextPage=STORE,
        fetchNextPage=PROCESS,
        fetchPreviousPage=PROCESS,
        refetch=PROCESS,
        status=STORE,
    ),
}

APOLLO_MAPS: Mapping[str, ReturnMap] = {
    "useQuery": return_map(
        "useQuery",
        data=INPUT,
        loading=STORE,
        error=STORE,
        refetch=PROCESS,
        fetchMore=PROCESS,
        networkStatus=STORE,
        called=STORE,
    ),
    "useLazyQuery": return_map(
        "useLazyQuery",
        positional=("execute", "result"),
        execute=PROCESS,
        data=INPUT,
        loading=STORE,
        error=STORE,
        called=STORE,
        refetch=PROCESS,
    ),
    "useMutation": return_map(
        "useMutation",
        OPERATION_MUTATION,
        positional=("mutate", "result"),
        mutate=PROCESS,
        data=INPUT,
        loading=STORE,
        error=STORE,
        called=STORE,
        reset=PROCESS,
    ),
    "useSubscription": return_map(
        "useSubscription", data=INPUT, loading=STORE, error=STORE
    ),
}

RTK_QUERY_MAP = return_map(
    "query",
    data=INPUT,
    currentData=INPUT,
    error=STORE,
    isLoading=STORE,
    isFetching=STORE,
    isError=STORE,
    isSuccess=STORE,
    refetch=PROCESS,
    status=STORE,
)

RTK_MUTATION_MAP = return_map(
    "mutation",
    OPERATION_MUTATION,
    positional=("trigger", "result"),
    trigger=PROCESS,
    data=INPUT,
    error=STORE,
    isLoading=STORE,
    isError=STORE,
    isSuccess=STORE,
    reset=PROCESS,
    status=STORE,
)

TRPC_QUERY_MAP = return_map(
    "useQuery", data=INPUT, error=STORE, isLoading=STORE, isFetching=STORE, refetch=PROCESS
)

TRPC_MUTATION_MAP = return_map(
    "useMutation",
    OPERATION_MUTATION,
    mutate=PROCESS,
    mutateAsync=PROCESS,
    data=INPUT,
    error=STORE,
    isLoading=STORE,
    isPending=STORE,
)

REACT_HOOK_FORM_MAPS: Mapping[str, ReturnMap] = {
    "useForm": return_map(
        "useForm",
        OPERATION_LOCAL,
        register=PROCESS,
        handleSubmit=PROCESS,
        setValue=PROCESS,
        reset=PROCESS,
        watch=PROCESS,
        getValues=PROCESS,
        trigger=PROCESS,
        setError=PROCESS,
        clearErrors=PROCESS,
        formState=STORE,
        control=STORE,
    ),
    "useController": return_map("useController", OPERATION_LOCAL, field=STORE, fieldState=STORE),
    "useWatch": return_map("useWatch", OPERATION_LOCAL, value=INPUT),
    "useFormState": return_map(
        "useFormState",
        OPERATION_LOCAL,
        isDirty=STORE,
        isValid=STORE,
        errors=STORE,
        isSubmitting=STORE,
        isLoading=STORE,
        isValidating=STORE,
        touchedFields=STORE,
        dirtyFields=STORE,
    ),
    "useFieldArray": return_map(
        "useFieldArray",
        OPERATION_LOCAL,
        fields=STORE,
        append=PROCESS,
        prepend=PROCESS,
        remove=PROCESS,
        insert=PROCESS,
        update=PROCESS,
        move=PROCESS,
        swap=PROCESS,
        replace=PROCESS,
    ),
}


__all__ = [
    "APOLLO_MAPS",
    "BoundProperty",
    "INPUT",
    "OPERATION_CONFIG",
    "OPERATION_LOCAL",
    "OPERATION_MUTATION",
    "OPERATION_QUERY",
    "REACT_HOOK_FORM_MAPS",
    "RTK_MUTATION_MAP",
    "RTK_QUERY_MAP",
    "ReturnMap",
    "STORE",
    "SWR_MAPS",
    "TANSTACK_QUERY_MAPS",
    "TRPC_MUTATION_MAP",
    "TRPC_QUERY_MAP",
    "bind_properties",
    "return_map",
    "summarize",
]
