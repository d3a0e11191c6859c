"""Static table of hook/composable names whose category is known up front."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..models import ROLE_DATA, ROLE_FUNCTION

CATEGORY_STATE = "state"
CATEGORY_REDUCER = "reducer"
CATEGORY_CONTEXT = "context"
CATEGORY_REF = "ref"
CATEGORY_EFFECT = "effect"
CATEGORY_CALLBACK = "callback"
CATEGORY_MEMO = "memo"
CATEGORY_COMPUTED = "computed"
CATEGORY_LIFECYCLE = "lifecycle"
CATEGORY_PROPS = "props"
CATEGORY_DATA_FETCHING = "data-fetching"
CATEGORY_STATE_MANAGEMENT = "state-management"
CATEGORY_ROUTING = "routing"
CATEGORY_FORM = "form"
CATEGORY_CUSTOM = "custom"

_PAIR = (ROLE_DATA, ROLE_FUNCTION)
_VALUE = (ROLE_DATA,)


@dataclass(frozen=True)
class BuiltinHook:
    """Known hook with a pre-assigned category.

    ``positional_roles`` assigns roles by binding position for tuple-returning
    hooks. ``delegated`` hooks belong to libraries whose processors carry their
    own return-value maps, so the classifier leaves their roles empty.
    """

    name: str
    category: str
    framework: Optional[str] = None
    read_only: bool = False
    positional_roles: Tuple[str, ...] = ()
    reducer: bool = False
    delegated: bool = False

    @property
    def builtin(self) -> bool:
        return not self.delegated


def _entries(
    names: Iterable[str], category: str, framework: Optional[str] = None, **options: object
) -> Dict[str, BuiltinHook]:
    return {
        name: BuiltinHook(name=name, category=category, framework=framework, **options)  # type: ignore[arg-type]
        for name in names
    }


def _build_table() -> Dict[str, BuiltinHook]:
    table: Dict[str, BuiltinHook] = {}

    # React
    table.update(_entries(["useState", "useOptimistic"], CATEGORY_STATE, "react", positional_roles=_PAIR))
    table.update(
        _entries(
            ["useActionState"],
            CATEGORY_STATE,
            "react",
            positional_roles=(ROLE_DATA, ROLE_FUNCTION, ROLE_DATA),
        )
    )
    table.update(
        _entries(["useTransition"], CATEGORY_STATE, "react", positional_roles=_PAIR)
    )
    table.update(
        _entries(["useReducer"], CATEGORY_REDUCER, "react", positional_roles=_PAIR, reducer=True)
    )
    table.update(_entries(["useContext", "use"], CATEGORY_CONTEXT, "react", read_only=True))
    table.update(_entries(["useRef"], CATEGORY_REF, "react", read_only=True))
    table.update(
        _entries(
            ["useEffect", "useLayoutEffect", "useInsertionEffect", "useImperativeHandle", "useDebugValue"],
            CATEGORY_EFFECT,
            "react",
        )
    )
    table.update(
        _entries(["useCallback"], CATEGORY_CALLBACK, "react", positional_roles=(ROLE_FUNCTION,))
    )
    table.update(
        _entries(
            ["useMemo", "useDeferredValue", "useId", "useSyncExternalStore"],
            CATEGORY_MEMO,
            "react",
            read_only=True,
        )
    )

    # Vue composition API
    table.update(
        _entries(
            ["ref", "shallowRef", "reactive", "shallowReactive", "toRef", "customRef"],
            CATEGORY_STATE,
            "vue",
            positional_roles=_VALUE,
        )
    )
    table.update(_entries(["computed", "readonly"], CATEGORY_COMPUTED, "vue", read_only=True))
    table.update(_entries(["inject", "provide"], CATEGORY_CONTEXT, "vue", read_only=True))
    table.update(_entries(["watch", "watchEffect", "watchPostEffect"], CATEGORY_EFFECT, "vue"))
    table.update(
        _entries(
            [
                "onMounted",
                "onUnmounted",
                "onBeforeMount",
                "onBeforeUnmount",
                "onUpdated",
                "onBeforeUpdate",
                "onActivated",
                "onDeactivated",
                "nextTick",
            ],
            CATEGORY_LIFECYCLE,
            "vue",
        )
    )

    # Svelte runes and stores
    table.update(_entries(["$state", "$state.raw", "$bindable"], CATEGORY_STATE, "svelte", positional_roles=_VALUE))
    table.update(_entries(["$derived", "$derived.by"], CATEGORY_COMPUTED, "svelte", read_only=True))
    table.update(_entries(["$effect", "$effect.pre", "$inspect"], CATEGORY_EFFECT, "svelte"))
    table.update(_entries(["$props"], CATEGORY_PROPS, "svelte", read_only=True))
    table.update(_entries(["writable"], CATEGORY_STATE_MANAGEMENT, "svelte", positional_roles=_VALUE))
    table.update(_entries(["readable", "get"], CATEGORY_STATE_MANAGEMENT, "svelte", read_only=True))
    table.update(_entries(["derived"], CATEGORY_COMPUTED, "svelte", read_only=True))
    table.update(_entries(["onMount", "onDestroy", "beforeUpdate", "afterUpdate", "tick"], CATEGORY_LIFECYCLE, "svelte"))

    # Third-party libraries with processor-owned return maps
    table.update(
        _entries(
            [
                "useSWR",
                "useSWRMutation",
                "useSWRConfig",
                "useSWRInfinite",
                "useQuery",
                "useMutation",
                "useInfiniteQuery",
                "useSuspenseQuery",
                "useLazyQuery",
                "useSubscription",
                "useQueryClient",
            ],
            CATEGORY_DATA_FETCHING,
            delegated=True,
        )
    )
    table.update(
        _entries(
            ["useAtom", "useAtomValue", "useSetAtom", "useLocalObservable", "useObserver", "storeToRefs"],
            CATEGORY_STATE_MANAGEMENT,
            delegated=True,
        )
    )
    table.update(
        _entries(
            [
                "useRouter",
                "usePathname",
                "useSearchParams",
                "useParams",
                "useNavigate",
                "useLocation",
                "useRouterState",
                "useSearch",
                "useRoute",
                "onBeforeRouteUpdate",
                "onBeforeRouteLeave",
                "goto",
                "beforeNavigate",
                "afterNavigate",
                "page",
                "navigating",
                "updated",
            ],
            CATEGORY_ROUTING,
            delegated=True,
        )
    )
    table.update(
        _entries(
            ["useForm", "useController", "useWatch", "useFormState", "useFieldArray"],
            CATEGORY_FORM,
            delegated=True,
        )
    )
    return table


BUILTIN_HOOKS: Dict[str, BuiltinHook] = _build_table()


def lookup_builtin(name: str) -> Optional[BuiltinHook]:
    return BUILTIN_HOOKS.get(name)


__all__ = [
    "BUILTIN_HOOKS",
    "BuiltinHook",
    "CATEGORY_CALLBACK",
    "CATEGORY_COMPUTED",
    "CATEGORY_CONTEXT",
    "CATEGORY_CUSTOM",
    "CATEGORY_DATA_FETCHING",
    "CATEGORY_EFFECT",
    "CATEGORY_FORM",
    "CATEGORY_LIFECYCLE",
    "CATEGORY_MEMO",
    "CATEGORY_PROPS",
    "CATEGORY_REDUCER",
    "CATEGORY_REF",
    "CATEGORY_ROUTING",
    "CATEGORY_STATE",
    "CATEGORY_STATE_MANAGEMENT",
    "lookup_builtin",
]
