"""Reads component analysis documents produced by framework extractors.

A document is a JSON or YAML mapping describing one component: its props,
hook invocations, local processes, handlers exposed through a ref, atom
definitions, declared types and the rendered-output tree. Anything that cannot
be turned into a :class:`~dfdgen.models.ComponentAnalysis` raises
:class:`ExtractionError`.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .logging import get_logger
from .models import (
    ARG_IDENTIFIER,
    ARG_LITERAL,
    ARG_OPAQUE,
    BINDING_ARRAY,
    BINDING_IDENTIFIER,
    BINDING_NONE,
    BINDING_OBJECT,
    EXPORTED_HANDLER,
    EXPR_ARROW,
    EXPR_EXPRESSION,
    EXPR_REFERENCE,
    FRAMEWORKS,
    Argument,
    AtomDefinition,
    AttributeBinding,
    ComponentAnalysis,
    Conditional,
    DisplayCall,
    Element,
    HookInvocation,
    Iteration,
    ProcessInfo,
    Prop,
    RenderNode,
    SourcePosition,
)

logger = get_logger("loader")

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")
_LITERAL_WORDS = frozenset({"true", "false", "null", "undefined"})
_BINDINGS = frozenset({BINDING_NONE, BINDING_IDENTIFIER, BINDING_ARRAY, BINDING_OBJECT})
_RENDER_KINDS = ("element", "conditional", "loop")


class ExtractionError(ValueError):
    """Raised when a component's structure cannot be extracted."""

    def __init__(self, message: str, *, component: Optional[str] = None, file_path: Optional[str] = None):
        super().__init__(message)
        self.component = component
        self.file_path = file_path


def load_document(path: Path) -> ComponentAnalysis:
    """Read ``path`` (``.json``, ``.yml`` or ``.yaml``) into a component analysis."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Cannot read {path}: {exc}", file_path=str(path)) from exc
    fmt = "json" if Path(path).suffix.lower() == ".json" else "yaml"
    return parse_document(text, fmt=fmt)


def parse_document(text: str, *, fmt: str = "yaml") -> ComponentAnalysis:
    """Parse document text; YAML parsing also accepts JSON."""
    try:
        payload = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ExtractionError(f"Document is not valid {fmt.upper()}: {exc}") from exc
    return analysis_from_dict(payload)


def analysis_from_dict(payload: Any) -> ComponentAnalysis:
    """Build a :class:`ComponentAnalysis` from a decoded document."""
    if not isinstance(payload, Mapping):
        raise ExtractionError("Analysis document must be a mapping")

    component = payload.get("component")
    file_path = _optional_str(payload.get("file"))
    error = payload.get("error")
    if error:
        raise ExtractionError(str(error), component=_optional_str(component), file_path=file_path)
    if not isinstance(component, str) or not component.strip():
        raise ExtractionError("Document is missing a component name", file_path=file_path)

    framework = _optional_str(payload.get("framework"))
    if framework is not None:
        framework = framework.lower()
        if framework not in FRAMEWORKS:
            raise ExtractionError(
                f"Unsupported framework '{framework}'", component=component, file_path=file_path
            )

    try:
        return ComponentAnalysis(
            name=component,
            framework=framework,
            file_path=file_path,
            props=tuple(_prop(item) for item in _list(payload, "props")),
            hooks=tuple(_hook(item) for item in _list(payload, "hooks")),
            processes=tuple(_process(item) for item in _list(payload, "processes")),
            atoms=tuple(_atom(item) for item in _list(payload, "atoms")),
            output=tuple(_render_tree(_list(payload, "output"))),
            types=_types(payload.get("types")),
            exported_handlers=tuple(
                _process(item, kind=EXPORTED_HANDLER) for item in _list(payload, "exported_handlers")
            ),
        )
    except ExtractionError as exc:
        if exc.component is None:
            exc.component = component
        if exc.file_path is None:
            exc.file_path = file_path
        raise


def _list(payload: Mapping[str, Any], key: str) -> List[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ExtractionError(f"'{key}' must be a list")
    return value


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ExtractionError(f"{what} entries must be mappings, got {type(value).__name__}")
    return value


def _name(data: Mapping[str, Any], what: str, key: str = "name") -> str:
    name = data.get(key)
    if not isinstance(name, str) or not name:
        raise ExtractionError(f"{what} entry is missing '{key}'")
    return name


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _names(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ExtractionError(f"'{key}' must be a list of names")
    return list(value)


def _position(data: Mapping[str, Any]) -> Optional[SourcePosition]:
    raw = data.get("position", data)
    if not isinstance(raw, Mapping):
        return None
    line = raw.get("line")
    if not isinstance(line, int) or isinstance(line, bool):
        return None
    column = raw.get("column", 0)
    return SourcePosition(line=line, column=column if isinstance(column, int) else 0)


def _prop(item: Any) -> Prop:
    if isinstance(item, str):
        return Prop(name=item)
    data = _mapping(item, "Prop")
    return Prop(
        name=_name(data, "Prop"),
        is_function=bool(data.get("function", data.get("is_function", False))),
        type_string=_optional_str(data.get("type")),
        position=_position(data),
    )


def _argument(raw: Any) -> Argument:
    if isinstance(raw, Mapping):
        if "kind" in raw:
            kind = str(raw["kind"])
            if kind not in (ARG_LITERAL, ARG_IDENTIFIER, ARG_OPAQUE):
                raise ExtractionError(f"Unknown argument kind '{kind}'")
            return Argument(kind=kind, value=_optional_str(raw.get("value")))
        for kind in (ARG_LITERAL, ARG_IDENTIFIER, ARG_OPAQUE):
            if kind in raw:
                return Argument(kind=kind, value=_optional_str(raw[kind]))
        raise ExtractionError("Argument mapping needs one of literal, identifier or opaque")
    if isinstance(raw, bool):
        return Argument(kind=ARG_LITERAL, value=str(raw).lower())
    if isinstance(raw, (int, float)):
        return Argument(kind=ARG_LITERAL, value=str(raw))
    if isinstance(raw, str):
        if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"`":
            return Argument(kind=ARG_LITERAL, value=raw[1:-1])
        if raw in _LITERAL_WORDS:
            return Argument(kind=ARG_LITERAL, value=raw)
        if _IDENTIFIER.match(raw):
            return Argument(kind=ARG_IDENTIFIER, value=raw)
        return Argument(kind=ARG_OPAQUE, value=raw)
    return Argument(kind=ARG_OPAQUE)


def _hook(item: Any) -> HookInvocation:
    data = _mapping(item, "Hook")
    name = _name(data, "Hook")
    variables = _names(data, "variables")
    binding = data.get("binding")
    if binding is None:
        if not variables:
            binding = BINDING_NONE
        elif data.get("aliases"):
            binding = BINDING_OBJECT
        else:
            binding = BINDING_IDENTIFIER if len(variables) == 1 else BINDING_ARRAY
    elif binding not in _BINDINGS:
        raise ExtractionError(f"Hook '{name}' has unknown binding '{binding}'")
    aliases = data.get("aliases") or {}
    if not isinstance(aliases, Mapping):
        raise ExtractionError(f"Hook '{name}' aliases must be a mapping")
    arguments = data.get("arguments") or []
    if not isinstance(arguments, list):
        raise ExtractionError(f"Hook '{name}' arguments must be a list")
    return HookInvocation(
        name=name,
        variables=variables,
        arguments=[_argument(raw) for raw in arguments],
        dependencies=_names(data, "dependencies"),
        position=_position(data),
        library=_optional_str(data.get("library")),
        binding=binding,
        aliases={str(key): str(value) for key, value in aliases.items()},
    )


def _process(item: Any, *, cleanup: bool = False, kind: Optional[str] = None) -> ProcessInfo:
    data = _mapping(item, "Cleanup" if cleanup else "Process")
    name = data.get("name") or ""
    if not cleanup and (not isinstance(name, str) or not name):
        raise ExtractionError("Process entry is missing 'name'")
    cleanup_raw = data.get("cleanup")
    return ProcessInfo(
        name=str(name),
        kind=kind or str(data.get("kind", "cleanup" if cleanup else "function")),
        references=_names(data, "references"),
        calls=_names(data, "calls"),
        assigns=_names(data, "assigns"),
        external_calls=_names(data, "external_calls"),
        dependencies=_names(data, "dependencies"),
        cleanup=_process(cleanup_raw, cleanup=True) if cleanup_raw is not None else None,
        position=_position(data),
    )


def _atom(item: Any) -> AtomDefinition:
    if isinstance(item, str):
        return AtomDefinition(name=item)
    data = _mapping(item, "Atom")
    return AtomDefinition(
        name=_name(data, "Atom"),
        derived=bool(data.get("derived", False)),
        dependencies=tuple(_names(data, "dependencies")),
        position=_position(data),
    )


def _types(raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ExtractionError("'types' must map names to type strings")
    return {str(name): str(value) for name, value in raw.items()}


def _attribute(item: Any) -> AttributeBinding:
    data = _mapping(item, "Attribute")
    name = _name(data, "Attribute")
    if "reference" in data:
        return AttributeBinding(
            name=name,
            kind=EXPR_REFERENCE,
            reference=_optional_str(data.get("reference")),
            source=_optional_str(data.get("source")),
        )
    for kind, key in ((EXPR_ARROW, "arrow"), (EXPR_EXPRESSION, "expression")):
        if key in data:
            body = data.get(key) or {}
            if not isinstance(body, Mapping):
                raise ExtractionError(f"Attribute '{name}' {key} body must be a mapping")
            return AttributeBinding(
                name=name,
                kind=kind,
                calls=_names(body, "calls"),
                references=_names(body, "references"),
                assigns=_names(body, "assigns"),
                source=_optional_str(data.get("source")),
            )
    raise ExtractionError(f"Attribute '{name}' needs a reference, arrow or expression")


def _display_call(item: Any) -> DisplayCall:
    data = _mapping(item, "Display call")
    return DisplayCall(callee=_name(data, "Display call", "callee"), arguments=_names(data, "arguments"))


def _render_kind(data: Mapping[str, Any]) -> str:
    kinds = [kind for kind in _RENDER_KINDS if kind in data]
    if len(kinds) != 1:
        raise ExtractionError(
            "Render nodes need exactly one of 'element', 'conditional' or 'loop'"
        )
    return kinds[0]


def _render_tree(items: List[Any]) -> List[RenderNode]:
    """Build render nodes with an explicit work list instead of recursion."""
    roots: List[RenderNode] = []
    pending: List[Tuple[List[Any], List[RenderNode]]] = [(items, roots)]
    while pending:
        raw_items, target = pending.pop()
        for raw in raw_items:
            data = _mapping(raw, "Render")
            kind = _render_kind(data)
            if kind == "element":
                node: RenderNode = Element(
                    tag=str(data["element"]),
                    display=_names(data, "display"),
                    display_calls=[_display_call(call) for call in _sequence(data, "calls")],
                    attributes=[_attribute(attr) for attr in _sequence(data, "attributes")],
                    position=_position(data),
                )
                pending.append((_sequence(data, "children"), node.children))
            elif kind == "conditional":
                expression = str(data["conditional"])
                node = Conditional(
                    expression=expression,
                    variables=_names(data, "variables") or _condition_identifiers(expression),
                    position=_position(data),
                )
                pending.append((_sequence(data, "then"), node.when_true))
                pending.append((_sequence(data, "else"), node.when_false))
            else:
                collection = str(data["loop"])
                node = Iteration(
                    collection=collection,
                    variables=_names(data, "variables"),
                    item=_optional_str(data.get("item")),
                    position=_position(data),
                )
                pending.append((_sequence(data, "body"), node.body))
            target.append(node)
    return roots


def _sequence(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ExtractionError(f"'{key}' must be a list")
    return value


_EXPRESSION_IDENTIFIER = re.compile(r"(?<![\w$.'\"])([A-Za-z_$][\w$]*)")


def _condition_identifiers(expression: str) -> List[str]:
    """Identifiers referenced by a condition when the extractor did not list them."""
    names: List[str] = []
    for match in _EXPRESSION_IDENTIFIER.finditer(expression):
        name = match.group(1)
        if name not in _LITERAL_WORDS and name not in names:
            names.append(name)
    return names


__all__ = ["ExtractionError", "analysis_from_dict", "load_document", "parse_document"]
