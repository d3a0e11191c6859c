"""Lightweight inspection of type strings reported by a type oracle.

Nothing here parses types properly; the helpers scan for balanced delimiters,
which is enough to tell callables apart and to list object members.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional

_OPENERS = "{<(["
_CLOSERS = "}>)]"
_QUOTES = "\"'`"

_FUNCTION_KEYWORD = re.compile(r"^function\s*\(")
_HANDLER_SUFFIX = re.compile(r"(?:Handler|Callback)$")
_DISPATCHER = re.compile(r"^(?:EventDispatcher|Dispatch)\b")
_NULLISH = {"null", "undefined", "void"}


def _scan(text: str) -> Iterator[tuple[int, str, int]]:
    """Yield ``(index, char, depth)`` for characters outside string literals.

    ``depth`` is the nesting level *before* the character is applied. The
    ``>`` of an arrow (``=>``) is not treated as a closing delimiter.
    """
    depth = 0
    quote: Optional[str] = None
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if quote is not None:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue
        if char in _QUOTES:
            quote = char
            index += 1
            continue
        yield index, char, depth
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and not (char == ">" and index > 0 and text[index - 1] == "="):
            depth = max(depth - 1, 0)
        index += 1


def split_top_level(text: str, separators: str) -> List[str]:
    """Split ``text`` on any separator that appears outside nested delimiters."""
    parts: List[str] = []
    start = 0
    for index, char, depth in _scan(text):
        if depth == 0 and char in separators:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return [part.strip() for part in parts if part.strip()]


def _matching_close(text: str, open_index: int) -> Optional[int]:
    target_depth: Optional[int] = None
    for index, char, depth in _scan(text):
        if index == open_index:
            target_depth = depth
            continue
        if target_depth is not None and index > open_index and depth == target_depth + 1:
            if char in _CLOSERS and not (char == ">" and text[index - 1] == "="):
                return index
    return None


def _strip_wrapping_parens(text: str) -> str:
    stripped = text.strip()
    while stripped.startswith("(") and _matching_close(stripped, 0) == len(stripped) - 1:
        stripped = stripped[1:-1].strip()
    return stripped


def _is_arrow_signature(text: str) -> bool:
    candidate = text
    if candidate.startswith("<"):
        close = _matching_close(candidate, 0)
        if close is None:
            return False
        candidate = candidate[close + 1 :].lstrip()
    if not candidate.startswith("("):
        return False
    close = _matching_close(candidate, 0)
    if close is None:
        return False
    return candidate[close + 1 :].lstrip().startswith("=>")


def is_function_type(type_string: str) -> bool:
    """Return True when ``type_string`` describes something callable.

    Unions are callable when every non-nullish member is callable, so optional
    callbacks (``((v: string) => void) | undefined``) still count.
    """
    normalized = _strip_wrapping_parens(type_string)
    if not normalized:
        return False
    members = split_top_level(normalized, "|")
    if len(members) > 1:
        callable_members = [member for member in members if member not in _NULLISH]
        if not callable_members:
            return False
        return all(is_function_type(member) for member in callable_members)
    if _is_arrow_signature(normalized):
        return True
    if _FUNCTION_KEYWORD.match(normalized):
        return True
    if normalized == "Function":
        return True
    if _HANDLER_SUFFIX.search(normalized.split("<", 1)[0]):
        return True
    return bool(_DISPATCHER.match(normalized))


def _member_name(declaration: str) -> Optional[str]:
    text = declaration.strip()
    if text.startswith("readonly "):
        text = text[len("readonly ") :].lstrip()
    if text.startswith("[") or text.startswith("("):
        # index signatures and call signatures have no usable name
        return None
    head = text
    for index, char, depth in _scan(text):
        if depth == 0 and char in ":(<":
            head = text[:index]
            break
    name = head.strip().rstrip("?").strip()
    if len(name) >= 2 and name[0] in _QUOTES and name[-1] == name[0]:
        name = name[1:-1]
    return name or None


def extract_member_names(type_string: str) -> List[str]:
    """List the member names of an object-shaped type string.

    ``{ count: number; readonly step?: number }`` yields ``["count", "step"]``.
    Anything that is not an object literal type yields an empty list.
    """
    trimmed = type_string.strip()
    if not (trimmed.startswith("{") and trimmed.endswith("}")):
        return []
    if _matching_close(trimmed, 0) != len(trimmed) - 1:
        return []
    body = trimmed[1:-1]
    names: List[str] = []
    for declaration in split_top_level(body, ";,"):
        name = _member_name(declaration)
        if name and name not in names:
            names.append(name)
    return names


__all__ = ["extract_member_names", "is_function_type", "split_top_level"]
