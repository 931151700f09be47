"""URL path helpers used to resolve service and route paths.

Paths may contain template variables such as ``{id}`` or ``{*filepath}``.
Cleaning works on separators and dot segments only and never splits or
rewrites text inside braces.
"""

import re

ABSOLUTE_OVERRIDE = "//"

_PARAM_RE = re.compile(r"\{\*?([^{}/]+)\}")


def _segments(p: str) -> list[str]:
    """Split p on '/' outside of template braces."""
    segments: list[str] = []
    buf: list[str] = []
    depth = 0
    for ch in p:
        if ch == "{":
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
        if ch == "/" and depth == 0:
            segments.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    segments.append("".join(buf))
    return segments


def balanced_braces(p: str) -> bool:
    """True when every '{' of p is closed by a matching '}'."""
    depth = 0
    for ch in p:
        if ch == "{":
            depth += 1
        elif ch == "}":
            if not depth:
                return False
            depth -= 1
    return depth == 0


def clean_path(p: str) -> str:
    """Return the canonical form of a URL path.

    The result always starts with '/', repeated separators are collapsed,
    '.' and '..' segments are resolved and a trailing slash is kept.
    Text after an unclosed '{' is left as is; RouteExpr.validate reports
    such paths.

    Examples:
        clean_path("//x")            -> "/x"
        clean_path("/a//b/../{id}/") -> "/a/{id}/"
    """
    if not p:
        return "/"
    trailing = len(p) > 1 and p.endswith("/")
    out: list[str] = []
    for seg in _segments(p):
        if seg in ("", "."):
            continue
        if seg == "..":
            if out:
                out.pop()
            continue
        out.append(seg)
    cleaned = "/" + "/".join(out)
    if trailing and cleaned != "/":
        cleaned += "/"
    return cleaned


def join_paths(*parts: str) -> str:
    """Join the non-empty parts and clean the result, dropping any trailing slash.

    Returns the empty string when every part is empty.
    """
    joined = "/".join(p for p in parts if p)
    if not joined:
        return ""
    cleaned = clean_path(joined)
    if len(cleaned) > 1 and cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned


def is_absolute_override(p: str) -> bool:
    """Paths starting with '//' bypass API and parent prefixes."""
    return p.startswith(ABSOLUTE_OVERRIDE)


def path_params(p: str) -> list[str]:
    """Names of the template variables of p, in order of appearance."""
    return _PARAM_RE.findall(p)
