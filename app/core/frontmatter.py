"""Front-matter rendering and parsing for saved documents.

Layout:

    ---
    key: "value"
    ---

    body

Parsing is best effort: anything without that structure comes back as
`({}, text)`.
"""

from __future__ import annotations

import re
from typing import Mapping

FRONTMATTER_RE = re.compile(
    r"\A---\n(?:(?P<fields>.*?)\n)?---\n(?P<body>.*)\Z",
    re.DOTALL,
)
_ESCAPE_RE = re.compile(r'\\(["\\])')
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


def _quote(value: str) -> str:
    value = _NEWLINE_RE.sub(" ", value)
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{value}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return _ESCAPE_RE.sub(r"\1", value[1:-1])
    return value


def render_frontmatter(fields: Mapping[str, str | None]) -> str:
    """Render fields as a front-matter block ending with the closing `---` line.

    Fields with a None value are omitted. Newlines inside values are folded
    to spaces, so a multi-line value reads back as a single line; every
    other value round-trips through `parse_frontmatter` unchanged.
    """
    lines = ["---"]
    for key, value in fields.items():
        if value is None:
            continue
        lines.append(f"{key}: {_quote(str(value))}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def parse_frontmatter(text: str) -> tuple[dict[str, str], str]:
    """Split a saved document into header fields and body.

    Only the first `:` of a line separates key from value, so URLs survive.
    The blank line after the closing delimiter is not part of the body.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    fields: dict[str, str] = {}
    for line in (match.group("fields") or "").split("\n"):
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        fields[key] = _unquote(value.strip())

    body = match.group("body")
    if body.startswith("\n"):
        body = body[1:]
    return fields, body
