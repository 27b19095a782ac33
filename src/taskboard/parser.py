"""Parse record documents: markdown with YAML front-matter."""

import re

import yaml


def _is_title(line: str) -> bool:
    return line.startswith("# ") or line == "#"


def parse_document(text: str) -> tuple[str, str, dict]:
    """Parse a record document into (title, body, meta).

    The title is the first h1; everything after it is the body, later h1
    lines included. Text before the first h1 is kept as body when there
    is no h1 at all.
    """
    text, meta = _extract_front_matter(text)
    lines = text.split("\n")

    in_code_fence = False
    for i, line in enumerate(lines):
        if line.startswith("```"):
            in_code_fence = not in_code_fence
        if not in_code_fence and _is_title(line):
            title = line[2:]
            body = "\n".join(lines[i + 1 :]).strip("\n")
            return title, body, meta

    return "", text.strip(), meta


def serialize_document(title: str, body: str = "", meta: dict | None = None) -> str:
    """Serialize a title, body and meta back to markdown text.

    Meta becomes YAML front-matter if non-empty. The h1 line is always
    written, so a heading in the body is never read back as the title.
    """
    parts: list[str] = []

    if meta:
        parts.append("---")
        parts.append(yaml.safe_dump(meta, default_flow_style=False, sort_keys=False).rstrip())
        parts.append("---")
        parts.append("")

    parts.append(f"# {title}")
    if body:
        parts.append("")
        parts.append(body)

    return "\n".join(parts).rstrip("\n") + "\n"


def _extract_front_matter(text: str) -> tuple[str, dict]:
    """Extract YAML front-matter from text. Returns (remaining_text, meta)."""
    if not text.startswith("---"):
        return text, {}

    # Find the closing ---
    match = re.match(r"^---\n(.*?)\n---\n?", text, re.DOTALL)
    if not match:
        return text, {}

    yaml_content = match.group(1)
    remaining = text[match.end() :]

    try:
        meta = yaml.safe_load(yaml_content) or {}
    except yaml.YAMLError:
        meta = {}

    if not isinstance(meta, dict):
        meta = {}

    return remaining, meta
