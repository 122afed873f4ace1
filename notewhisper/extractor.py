"""Find embedded audio references in note text."""

from __future__ import annotations

import re
from typing import Iterable, List

from .models import PROCESSED_MARKER, AudioReference

AUDIO_EXTENSIONS = (".m4a",)

_EMBED_RE = re.compile(r"!\[\[([^\[\]\n]+?)\]\]")
_MARKER_RE = re.compile(re.escape(PROCESSED_MARKER) + r"(?![\w/-])")


def strip_reference(raw: str) -> str:
    """Drop the ``|alias`` and ``#fragment`` parts of an embed target."""

    path = raw.split("|", 1)[0]
    path = path.split("#", 1)[0]
    return path.strip()


def is_marked(text: str, end: int) -> bool:
    """Return True when the processed marker follows position ``end`` on the same line."""

    rest = text[end:]
    newline = rest.find("\n")
    if newline != -1:
        rest = rest[:newline]
    return _MARKER_RE.match(rest.lstrip(" \t")) is not None


def extract_references(text: str, extensions: Iterable[str] = AUDIO_EXTENSIONS) -> List[AudioReference]:
    """Return unprocessed audio references in order of appearance."""

    suffixes = tuple(ext.lower() for ext in extensions)
    references: List[AudioReference] = []
    for line in text.splitlines():
        for match in _EMBED_RE.finditer(line):
            if is_marked(line, match.end()):
                continue
            raw = match.group(1)
            path = strip_reference(raw)
            if path.lower().endswith(suffixes):
                references.append(AudioReference(raw=raw, path=path))
    return references
