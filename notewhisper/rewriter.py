"""Write transcripts and analyses back into note text."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .extractor import is_marked
from .models import PROCESSED_MARKER, TranscriptionResult

DATE_FORMAT = "%Y-%m-%d %H:%M"


def format_transcribed_block(markup: str, created: datetime, transcript: str) -> str:
    return f"{markup} {PROCESSED_MARKER}\ncreated: {created.strftime(DATE_FORMAT)}\n\n{transcript}\n"


def find_unmarked(text: str, markup: str) -> Optional[int]:
    """Index of the first ``markup`` occurrence not already followed by the marker."""

    start = text.find(markup)
    while start != -1:
        if not is_marked(text, start + len(markup)):
            return start
        start = text.find(markup, start + len(markup))
    return None


def rewrite_document(text: str, results: Iterable[TranscriptionResult]) -> str:
    """Annotate each transcribed reference in ``text`` and append analyses.

    Matching is textual: the full embed is tried first, then the bare file
    name form. Occurrences that already carry the marker are left alone.
    """

    analyses: List[str] = []
    for result in results:
        reference = result.reference
        candidates = [reference.markup]
        basename_markup = f"![[{reference.basename}]]"
        if basename_markup != reference.markup:
            candidates.append(basename_markup)

        for markup in candidates:
            index = find_unmarked(text, markup)
            if index is not None:
                break
        else:
            logging.warning("Reference %s no longer present in note; skipping", reference.markup)
            continue

        block = format_transcribed_block(markup, result.asset.created_at, result.transcript)
        rest = text[index + len(markup):]
        # The block ends with a newline; don't stack a second one.
        rest = rest[1:] if rest.startswith("\n") else rest.lstrip(" \t")
        text = text[:index] + block + rest

        if result.analysis:
            analyses.append(f"### Analysis: {reference.basename}\n\n{result.analysis}\n")

    if analyses:
        text = text.rstrip("\n") + "\n\n" + "\n".join(analyses)
    return text
