"""Map audio references to files inside the vault."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from .vault import Vault


class ResolutionError(RuntimeError):
    """Raised when a reference does not point at an existing file."""


class PathResolver:
    """Resolve reference paths the way embeds are resolved in a note.

    A reference with a folder component is taken literally. A bare file name
    goes through the vault link index first and then falls back to the
    attachments folder.
    """

    def __init__(self, vault: Vault, attachments_folder: str = "Attachments") -> None:
        self.vault = vault
        self.attachments_folder = attachments_folder.strip("/\\")

    def resolve(self, reference: str, source_path: str) -> str:
        normalized = reference.lstrip("/\\").replace("\\", "/")
        if not normalized:
            raise ResolutionError("Empty audio reference.")

        if "/" in normalized:
            if self.vault.exists(normalized):
                return normalized
            raise ResolutionError(f"Audio file not found: {normalized}")

        basename = PurePosixPath(normalized).name
        linked = self.vault.resolve_link(basename, source_path)
        if linked is not None and self.vault.exists(linked):
            logging.debug("Resolved %s via link index to %s", reference, linked)
            return linked

        fallback = f"{self.attachments_folder}/{basename}" if self.attachments_folder else basename
        if self.vault.exists(fallback):
            logging.debug("Resolved %s via attachments folder to %s", reference, fallback)
            return fallback

        raise ResolutionError(f"Audio file not found for {reference!r} (linked from {source_path})")
