"""Top-level package for notewhisper."""

__version__ = "0.1.0"

from . import config, extractor, resolver, rewriter, scanner  # noqa: E402

__all__ = ["config", "extractor", "resolver", "rewriter", "scanner", "__version__"]
