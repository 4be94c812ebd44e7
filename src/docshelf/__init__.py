"""Docshelf - manifest-driven documentation site core."""

from docshelf.core.context import BuildContext, Page

__all__ = ["BuildContext", "Page"]
