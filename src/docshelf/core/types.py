"""Core type definitions."""

from enum import StrEnum
from typing import NewType

# URL path for routing (e.g., "guides/deploy", "" for the root page)
# Distinct from source paths to catch type mismatches
URLPath = NewType("URLPath", str)

# Document path relative to the content root (e.g., "./guides/deploy.md")
SourcePath = NewType("SourcePath", str)


class NavigationMode(StrEnum):
    """How nested routes are addressed."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"
