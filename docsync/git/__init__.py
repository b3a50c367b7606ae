"""Version-control collaborators."""

from .diff import ChangeLister

__all__ = ["ChangeLister"]
