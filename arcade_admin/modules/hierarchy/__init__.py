"""Descendant resolution over ``created_by`` edges."""

from .models import HierarchyStats

__all__ = ["HierarchyStats"]
