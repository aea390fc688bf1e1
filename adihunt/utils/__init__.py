"""Utility helpers for AdiHunt."""

from .text import slugify, make_excerpt

__all__ = ["slugify", "make_excerpt"]
