"""Landmark Lens: image landmark detection with knowledge-base enrichment."""

__version__ = "0.1.0"
