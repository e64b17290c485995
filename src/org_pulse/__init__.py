"""org-pulse: GitHub organization activity statistics."""

__version__ = "0.3.0"
