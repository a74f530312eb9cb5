"""Subject attendance tracker: CRUD over subjects plus bunk/attend projections."""

__version__ = "1.0.0"
