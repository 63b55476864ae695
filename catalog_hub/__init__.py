"""
Catalog Hub - Unified product catalog over internal stock and partner systems.

This package aggregates partner catalogs behind per-provider adaptors, routes
checkout and sale requests to the party that owns the stock, and mirrors the
partner catalogs into the canonical product store.
"""

__version__ = "0.1.0"
