"""
Domain package for the Catalog Hub.

This package contains domain models and wire schemas defining the core
business data structures. The domain layer is independent of partner
systems, the database and the web framework.
"""
