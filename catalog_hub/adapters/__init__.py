"""
Adapters package for the Catalog Hub.

This package contains components for integrating with partner catalogs:
- Abstract interfaces that define the contracts for adaptors
- Concrete implementations for each partner
- Factory and registry for building and resolving adaptor instances
"""

from . import interfaces

from .factory import AdaptorFactory
from .registry import AdaptorRegistry

__all__ = [
    'interfaces',
    'AdaptorFactory',
    'AdaptorRegistry',
]
