"""
Interfaces package for the Catalog Hub.

This package contains the abstract base interfaces used to standardize
interactions with partner APIs.
"""

from .external_api import ExternalAPIAdaptorInterface, CapabilityType
from .connector import APIConnector, HttpMethod, RequestConfig, parse_bool_payload
from .normalizer import DataNormalizer
from .cache import CacheStrategy, CacheLevel

__all__ = [
    # External API interface
    'ExternalAPIAdaptorInterface',
    'CapabilityType',

    # Connector
    'APIConnector',
    'HttpMethod',
    'RequestConfig',
    'parse_bool_payload',

    # Normalizer interface
    'DataNormalizer',

    # Cache interface
    'CacheStrategy',
    'CacheLevel',
]
