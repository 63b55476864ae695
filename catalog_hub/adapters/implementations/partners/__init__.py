"""
Partner adaptors package.
Exports adaptor classes for each supported partner catalog.
"""

from catalog_hub.adapters.implementations.partners.abc_adaptor import (
    AbcAdaptor,
    AbcNormalizer,
)
from catalog_hub.adapters.implementations.partners.base import PartnerAdaptor
from catalog_hub.adapters.implementations.partners.cde_adaptor import (
    CdeAdaptor,
    CdeNormalizer,
)

# Partner identifier constants
PARTNER_CDE = CdeAdaptor.SOURCE_NAME
PARTNER_ABC = AbcAdaptor.SOURCE_NAME

__all__ = [
    # Adaptor classes
    "PartnerAdaptor",
    "CdeAdaptor",
    "CdeNormalizer",
    "AbcAdaptor",
    "AbcNormalizer",

    # Partner identifiers
    "PARTNER_CDE",
    "PARTNER_ABC",
]
