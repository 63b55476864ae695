"""
Adaptor implementations package.
This package contains the concrete adaptors for each partner catalog.
"""

from catalog_hub.adapters.implementations.partners import (
    AbcAdaptor,
    CdeAdaptor,
    PARTNER_ABC,
    PARTNER_CDE,
)

# Mapping of adaptor types to their implementation classes.
# The factory only ever instantiates adaptors listed here.
ADAPTOR_IMPLEMENTATIONS = {
    PARTNER_CDE: CdeAdaptor,
    PARTNER_ABC: AbcAdaptor,
}

__all__ = [
    "AbcAdaptor",
    "CdeAdaptor",
    "PARTNER_ABC",
    "PARTNER_CDE",
    "ADAPTOR_IMPLEMENTATIONS",
]
