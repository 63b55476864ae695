from catalog_hub.infrastructure.repositories.product_repository import ProductRepository

__all__ = ["ProductRepository"]
