from fastapi import status
from typing import Any, Dict, Optional, Union


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                "status_code": self.status_code,
                "context": self.context
            }
        }


class IntegrationException(APIException):
    """Exception raised when a partner API call fails at the transport level."""

    def __init__(
        self,
        detail: str = "External API integration error",
        code: str = "integration_error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(status_code=status_code, detail=detail, code=code, context=context)
        self.original_exception = original_exception

        # Add original exception info to context if available
        if original_exception and self.context is not None:
            self.context["original_error"] = str(original_exception)


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[str, int],
        detail: Optional[str] = None,
        code: str = "not_found_error",
        context: Optional[Dict[str, Any]] = None
    ):
        if detail is None:
            detail = f"{resource_type} with id '{resource_id}' not found"

        merged_context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id)
        }
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            context=merged_context
        )


class ProductNotFoundError(NotFoundError):
    """Exception raised when a product id is unknown to the canonical store."""

    def __init__(self, product_id: Union[str, int], context: Optional[Dict[str, Any]] = None):
        super().__init__("Product", product_id, code="product_not_found", context=context)


class AdaptorNotFoundError(NotFoundError):
    """Exception raised when no adaptor is registered under a provider name."""

    def __init__(self, provider: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            "Adaptor",
            provider,
            detail=f"Adaptor '{provider}' is not registered",
            code="adaptor_not_found",
            context=context
        )


class AttributeNotFoundError(NotFoundError):
    """Exception raised when a product has no attribute with the given id."""

    def __init__(self, product_id: Union[str, int], attribute_id: Union[str, int]):
        super().__init__(
            "Attribute",
            attribute_id,
            detail=f"Product '{product_id}' has no attribute with id '{attribute_id}'",
            code="attribute_not_found",
            context={"product_id": str(product_id)}
        )


class ReadOnlyAttributeError(APIException):
    """Exception raised when a partner-owned attribute is edited locally."""

    def __init__(self, attribute_id: Union[str, int], provider: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Attribute '{attribute_id}' is owned by partner '{provider}' and managed by reconciliation",
            code="attribute_read_only",
            context={"attribute_id": str(attribute_id), "provider": provider}
        )


class ConfigurationError(APIException):
    """Exception raised on an integrity or configuration violation."""

    def __init__(
        self,
        detail: str = "Configuration error",
        code: str = "configuration_error",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            context=context
        )


class AdaptorConfigError(ConfigurationError):
    """Exception raised when an adaptor cannot be built or registered."""

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(detail=detail, code="adaptor_config_error", context=context)


class PersistenceError(APIException):
    """Exception raised when a write to the local store fails."""

    def __init__(
        self,
        detail: str = "Persistence error",
        code: str = "persistence_error",
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            context=context
        )
        self.original_exception = original_exception


class SnapshotUnavailableError(APIException):
    """Exception raised when reconciliation cannot obtain a catalog snapshot."""

    def __init__(
        self,
        detail: str = "No snapshot available",
        code: str = "snapshot_unavailable",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            code=code,
            context=context
        )


class CacheError(Exception):
    """Exception raised by cache backends."""
