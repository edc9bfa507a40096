"""Catalog loading exceptions."""

from api_wrapper.exceptions import APIWrapperError


class CatalogError(APIWrapperError):
    """Raised when the tool catalog cannot be read or fails validation.
    
    Attributes:
        path: Path of the catalog file, if known.
    """
    
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message=message, code="CATALOG_INVALID")
        self.path = path
