"""Base exception for the API wrapper gateway."""


class APIWrapperError(Exception):
    """Base exception for all API wrapper errors."""
    
    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)
