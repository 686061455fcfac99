"""
Connector error taxonomy.

Every error is terminal to the current schema/data request and carries a
user-facing message naming the offending URL or field and the cause.
"""

from typing import Optional


class ConnectorError(Exception):
    """Base class for errors surfaced to the connector user."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def error_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"error": self.error_type, "message": self.message}


class InvalidUrlError(ConnectorError):
    """URL is missing or is not an http(s) URL."""

    def __init__(self, url: Optional[str]):
        super().__init__(f'"{url}" is not a valid url.')
        self.url = url


class TransportError(ConnectorError):
    """The URL could not be fetched."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f'"{url}" returned an error: {cause}', cause)
        self.url = url


class InvalidJsonError(ConnectorError):
    """The response body is not parseable JSON."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Invalid JSON format. {cause}", cause)


class EmptyContentError(ConnectorError):
    """The fetch succeeded but yielded no content."""

    def __init__(self, url: str):
        super().__init__(f'"{url}" returned no content.')
        self.url = url


class CacheCapacityError(ConnectorError):
    """A cached element exceeds the cache store limits."""

    def __init__(self, cause: BaseException):
        super().__init__(
            "Your request could not be cached. The rows of your dataset "
            f"probably exceed the 100KB cache limit. {cause}",
            cause,
        )


class InvalidSchemaError(ConnectorError):
    """The sample row used for schema discovery is not an object."""

    def __init__(self, message: str = "Invalid JSON format"):
        super().__init__(message)


class FieldIdentificationError(ConnectorError):
    """A field's shape could not be classified."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(
            "Unable to identify the data format of one of your fields.", cause)
