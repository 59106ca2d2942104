"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class CatalogError(ServiceError):
    pass


class CatalogTransportError(CatalogError):
    """Network failure, non-2xx status or an undecodable body."""


class CatalogApplicationError(CatalogError):
    """The catalog answered but flagged the request as failed."""

    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(message or "catalog reported a failure")
