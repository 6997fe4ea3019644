"""Failures raised by the generation pipeline and the catalog."""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(CatalogError):
    status_code = 401

    def __init__(self, detail: str = "User not authenticated"):
        super().__init__(detail)


class AuthorNotFound(CatalogError):
    status_code = 404

    def __init__(self, detail: str = "User not found"):
        super().__init__(detail)


class NotFound(CatalogError):
    status_code = 404


class GenerationFailed(CatalogError):
    status_code = 502


class StorageFailed(CatalogError):
    status_code = 502
