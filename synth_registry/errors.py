from __future__ import annotations


class RegistryError(Exception):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(RegistryError):
    status_code = 404


class ValidationError(RegistryError):
    status_code = 422


class DecodeError(RegistryError):
    status_code = 422
