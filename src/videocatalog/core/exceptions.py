"""Custom exceptions for the video catalog service."""


class CatalogError(Exception):
    """Base exception for the video catalog service."""
    pass


class SecretError(CatalogError):
    """Exception raised when a secret cannot be resolved."""

    def __init__(self, secret_name: str, message: str):
        super().__init__(message)
        self.secret_name = secret_name


class SecretNotFound(SecretError):
    """Exception raised when the secret store has no such secret."""
    pass


class SecretUnavailable(SecretError):
    """Exception raised when the secret store cannot be reached."""
    pass


class SecretUnauthorized(SecretError):
    """Exception raised when access to a secret is denied."""
    pass


class StorageError(CatalogError):
    """Exception raised when object store operations fail."""
    pass


class ContainerNotFound(StorageError):
    """Exception raised when the target container does not exist."""
    pass


class StorageUnavailable(StorageError):
    """Exception raised when the object store cannot be reached."""
    pass


class WriteFailed(StorageError):
    """Exception raised when writing an object fails part-way."""

    def __init__(self, message: str, bytes_written: int = 0):
        super().__init__(message)
        self.bytes_written = bytes_written


class MultipartFormatError(CatalogError):
    """Exception raised when a multipart body cannot be decoded."""
    pass


class IncompleteBodyError(MultipartFormatError):
    """Exception raised when a multipart body ends inside a part."""
    pass
