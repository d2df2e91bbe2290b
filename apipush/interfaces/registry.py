"""
Registry gateway interface for apipush.

Defines the client capability the push workflow depends on, so the upload
session and batch coordinator work against an abstraction rather than the
HTTP client.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apipush.push.models import (
        FileRef,
        PrepareUploadRequest,
        PrepareUploadResponse,
        PushRequest,
        TransferResult
    )


class IRegistryGateway(ABC):
    """Abstract interface for registry client implementations."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    @abstractmethod
    def is_authorized_with_redocly_by_region(self) -> bool:
        """Check whether a valid token exists for the configured region."""
        pass

    @abstractmethod
    def login(self, token: str) -> None:
        """Verify and store an API key for the configured region."""
        pass

    @abstractmethod
    def prepare_file_upload(self, request: "PrepareUploadRequest") -> "PrepareUploadResponse":
        """
        Request a signed upload slot for one file.

        Returns:
            PrepareUploadResponse: Signed URL and the canonical storage path
        """
        pass

    @abstractmethod
    def upload_file(self, signed_upload_url: str, file: "FileRef") -> "TransferResult":
        """Transfer one file's bytes to a signed URL."""
        pass

    @abstractmethod
    def push_api(self, request: "PushRequest") -> None:
        """
        Finalize the uploaded files as an API revision.

        Raises:
            RegistryError: When the registry rejects the push
        """
        pass
