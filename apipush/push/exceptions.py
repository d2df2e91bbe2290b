"""
Exceptions for the push workflow.

Validation errors are raised before any network activity. Registry errors
carry the server-reported error code so callers can dispatch on it.
"""

from enum import Enum
from typing import Optional


class RegistryErrorCode(Enum):
    """Error codes reported by the registry when a request is rejected"""
    ORGANIZATION_NOT_FOUND = "ORGANIZATION_NOT_FOUND"
    API_VERSION_NOT_FOUND = "API_VERSION_NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "RegistryErrorCode":
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


class PushError(Exception):
    """Base push error."""
    pass


class ValidationError(PushError):
    """Invalid arguments or configuration."""
    pass


class InvalidDestination(ValidationError):
    """Destination does not match [@organization/]name@version."""

    def __init__(self, destination: str):
        super().__init__(
            f"Destination argument value is not valid, please use the right format: "
            f"<api-name@api-version> (got '{destination}')"
        )
        self.destination = destination


class MissingOrganization(ValidationError):
    """No organization given in arguments or config."""

    def __init__(self):
        super().__init__(
            "No organization provided, please use --organization option or specify "
            "the organization field in the config file."
        )


class ApiNotFound(ValidationError):
    """The requested name@version is not in the API map."""

    def __init__(self, name: Optional[str] = None, version: Optional[str] = None):
        if name and version:
            message = (
                f"No api found that matches {name}@{version}. Please make sure you have "
                f"provided the correct data in the config file."
            )
        else:
            message = "Api not found. Please make sure you have provided the correct data in the config file."
        super().__init__(message)
        self.name = name
        self.version = version


class EmptyApiSet(ApiNotFound):
    """The resolved API map has no entries."""

    def __init__(self):
        super().__init__()


class MissingDestinationForExplicitApi(ValidationError):
    """An API root was given without a name to upload it under."""

    def __init__(self):
        super().__init__("No destination provided, please use --destination option to provide destination.")


class InvalidJobId(ValidationError):
    """Job id is empty or whitespace."""

    def __init__(self):
        super().__init__("The job-id option value is not valid, please avoid using an empty string.")


class InvalidBatchSize(ValidationError):
    """Batch size below 2."""

    def __init__(self, batch_size):
        super().__init__(
            f"The batch-size option value is not valid, please use the integer bigger than 1 (got {batch_size})."
        )
        self.batch_size = batch_size


class ResolutionError(PushError):
    """A document or one of its references could not be read."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.file_path = kwargs.get('file_path')
        self.referenced_from = kwargs.get('referenced_from')


class FileTransferFailure(PushError):
    """Byte transfer to a signed URL did not succeed."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.file_path = kwargs.get('file_path')
        self.status_code = kwargs.get('status_code')


class APIConnectionError(PushError):
    """API connection failed."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.endpoint = kwargs.get('endpoint')
        self.status_code = kwargs.get('status_code')


class AuthenticationError(PushError):
    """Authentication failed."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.endpoint = kwargs.get('endpoint')
        self.status_code = kwargs.get('status_code')


class RegistryError(PushError):
    """The registry rejected a request with an error code."""

    def __init__(self, code, **kwargs):
        self.code = code if isinstance(code, RegistryErrorCode) else RegistryErrorCode.from_value(code)
        self.raw_code = code.value if isinstance(code, RegistryErrorCode) else code
        super().__init__(kwargs.get('message') or str(self.raw_code))
        self.endpoint = kwargs.get('endpoint')
        self.status_code = kwargs.get('status_code')


class OrganizationNotFound(RegistryError):
    """The organization does not exist in the registry."""

    def __init__(self, organization_id: str, **kwargs):
        super().__init__(
            RegistryErrorCode.ORGANIZATION_NOT_FOUND,
            message=f"Organization {organization_id} not found",
            **kwargs
        )
        self.organization_id = organization_id


class ApiVersionNotFound(RegistryError):
    """The definition version does not exist in the registry."""

    def __init__(self, **kwargs):
        super().__init__(
            RegistryErrorCode.API_VERSION_NOT_FOUND,
            message="The definition version not found",
            **kwargs
        )


class InvalidRegion(ValidationError):
    """Region is not one of the known registry regions."""

    def __init__(self, region: str, known):
        super().__init__(f"Unknown region '{region}', please use one of: {', '.join(known)}")
        self.region = region
