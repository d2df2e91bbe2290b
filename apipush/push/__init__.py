"""
apipush registry push module

This module uploads API definition files to the registry and finalizes them
as an API revision via a two-phase workflow.

Phase 1: Upload - For every file, request a signed upload URL and transfer its bytes
Phase 2: Push - Finalize the uploaded file paths as a new or updated API revision
"""

from .api_client import RegistryClient
from .batch_coordinator import BatchCoordinator
from .destination import parse_destination
from .environment_detector import RegistryEnvironmentDetector
from .file_collector import FileCollector
from .fingerprint import hash_files
from .options import PushOptions, resolve_push_plan
from .upload_session import UploadSession
from .exceptions import (
    PushError,
    ValidationError,
    ResolutionError,
    FileTransferFailure,
    APIConnectionError,
    AuthenticationError,
    RegistryError,
    OrganizationNotFound,
    ApiVersionNotFound
)

__all__ = [
    'RegistryClient',
    'BatchCoordinator',
    'RegistryEnvironmentDetector',
    'FileCollector',
    'UploadSession',
    'PushOptions',
    'parse_destination',
    'hash_files',
    'resolve_push_plan',
    'PushError',
    'ValidationError',
    'ResolutionError',
    'FileTransferFailure',
    'APIConnectionError',
    'AuthenticationError',
    'RegistryError',
    'OrganizationNotFound',
    'ApiVersionNotFound'
]
