"""
Data models for the push workflow.

Plain dataclasses passed between the file collector, the upload session,
the batch coordinator and the registry client.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .exceptions import InvalidBatchSize, InvalidJobId


DEFAULT_VERSION = "latest"


@dataclass
class Destination:
    """Parsed [@organization/]name@version selector"""
    name: str
    version: str
    organization_id: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class ApiEntry:
    """One name@version entry of the API map"""
    name: str
    version: str
    root: str

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class FileRef:
    """A file to upload and the storage key it is uploaded under"""
    file_path: str
    key_on_s3: str
    contents: Optional[bytes] = None

    def read_bytes(self) -> bytes:
        if self.contents is not None:
            return self.contents
        with open(self.file_path, 'rb') as f:
            return f.read()


@dataclass
class CollectedFiles:
    """Resolved file set for one API root document"""
    root: str
    files: List[FileRef] = field(default_factory=list)


@dataclass
class BatchJob:
    """Job metadata shared by every finalize call of one invocation"""
    job_id: Optional[str] = None
    batch_size: Optional[int] = None

    def validate(self) -> None:
        if self.job_id is not None and not self.job_id.strip():
            raise InvalidJobId()
        if self.batch_size is not None:
            if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size < 2:
                raise InvalidBatchSize(self.batch_size)


@dataclass
class PrepareUploadRequest:
    """Request for a signed upload slot"""
    organization_id: str
    name: str
    version: str
    files_hash: str
    filename: str
    is_upsert: bool = False


@dataclass
class PrepareUploadResponse:
    """Signed upload slot issued by the registry"""
    signed_upload_url: str
    file_path: str


@dataclass
class TransferResult:
    """Outcome of one byte transfer to a signed URL"""
    ok: bool
    status: Optional[int] = None
    error_message: Optional[str] = None


@dataclass
class PushRequest:
    """Finalize request for one API entry"""
    organization_id: str
    name: str
    version: str
    root_file_path: str
    file_paths: List[str]
    branch: Optional[str] = None
    is_upsert: bool = False
    is_public: bool = False
    batch_id: Optional[str] = None
    batch_size: Optional[int] = None

    def to_payload(self) -> Dict:
        return {
            "rootFilePath": self.root_file_path,
            "filePaths": self.file_paths,
            "branch": self.branch,
            "isUpsert": self.is_upsert,
            "isPublic": self.is_public,
            "batchId": self.batch_id,
            "batchSize": self.batch_size,
        }


@dataclass
class UploadSessionState:
    """Mutable progress of one API entry's upload"""
    total: int
    root_file_path: str = ""
    file_paths: List[str] = field(default_factory=list)
    uploaded_count: int = 0
    failed_files: List[str] = field(default_factory=list)


@dataclass
class PushResult:
    """Result of pushing one API entry"""
    api_key: str
    files_hash: str
    root_file_path: str
    file_paths: List[str]
    failed_files: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_files


@dataclass
class UploadOptions:
    """Per-invocation flags passed through to every upload session"""
    organization_id: str
    branch: Optional[str] = None
    upsert: bool = False
    public: bool = False
    batch_job: BatchJob = field(default_factory=BatchJob)


@dataclass
class PushContext:
    """Everything the batch coordinator needs besides the API map"""
    options: UploadOptions
    started_at: float
    skip_decorators: List[str] = field(default_factory=list)
    api: Optional[str] = None


@dataclass
class BatchResult:
    """Aggregate result of a batch run"""
    results: List[PushResult] = field(default_factory=list)
    elapsed_ms: Optional[int] = None


Clock = Callable[[], float]


DOMAINS = {
    "us": "redocly.com",
    "eu": "eu.redocly.com",
}
DEFAULT_REGION = "us"


@dataclass
class RegistryClientConfig:
    """Configuration for registry API operations"""
    region: str = DEFAULT_REGION
    domain: Optional[str] = None
    access_token: Optional[str] = None
    credentials_path: Optional[str] = None
    upload_timeout: int = 300

    def __post_init__(self):
        if not self.domain:
            self.domain = DOMAINS[self.region]

    @property
    def base_url(self) -> str:
        return f"https://api.{self.domain}/registry"

    def get_headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        """Get authentication headers for API requests"""
        headers = {"Content-Type": "application/json"}
        token = access_token or self.access_token
        if token:
            headers["authorization"] = token
        return headers
