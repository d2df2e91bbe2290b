"""
Upload Session for one API entry

Drives the two-phase upload of a single name@version: one signed upload
slot and one byte transfer per file, strictly in sequence, followed by a
single push call that finalizes the revision.
"""

import logging
from typing import Optional
from urllib.parse import quote

from rich.console import Console

from apipush.core.config_manager import ResolvedConfig
from apipush.interfaces.registry import IRegistryGateway

from .exceptions import FileTransferFailure
from .file_collector import FileCollector
from .fingerprint import hash_files
from .models import (
    ApiEntry,
    PrepareUploadRequest,
    PushRequest,
    PushResult,
    UploadOptions,
    UploadSessionState
)


logger = logging.getLogger(__name__)


def encode_api_name(name: str) -> str:
    """Percent-encode an API name for use as a URL path segment"""
    return quote(name, safe="!~*'()")


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


class UploadSession:
    """Uploads and pushes the file set of one API entry"""

    def __init__(self, gateway: IRegistryGateway, console: Console, collector: Optional[FileCollector] = None):
        self.gateway = gateway
        self.console = console
        self.collector = collector or FileCollector()

    def run(self, entry: ApiEntry, resolved_config: ResolvedConfig, options: UploadOptions) -> PushResult:
        """Upload every file of the entry, then finalize the push"""
        collected = self.collector.collect(entry.root, resolved_config)
        files_hash = hash_files(collected.files)
        encoded_name = encode_api_name(entry.name)
        total = len(collected.files)
        state = UploadSessionState(total=total)

        logger.debug(f"Pushing {entry.key} with files hash {files_hash}")
        self.console.print(f"Uploading {total} {pluralize('file', total)}:")

        for file in collected.files:
            slot = self.gateway.prepare_file_upload(PrepareUploadRequest(
                organization_id=options.organization_id,
                name=encoded_name,
                version=entry.version,
                files_hash=files_hash,
                filename=file.key_on_s3,
                is_upsert=options.upsert
            ))

            if file.file_path == collected.root:
                state.root_file_path = slot.file_path

            state.file_paths.append(slot.file_path)

            transfer = self.gateway.upload_file(slot.signed_upload_url, file)
            state.uploaded_count += 1
            counter = f"({state.uploaded_count}/{total})"

            if not transfer.ok:
                failure = FileTransferFailure(
                    f"File upload failed: {file.key_on_s3}",
                    file_path=file.file_path,
                    status_code=transfer.status
                )
                logger.warning(f"{failure} (status {transfer.status}): {transfer.error_message}")
                state.failed_files.append(file.key_on_s3)
                self.console.print(f"✗ {counter}\nFile upload failed\n", style="red")
                continue

            self.console.print(f"✓ {counter}", style="green")

        self.console.print()

        batch_job = options.batch_job
        self.gateway.push_api(PushRequest(
            organization_id=options.organization_id,
            name=encoded_name,
            version=entry.version,
            root_file_path=state.root_file_path,
            file_paths=list(state.file_paths),
            branch=options.branch,
            is_upsert=options.upsert,
            is_public=options.public,
            batch_id=batch_job.job_id,
            batch_size=batch_job.batch_size
        ))

        return PushResult(
            api_key=entry.key,
            files_hash=files_hash,
            root_file_path=state.root_file_path,
            file_paths=list(state.file_paths),
            failed_files=list(state.failed_files)
        )
