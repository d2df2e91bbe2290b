"""
Tests for Upload Session

Drives one API entry through a mocked registry gateway and checks the
order of calls, the finalize payload and per-file failure handling.
"""

import io
from unittest.mock import Mock

import pytest
from rich.console import Console

from apipush.core.config_manager import ResolvedConfig, Styleguide
from apipush.interfaces.registry import IRegistryGateway
from apipush.push.exceptions import RegistryError
from apipush.push.file_collector import FileCollector
from apipush.push.fingerprint import hash_files
from apipush.push.models import (
    ApiEntry,
    BatchJob,
    CollectedFiles,
    FileRef,
    PrepareUploadResponse,
    TransferResult,
    UploadOptions
)
from apipush.push.upload_session import UploadSession, encode_api_name


def make_gateway(transfer_results=None):
    """Gateway mock issuing one signed slot per filename"""
    gateway = Mock(spec=IRegistryGateway)
    gateway.prepare_file_upload.side_effect = lambda request: PrepareUploadResponse(
        signed_upload_url=f"https://storage.test/{request.filename}?sig=1",
        file_path=f"acme/{request.name}/{request.version}/{request.filename}"
    )
    if transfer_results is None:
        gateway.upload_file.return_value = TransferResult(ok=True, status=200)
    else:
        gateway.upload_file.side_effect = transfer_results
    return gateway


def make_collected():
    files = [
        FileRef(file_path="/defs/openapi.yaml", key_on_s3="openapi.yaml", contents=b"openapi: 3.0.0\n"),
        FileRef(file_path="/defs/paths/pets.yaml", key_on_s3="paths/pets.yaml", contents=b"get: {}\n"),
        FileRef(file_path="/defs/schemas/pet.yaml", key_on_s3="schemas/pet.yaml", contents=b"type: object\n"),
    ]
    return CollectedFiles(root="/defs/openapi.yaml", files=files)


class TestUploadSession:
    """Test cases for UploadSession.run"""

    def setup_method(self):
        """Setup for each test"""
        self.output = io.StringIO()
        self.console = Console(file=self.output, no_color=True, width=120)
        self.collector = Mock()
        self.collector.collect.return_value = make_collected()
        self.entry = ApiEntry(name="pets", version="1.0.0", root="openapi.yaml")
        self.config = ResolvedConfig(styleguide=Styleguide())
        self.options = UploadOptions(organization_id="acme", branch="main", upsert=True, public=False)

    def test_all_transfers_succeed(self):
        gateway = make_gateway()
        session = UploadSession(gateway, self.console, collector=self.collector)

        result = session.run(self.entry, self.config, self.options)

        assert gateway.prepare_file_upload.call_count == 3
        assert gateway.upload_file.call_count == 3
        gateway.push_api.assert_called_once()

        push_request = gateway.push_api.call_args[0][0]
        assert len(push_request.file_paths) == 3
        assert push_request.root_file_path == "acme/pets/1.0.0/openapi.yaml"
        assert push_request.organization_id == "acme"
        assert push_request.branch == "main"
        assert push_request.is_upsert is True
        assert push_request.is_public is False
        assert push_request.batch_id is None
        assert push_request.batch_size is None

        assert result.success is True
        assert result.root_file_path == push_request.root_file_path

    def test_prepare_requests_carry_hash_and_keys(self):
        gateway = make_gateway()
        UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        expected_hash = hash_files(make_collected().files)
        requests = [c[0][0] for c in gateway.prepare_file_upload.call_args_list]
        assert [r.filename for r in requests] == ["openapi.yaml", "paths/pets.yaml", "schemas/pet.yaml"]
        assert all(r.files_hash == expected_hash for r in requests)
        assert all(r.is_upsert is True for r in requests)
        assert all(r.version == "1.0.0" for r in requests)

    def test_calls_are_sequential(self):
        gateway = make_gateway()
        UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        calls = [c[0] for c in gateway.method_calls if c[0] != "push_api"]
        assert calls == ["prepare_file_upload", "upload_file"] * 3
        assert gateway.method_calls[-1][0] == "push_api"

    def test_transfer_uses_signed_url(self):
        gateway = make_gateway()
        UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        url, file = gateway.upload_file.call_args_list[1][0]
        assert url == "https://storage.test/paths/pets.yaml?sig=1"
        assert file.key_on_s3 == "paths/pets.yaml"

    def test_failed_transfer_continues(self):
        gateway = make_gateway([
            TransferResult(ok=True, status=200),
            TransferResult(ok=False, status=403, error_message="denied"),
            TransferResult(ok=True, status=200),
        ])
        session = UploadSession(gateway, self.console, collector=self.collector)

        result = session.run(self.entry, self.config, self.options)

        assert gateway.upload_file.call_count == 3
        gateway.push_api.assert_called_once()
        push_request = gateway.push_api.call_args[0][0]
        assert push_request.file_paths == [
            "acme/pets/1.0.0/openapi.yaml",
            "acme/pets/1.0.0/paths/pets.yaml",
            "acme/pets/1.0.0/schemas/pet.yaml"
        ]
        assert result.failed_files == ["paths/pets.yaml"]
        assert result.success is False

        output = self.output.getvalue()
        assert "✗ (2/3)" in output
        assert "File upload failed" in output
        assert "✓ (3/3)" in output

    def test_progress_output(self):
        gateway = make_gateway()
        UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        output = self.output.getvalue()
        assert "Uploading 3 files:" in output
        assert output.index("✓ (1/3)") < output.index("✓ (2/3)") < output.index("✓ (3/3)")

    def test_single_file_wording(self):
        self.collector.collect.return_value = CollectedFiles(
            root="/defs/openapi.yaml",
            files=[FileRef(file_path="/defs/openapi.yaml", key_on_s3="openapi.yaml", contents=b"x")]
        )
        UploadSession(make_gateway(), self.console, collector=self.collector).run(self.entry, self.config, self.options)
        assert "Uploading 1 file:" in self.output.getvalue()

    def test_batch_job_attached(self):
        gateway = make_gateway()
        self.options.batch_job = BatchJob(job_id="job-7", batch_size=4)

        UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        push_request = gateway.push_api.call_args[0][0]
        assert push_request.batch_id == "job-7"
        assert push_request.batch_size == 4

    def test_name_is_url_encoded(self):
        gateway = make_gateway()
        entry = ApiEntry(name="pet store/v2", version="1.0.0", root="openapi.yaml")

        UploadSession(gateway, self.console, collector=self.collector).run(entry, self.config, self.options)

        assert gateway.prepare_file_upload.call_args[0][0].name == "pet%20store%2Fv2"
        assert gateway.push_api.call_args[0][0].name == "pet%20store%2Fv2"

    def test_push_failure_propagates(self):
        gateway = make_gateway()
        gateway.push_api.side_effect = RegistryError("API_VERSION_NOT_FOUND", status_code=404)

        with pytest.raises(RegistryError):
            UploadSession(gateway, self.console, collector=self.collector).run(self.entry, self.config, self.options)

        gateway.push_api.assert_called_once()

    def test_end_to_end_with_files_on_disk(self, tmp_path):
        (tmp_path / "openapi.yaml").write_text("paths:\n  /a:\n    $ref: a.yaml\n  /b:\n    $ref: b.yaml\n")
        (tmp_path / "a.yaml").write_text("get: {}\n")
        (tmp_path / "b.yaml").write_text("post: {}\n")
        gateway = make_gateway()
        session = UploadSession(gateway, self.console, collector=FileCollector(working_dir=str(tmp_path)))

        session.run(self.entry, self.config, self.options)

        assert gateway.prepare_file_upload.call_count == 3
        assert gateway.upload_file.call_count == 3
        push_request = gateway.push_api.call_args[0][0]
        assert len(push_request.file_paths) == 3
        assert push_request.root_file_path == "acme/pets/1.0.0/openapi.yaml"


class TestEncodeApiName:
    """Test cases for API name encoding"""

    def test_plain_name_unchanged(self):
        assert encode_api_name("pets-api_v1.0") == "pets-api_v1.0"

    def test_reserved_characters(self):
        assert encode_api_name("a b/c@d") == "a%20b%2Fc%40d"
