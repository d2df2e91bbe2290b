"""
Registry API Client

Handles all interactions with the API registry: token verification,
signed upload slot requests, byte transfers to signed URLs and the final
push that turns uploaded files into an API revision.
"""

import asyncio
import json
import logging
import os
from typing import Dict, Optional

import aiofiles
import aiohttp
import backoff
import requests

from apipush.interfaces.registry import IRegistryGateway

from .exceptions import (
    APIConnectionError,
    AuthenticationError,
    RegistryError
)
from .models import (
    FileRef,
    PrepareUploadRequest,
    PrepareUploadResponse,
    PushRequest,
    RegistryClientConfig,
    TransferResult
)


logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class RegistryClient(IRegistryGateway):
    """Handles all API interactions with the registry"""

    def __init__(self, config: RegistryClientConfig):
        self.config = config
        self.session = requests.Session()
        self.access_tokens: Dict[str, str] = self._load_tokens()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()

    @property
    def access_token(self) -> Optional[str]:
        return self.access_tokens.get(self.config.region)

    def _load_tokens(self) -> Dict[str, str]:
        """Stored credentials, overridden by the environment API key"""
        tokens = self._read_credentials_file()
        if self.config.access_token:
            tokens[self.config.region] = self.config.access_token
        return tokens

    def _read_credentials_file(self) -> Dict[str, str]:
        path = self.config.credentials_path
        if not path or not os.path.exists(path):
            return {}
        try:
            with open(path, 'r') as f:
                return json.load(f) or {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read credentials from {path}: {e}")
            return {}

    def is_authorized_with_redocly_by_region(self) -> bool:
        """True when the stored token for the region is accepted"""
        token = self.access_token
        if not token:
            return False

        try:
            self.auth_status(token)
            return True
        except (AuthenticationError, APIConnectionError, RegistryError) as e:
            logger.debug(f"Token verification failed for region {self.config.region}: {e}")
            return False

    def login(self, token: str) -> None:
        """Verify an API key and store it for the region"""
        try:
            self.auth_status(token)
        except (AuthenticationError, RegistryError) as e:
            raise AuthenticationError(
                "Authorization failed. Please check if you entered a valid API key.",
                endpoint=getattr(e, 'endpoint', None),
                status_code=getattr(e, 'status_code', None)
            )

        credentials = dict(self._read_credentials_file())
        credentials[self.config.region] = token
        credentials["token"] = token
        self.access_tokens = credentials

        if self.config.credentials_path:
            with open(self.config.credentials_path, 'w') as f:
                json.dump(credentials, f, indent=2)
        logger.info(f"Authorization confirmed for region {self.config.region}")

    def auth_status(self, token: str) -> dict:
        """GET /registry"""
        response = self._request("GET", "", access_token=token)
        return response.json()

    def prepare_file_upload(self, request: PrepareUploadRequest) -> PrepareUploadResponse:
        """POST /registry/{organization}/{name}/{version}/prepare-file-upload"""
        endpoint = f"/{request.organization_id}/{request.name}/{request.version}/prepare-file-upload"
        payload = {
            "filesHash": request.files_hash,
            "filename": request.filename,
            "isUpsert": request.is_upsert
        }

        response = self._request("POST", endpoint, payload=payload)
        data = response.json()
        return PrepareUploadResponse(
            signed_upload_url=data["signedUploadUrl"],
            file_path=data["filePath"]
        )

    def push_api(self, request: PushRequest) -> None:
        """PUT /registry/{organization}/{name}/{version}"""
        endpoint = f"/{request.organization_id}/{request.name}/{request.version}"
        self._request("PUT", endpoint, payload=request.to_payload(), retry=False)
        logger.debug(f"Pushed {len(request.file_paths)} files to {endpoint}")

    def upload_file(self, signed_upload_url: str, file: FileRef) -> TransferResult:
        """Transfer one file to its signed URL"""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.upload_to_s3(signed_upload_url, file))
        finally:
            loop.close()

    async def upload_to_s3(self, signed_upload_url: str, file: FileRef) -> TransferResult:
        """PUT the file's bytes to a signed storage URL"""
        try:
            if file.contents is not None:
                file_data = file.contents
            else:
                async with aiofiles.open(file.file_path, 'rb') as f:
                    file_data = await f.read()

            timeout = aiohttp.ClientTimeout(total=self.config.upload_timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                headers = {"Content-Length": str(len(file_data))}
                async with session.put(signed_upload_url, data=file_data, headers=headers) as response:
                    if 200 <= response.status < 300:
                        return TransferResult(ok=True, status=response.status)

                    error_text = await response.text()
                    return TransferResult(
                        ok=False,
                        status=response.status,
                        error_message=f"Upload failed with status {response.status}: {error_text[:200]}"
                    )

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            return TransferResult(ok=False, error_message=str(e))

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[dict] = None,
        access_token: Optional[str] = None,
        retry: bool = True
    ) -> requests.Response:
        token = access_token or self.access_token
        if not token:
            raise AuthenticationError("Unauthorized", endpoint=endpoint)

        url = f"{self.config.base_url}{endpoint}"
        logger.debug(f"{method} {url}")

        send = self._send_with_retry if retry else self._send
        try:
            response = send(method, url, payload, token)
        except requests.exceptions.RequestException as e:
            raise APIConnectionError(f"Failed to reach registry: {str(e)}", endpoint=endpoint)

        self._handle_response_errors(response, endpoint)
        return response

    @backoff.on_exception(
        backoff.expo,
        RETRYABLE_EXCEPTIONS,
        max_tries=3,
        base=1,
        max_value=60
    )
    def _send_with_retry(self, method: str, url: str, payload: Optional[dict], token: str) -> requests.Response:
        return self._send(method, url, payload, token)

    def _send(self, method: str, url: str, payload: Optional[dict], token: str) -> requests.Response:
        return self.session.request(
            method,
            url,
            json=payload,
            headers=self.config.get_headers(token),
            timeout=self.config.upload_timeout
        )

    def _handle_response_errors(self, response: requests.Response, endpoint: str):
        """Handle common API response errors"""
        if response.status_code == 401:
            raise AuthenticationError(
                "Unauthorized",
                status_code=response.status_code,
                endpoint=endpoint
            )
        elif response.status_code == 404:
            code = None
            try:
                code = response.json().get("code")
            except ValueError:
                pass
            raise RegistryError(
                code or "NOT_FOUND",
                status_code=response.status_code,
                endpoint=endpoint
            )
        elif response.status_code >= 400:
            error_msg = f"API error {response.status_code}"
            try:
                error_data = response.json()
                error_msg = error_data.get("message", error_msg)
            except ValueError:
                error_msg = f"HTTP {response.status_code}: {response.text[:200]}"

            raise APIConnectionError(
                error_msg,
                status_code=response.status_code,
                endpoint=endpoint
            )
