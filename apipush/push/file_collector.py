"""
File Collector for registry push

Resolves the complete set of files that belong to one API definition:
the root document, every local file reachable through ``$ref`` and the
project files the registry needs next to it.
"""

import fnmatch
import json
import logging
import os
from collections import deque
from typing import Iterator, List, Optional, Set
from urllib.parse import unquote, urlparse

import yaml

from apipush.core.config_manager import ResolvedConfig

from .exceptions import ResolutionError
from .models import CollectedFiles, FileRef


logger = logging.getLogger(__name__)

PARSEABLE_EXTENSIONS = [".yaml", ".yml", ".json"]
JSON_EXTENSIONS = [".json"]
IGNORE_FILE = ".redocly.lint-ignore.yaml"
PACKAGE_FILE = "package.json"


class FileCollector:
    """Collects the deduplicated file set for an API root document"""

    def __init__(self, working_dir: Optional[str] = None):
        self.working_dir = working_dir or os.getcwd()

    def collect(self, api_root_path: str, resolved_config: ResolvedConfig) -> CollectedFiles:
        """Walk the reference graph from the root document.

        A relative root is resolved against the configuration file's
        directory, or the working directory when there is no config file.
        """
        root = os.path.abspath(os.path.join(self._config_dir(resolved_config), api_root_path))
        if not os.path.isfile(root):
            raise ResolutionError(f"Cannot read root document: {api_root_path}", file_path=root)

        if resolved_config.styleguide.active_decorators:
            logger.debug(f"Active decorators for {api_root_path}: {resolved_config.styleguide.active_decorators}")

        base_dir = self._base_dir(root, resolved_config)
        seen: Set[str] = set()
        paths: List[str] = []

        queue = deque([(root, None)])
        while queue:
            file_path, referenced_from = queue.popleft()
            if file_path in seen:
                continue
            if not os.path.isfile(file_path):
                raise ResolutionError(
                    f"Referenced file not found: {file_path} (referenced from {referenced_from})",
                    file_path=file_path,
                    referenced_from=referenced_from
                )

            seen.add(file_path)
            paths.append(file_path)

            for ref_path in self._local_refs(file_path, resolved_config.skip_refs):
                if ref_path not in seen:
                    queue.append((ref_path, file_path))

        for extra in self._project_files(resolved_config):
            if extra not in seen:
                seen.add(extra)
                paths.append(extra)

        logger.debug(f"Collected {len(paths)} files for {api_root_path}")

        return CollectedFiles(
            root=root,
            files=[FileRef(file_path=p, key_on_s3=self._key_on_s3(p, base_dir)) for p in paths]
        )

    def _config_dir(self, resolved_config: ResolvedConfig) -> str:
        if resolved_config.config_file:
            return os.path.dirname(os.path.abspath(resolved_config.config_file))
        return self.working_dir

    def _base_dir(self, root: str, resolved_config: ResolvedConfig) -> str:
        if resolved_config.config_file:
            return self._config_dir(resolved_config)
        return os.path.dirname(root)

    def _key_on_s3(self, file_path: str, base_dir: str) -> str:
        return os.path.relpath(file_path, base_dir).replace(os.sep, "/")

    def _local_refs(self, file_path: str, skip_refs: List[str]) -> Iterator[str]:
        """Absolute paths of local files referenced from one document"""
        if os.path.splitext(file_path)[1].lower() not in PARSEABLE_EXTENSIONS:
            return

        document = self._load_document(file_path)
        base = os.path.dirname(file_path)

        for ref in self._iter_refs(document):
            if any(fnmatch.fnmatch(ref, pattern) for pattern in skip_refs):
                logger.debug(f"Skipping reference {ref} in {file_path}")
                continue

            parsed = urlparse(ref)
            if parsed.scheme in ("http", "https"):
                continue

            target = unquote(ref.split("#", 1)[0])
            if not target:
                continue

            yield os.path.normpath(os.path.join(base, target))

    def _load_document(self, file_path: str):
        is_json = os.path.splitext(file_path)[1].lower() in JSON_EXTENSIONS
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f) if is_json else yaml.safe_load(f)
        except OSError as e:
            raise ResolutionError(f"Cannot read {file_path}: {e}", file_path=file_path)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ResolutionError(f"Cannot parse {file_path}: {e}", file_path=file_path)

    def _iter_refs(self, node) -> Iterator[str]:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                yield ref
            for key, value in node.items():
                if key != "$ref":
                    yield from self._iter_refs(value)
        elif isinstance(node, list):
            for item in node:
                yield from self._iter_refs(item)

    def _project_files(self, resolved_config: ResolvedConfig) -> List[str]:
        """Config file, package manifest, lint ignore file and configured extras"""
        files = []

        if resolved_config.config_file:
            files.append(os.path.abspath(resolved_config.config_file))

        for filename in (PACKAGE_FILE, IGNORE_FILE):
            candidate = os.path.join(self.working_dir, filename)
            if os.path.isfile(candidate):
                files.append(os.path.abspath(candidate))

        if resolved_config.files:
            base = self._config_dir(resolved_config)
            for filename in resolved_config.files:
                candidate = os.path.abspath(os.path.join(base, filename))
                if not os.path.isfile(candidate):
                    raise ResolutionError(f"Configured file not found: {filename}", file_path=candidate)
                files.append(candidate)

        return files
