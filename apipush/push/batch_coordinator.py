"""
Batch Coordinator for registry push

Runs one upload session per entry of the API map, in map order, and
reports the total elapsed time once every entry has been pushed. The
first failing entry aborts the remaining ones.
"""

import logging
import math
import time
from typing import Dict, Optional

from rich.console import Console

from apipush.core.config_manager import RegistryConfig
from apipush.interfaces.registry import IRegistryGateway

from .destination import split_api_key
from .exceptions import (
    ApiNotFound,
    ApiVersionNotFound,
    EmptyApiSet,
    OrganizationNotFound,
    RegistryError,
    RegistryErrorCode
)
from .models import ApiEntry, BatchResult, Clock, PushContext
from .upload_session import UploadSession


logger = logging.getLogger(__name__)

COMMAND_NAME = "push"


class BatchCoordinator:
    """Pushes every API of a map through its own upload session"""

    def __init__(
        self,
        config: RegistryConfig,
        gateway: IRegistryGateway,
        console: Console,
        err_console: Optional[Console] = None,
        clock: Clock = time.perf_counter,
        session: Optional[UploadSession] = None
    ):
        self.config = config
        self.gateway = gateway
        self.console = console
        self.err_console = err_console or Console(stderr=True)
        self.clock = clock
        self.session = session or UploadSession(gateway, console)

    def run_all(self, api_map: Dict[str, Dict], context: PushContext) -> BatchResult:
        """Push every entry of the map; raises on the first failing entry"""
        if not api_map:
            raise EmptyApiSet()

        context.options.batch_job.validate()
        result = BatchResult()

        for api_key, api in api_map.items():
            name, version = split_api_key(api_key)
            root = api.get("root") if isinstance(api, dict) else None
            if not root:
                raise ApiNotFound(name, version)
            entry = ApiEntry(name=name, version=version, root=root)

            resolved_config = self.config.merged_for(api_key)
            resolved_config.styleguide.skip_decorators(context.skip_decorators)

            logger.info(f"Pushing {entry.key} from {entry.root}")
            try:
                result.results.append(self.session.run(entry, resolved_config, context.options))
            except RegistryError as e:
                translated = self._translate(e, context.options.organization_id)
                if translated is e:
                    raise
                raise translated from e

            self.console.print(f"Definition: {entry.root} is successfully pushed to Redocly API Registry")

        label = context.api or f"apis in organization {context.options.organization_id}"
        result.elapsed_ms = self._print_execution_time(label, context.started_at)
        return result

    def _translate(self, error: RegistryError, organization_id: str) -> RegistryError:
        """Actionable error for known registry codes"""
        if error.code is RegistryErrorCode.ORGANIZATION_NOT_FOUND:
            translated = OrganizationNotFound(organization_id, status_code=error.status_code)
        elif error.code is RegistryErrorCode.API_VERSION_NOT_FOUND:
            translated = ApiVersionNotFound(status_code=error.status_code)
        else:
            return error

        self.err_console.print(str(translated), style="red")
        return translated

    def _print_execution_time(self, label: str, started_at: float) -> int:
        elapsed = math.ceil((self.clock() - started_at) * 1000)
        self.err_console.print(f"\n{label}: {COMMAND_NAME} processed in {elapsed}ms\n", style="dim")
        return elapsed
