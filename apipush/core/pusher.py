"""
Push service for apipush.

Validates the invocation, makes sure the registry client is authorized and
hands the API map to the batch coordinator.
"""
import logging
import time
from typing import Callable, Optional

import typer
from rich.console import Console

from apipush.core.config_manager import RegistryConfig
from apipush.interfaces.registry import IRegistryGateway
from apipush.push.api_client import RegistryClient
from apipush.push.batch_coordinator import BatchCoordinator
from apipush.push.environment_detector import RegistryEnvironmentDetector
from apipush.push.exceptions import AuthenticationError, PushError
from apipush.push.models import BatchResult, Clock, PushContext, RegistryClientConfig
from apipush.push.options import PushOptions, resolve_push_plan
from apipush.rich_utils.ui_helpers import get_console, print_error


logger = logging.getLogger(__name__)


def prompt_client_token(domain: str) -> str:
    """Ask for an API key on the terminal."""
    return typer.prompt(
        f"🔑 Copy your API key from https://app.{domain}/profile and paste it below",
        hide_input=True
    )


class PushService:
    """Service for pushing API definitions to the registry."""

    def __init__(
        self,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        clock: Clock = time.perf_counter,
        detector: Optional[RegistryEnvironmentDetector] = None,
        client_factory: Callable[[RegistryClientConfig], IRegistryGateway] = RegistryClient,
        token_prompt: Optional[Callable[[str], str]] = prompt_client_token
    ):
        self.console = console or get_console()
        self.err_console = err_console or get_console(stderr=True)
        self.clock = clock
        self.detector = detector or RegistryEnvironmentDetector()
        self.client_factory = client_factory
        self.token_prompt = token_prompt

    def authenticate(self, client: IRegistryGateway, client_config: RegistryClientConfig) -> None:
        """Log in when the client has no accepted token for its region."""
        if client.is_authorized_with_redocly_by_region():
            return

        token = self.detector.get_access_token()
        if not token and self.token_prompt:
            token = self.token_prompt(client_config.domain)
        if not token:
            raise AuthenticationError(
                f"Not authorized for {client_config.domain}. Set {RegistryEnvironmentDetector.TOKEN_VAR} "
                f"or log in interactively."
            )

        self.console.print("\n  Logging in...", style="dim")
        client.login(token)
        self.console.print("  Authorization confirmed. ✅\n", style="green")

    def execute_push(self, options: PushOptions, config: RegistryConfig) -> BatchResult:
        """Push every API selected by the options; raises on failure."""
        logger.debug(f"Push options: {options}")
        logger.debug(f"Registry region: {config.region}")

        plan = resolve_push_plan(options, config)
        client_config = self.detector.get_client_config(config.region)

        with self.client_factory(client_config) as client:
            self.authenticate(client, client_config)
            started_at = self.clock()

            coordinator = BatchCoordinator(
                config,
                client,
                self.console,
                err_console=self.err_console,
                clock=self.clock
            )
            return coordinator.run_all(plan.apis, PushContext(
                options=plan.options,
                started_at=started_at,
                skip_decorators=list(options.skip_decorator),
                api=plan.api
            ))

    def run(self, options: PushOptions, config: RegistryConfig) -> int:
        """Execute push workflow and return exit code."""
        try:
            self.execute_push(options, config)
            return 0
        except PushError as e:
            print_error(self.err_console, str(e))
            return 1
        except Exception as e:
            logger.debug("Push failed", exc_info=True)
            print_error(self.err_console, f"Push failed: {str(e)}")
            return 1
