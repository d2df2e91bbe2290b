"""
Push command implementation.

Thin wrapper around PushService that handles CLI argument parsing
and delegates business logic to the service layer.
"""
import sys
from typing import List, Optional

import typer

from apipush.core.config_manager import ConfigManager
from apipush.core.pusher import PushService
from apipush.push.options import PushOptions
from apipush.rich_utils.ui_helpers import get_console, print_error


def push_command(
    api: Optional[str] = typer.Argument(None, help="Path to the root API definition"),
    destination: Optional[str] = typer.Option(None, "-d", "--destination", help="Destination in the format [@organization/]name@version"),
    branch_name: Optional[str] = typer.Option(None, "-b", "--branch", help="Branch name the definition is pushed from"),
    upsert: bool = typer.Option(False, "-u", "--upsert", help="Create the API version or overwrite an existing one"),
    organization: Optional[str] = typer.Option(None, "--organization", help="Organization id (overrides the config file)"),
    job_id: Optional[str] = typer.Option(None, "--job-id", help="Id of the batch job the push belongs to"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Number of pushes in the batch job"),
    skip_decorator: Optional[List[str]] = typer.Option(None, "--skip-decorator", help="Decorator to turn off for this push, can be repeated. Decorators are not applied client-side, so the uploaded files are not changed"),
    public: bool = typer.Option(False, "--public", help="Make the API definition publicly visible"),
    config_path: Optional[str] = typer.Option(None, "-c", "--config", help="Path to config YAML")
):
    """Upload an API definition and push it as a new or updated revision."""

    options = PushOptions(
        destination=destination,
        branch_name=branch_name,
        upsert=upsert,
        organization=organization,
        api=api,
        job_id=job_id,
        batch_size=batch_size,
        skip_decorator=list(skip_decorator or []),
        public=public
    )

    try:
        config = ConfigManager().discover_and_load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        print_error(get_console(stderr=True), str(e))
        sys.exit(1)

    # Delegate to service layer
    exit_code = PushService().run(options, config)

    # Exit with appropriate code
    if exit_code != 0:
        sys.exit(exit_code)
