"""
Main CLI application for apipush.

Defines the Typer application structure and command routing,
following clean architecture principles with thin CLI layer.
"""
import logging

import typer

from apipush.cli.commands.action import action_command
from apipush.cli.commands.push import push_command


# Initialize Typer app
app = typer.Typer(help="apipush - push API definitions to the API registry")

# Register commands
app.command("push", help="Upload an API definition and push it as a new or updated revision.")(push_command)
app.command("action", help="Run a push from GitHub Action inputs (INPUT_ARGV, INPUT_CONFIG).")(action_command)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug logs")
):
    """apipush - push API definitions to the API registry.

    Run 'apipush push <api> --destination name@version' to push a single definition.
    Run 'apipush push' to push every API listed in the config file.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )
