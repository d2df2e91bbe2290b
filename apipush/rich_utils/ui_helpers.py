import os
import sys

from rich.console import Console

def is_ci_environment():
    return (
        os.getenv('CI') is not None or
        os.getenv('GITHUB_ACTIONS') is not None or
        not sys.stdout.isatty()
    )

def get_console(stderr: bool = False) -> Console:
    """Detect environment and create console."""
    if is_ci_environment():
        # No colors, no interactive elements
        return Console(force_terminal=False, no_color=True, stderr=stderr)
    return Console(stderr=stderr)

def print_error(console: Console, message: str) -> None:
    """Print a failure line the way every command reports errors."""
    console.print(f"❌ {message}", style="bold red")
