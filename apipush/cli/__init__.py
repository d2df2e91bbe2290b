"""
CLI module for apipush.

Thin typer layer: commands parse arguments and hand off to the push service.
"""
from apipush.cli.app import app

__all__ = ['app']
