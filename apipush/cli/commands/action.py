"""
Action command implementation.

Runs a push the way the GitHub Action does: arguments and the merged
configuration arrive as JSON inputs, there is no interactive login, and
a failure is reported with the workflow error annotation.
"""
import sys

from apipush.core.config_manager import ConfigManager
from apipush.core.pusher import PushService
from apipush.push.environment_detector import RegistryEnvironmentDetector
from apipush.push.options import PushOptions


def action_command():
    """Run a push from GitHub Action inputs (INPUT_ARGV, INPUT_CONFIG)."""

    detector = RegistryEnvironmentDetector()
    service = PushService(detector=detector, token_prompt=None)

    try:
        options = PushOptions.from_argv(detector.load_action_argv())
        config = ConfigManager().load_json_config(detector.get_action_input("config"))
        service.execute_push(options, config)
    except Exception as e:
        # Workflow command understood by the Actions runner
        print(f"::error::{e}")
        sys.exit(1)
