"""
Registry Environment Detector

Reads the environment variables that configure the registry client and the
GitHub Action inputs that carry the push arguments and configuration.
"""

import json
import os
from typing import Optional

from .exceptions import InvalidRegion
from .models import DEFAULT_REGION, DOMAINS, RegistryClientConfig


TOKEN_FILENAME = ".redocly-config.json"


class RegistryEnvironmentDetector:
    """Detects registry client settings and action inputs"""

    TOKEN_VAR = "REDOCLY_AUTHORIZATION"
    DOMAIN_VAR = "REDOCLY_DOMAIN"

    OPTIONAL_VARS = {
        "APIPUSH_UPLOAD_TIMEOUT": (300, int)
    }

    def get_access_token(self) -> Optional[str]:
        """API key from the environment, if any"""
        return os.getenv(self.TOKEN_VAR) or None

    def get_credentials_path(self) -> str:
        return os.path.join(os.path.expanduser("~"), TOKEN_FILENAME)

    def get_client_config(self, region: Optional[str] = None) -> RegistryClientConfig:
        """Build client configuration for a region"""
        region = region or DEFAULT_REGION
        if region not in DOMAINS:
            raise InvalidRegion(region, list(DOMAINS))

        config_kwargs = {}
        for var_name, (default_value, var_type) in self.OPTIONAL_VARS.items():
            env_value = os.getenv(var_name)
            if env_value:
                try:
                    config_kwargs[self._env_var_to_param(var_name)] = var_type(env_value)
                except ValueError:
                    # Use default if conversion fails
                    config_kwargs[self._env_var_to_param(var_name)] = default_value
            else:
                config_kwargs[self._env_var_to_param(var_name)] = default_value

        return RegistryClientConfig(
            region=region,
            domain=os.getenv(self.DOMAIN_VAR) or DOMAINS[region],
            access_token=self.get_access_token(),
            credentials_path=self.get_credentials_path(),
            **config_kwargs
        )

    def get_action_input(self, name: str) -> str:
        """GitHub Action input, as exposed through INPUT_<NAME>"""
        return os.getenv(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()

    def load_action_argv(self) -> dict:
        payload = self.get_action_input("argv")
        return json.loads(payload) if payload else {}

    def _env_var_to_param(self, env_var: str) -> str:
        """Convert environment variable name to parameter name"""
        # APIPUSH_UPLOAD_TIMEOUT -> upload_timeout
        return env_var.replace("APIPUSH_", "").lower()
