"""Runtime configuration for the relay service."""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from .errors import ConfigurationError

REQUIRED_ENV = {
    "signing_key": "SIGNING_KEY",
    "endpoint_url": "RELAY_ENDPOINT_URL",
    "asset_id": "ASSET_ID",
    "key_id": "KID",
}


class RelaySettings(BaseModel):
    """Settings the pipeline needs from its environment.

    Attributes:
        signing_key (SecretStr): Shared secret for the HMAC signature.
        endpoint_url (str): Downstream endpoint receiving signed payloads.
        asset_id (str): Value of the asset identifier header.
        key_id (str): Value of the key identifier header.
        timeout (float | None): Outbound request timeout in seconds, unset by default.
    """

    model_config = ConfigDict(frozen=True)

    signing_key: SecretStr
    endpoint_url: str = Field(..., min_length=1)
    asset_id: str = Field(..., min_length=1)
    key_id: str = Field(..., min_length=1)
    timeout: Optional[float] = Field(default=None, gt=0)

    @classmethod
    def from_env(cls) -> "RelaySettings":
        """Build settings from process environment variables.

        Returns:
            RelaySettings: Settings populated from the environment.

        Raises:
            ConfigurationError: If a required variable is missing or empty.
        """
        values = {}
        missing = []
        for field_name, env_name in REQUIRED_ENV.items():
            value = os.getenv(env_name, "")
            if not value:
                missing.append(env_name)
            values[field_name] = value
        if missing:
            raise ConfigurationError(f"missing environment variables: {', '.join(missing)}")

        timeout = os.getenv("RELAY_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"RELAY_TIMEOUT is not a number: {timeout!r}") from e

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"invalid relay settings: {e.error_count()} error(s)") from e
