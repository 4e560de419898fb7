"""Provider configuration for the text-generation service."""

import os
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

from ai_prompt_core.exceptions import InvalidEndpointError, MissingCredentialError

Provider = Literal["openai", "openrouter", "local"]

PROVIDER_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}

DEFAULT_API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


def validate_endpoint(url: str) -> str:
    """Return ``url`` without a trailing slash if it is a well-formed http(s) URL.

    Raises:
        InvalidEndpointError: If the scheme is not http/https or the host is missing.
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidEndpointError(f"'{url}' is not a valid http(s) URL.", operation="resolving the provider endpoint")
    return url.strip().rstrip("/")


class SynthesizerConfig(BaseModel):
    """Which provider and model to call, and how to authenticate.

    A custom ``base_url`` overrides the provider's default endpoint and is
    required for the ``local`` provider. ``api_key_env_var`` names the
    environment variable holding the credential; openai and openrouter fall
    back to their conventional variable names.
    """

    model_config = ConfigDict(frozen=True)

    provider: Provider = "openai"
    model: str
    api_key_env_var: str | None = None
    base_url: str | None = None

    def resolve_base_url(self) -> str:
        """Endpoint to call, validated.

        Raises:
            InvalidEndpointError: Missing endpoint for ``local`` or malformed URL.
        """
        if self.base_url:
            return validate_endpoint(self.base_url)
        if self.provider in PROVIDER_BASE_URLS:
            return PROVIDER_BASE_URLS[self.provider]
        raise InvalidEndpointError(
            f"Provider '{self.provider}' has no default endpoint; set base_url.",
            operation="resolving the provider endpoint",
            model=self.model,
        )

    def resolve_api_key(self) -> str | None:
        """Read the credential from the environment right before a call.

        Returns None when no credential is configured (local endpoints without auth).

        Raises:
            MissingCredentialError: The configured variable is unset or empty.
        """
        env_var = self.api_key_env_var or DEFAULT_API_KEY_ENV_VARS.get(self.provider)
        if env_var is None:
            return None
        value = os.environ.get(env_var, "").strip()
        if not value:
            raise MissingCredentialError(
                f'Environment variable "{env_var}" is not set.',
                operation="preparing the provider request",
                model=self.model,
            )
        return value


__all__ = [
    "DEFAULT_API_KEY_ENV_VARS",
    "PROVIDER_BASE_URLS",
    "Provider",
    "SynthesizerConfig",
    "validate_endpoint",
]
