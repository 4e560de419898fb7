"""Core configuration settings for prompt compilation.

@public

Settings are loaded from environment variables (prefix ``AI_PROMPT_``) with
.env file support via pydantic-settings.

Environment variables:
    AI_PROMPT_GENERATED_FILE: Cache artifact path (default prompts.gen.json)
    AI_PROMPT_PROMPT_PATTERN: Glob used to discover prompt modules
    AI_PROMPT_PROVIDER: openai, openrouter or local
    AI_PROMPT_MODEL: Model used for compilation, evaluation and improvement
    AI_PROMPT_API_KEY_ENV_VAR: Name of the env var holding the API key
    AI_PROMPT_BASE_URL: Custom endpoint (required for the local provider)
    AI_PROMPT_NO_CACHE: Recompile every prompt even when its hash matches
    AI_PROMPT_MAX_ITERATIONS: Improvement iteration cap
    AI_PROMPT_PROMPT_IDS: Comma-separated prompt id filter
    AI_PROMPT_VERBOSE: Verbose output
    AI_PROMPT_JUDGE: Evaluate string assertions with the judge model

Example:
    >>> from ai_prompt_core.settings import settings
    >>> config = settings.synthesizer_config()

Note:
    Settings are loaded once at module import and frozen. Build a new
    ``Settings(...)`` to override values programmatically.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_prompt_core.synthesizer.config import Provider, SynthesizerConfig


class Settings(BaseSettings):
    """Configuration surface for generate, evaluate and improve runs.

    @public
    """

    model_config = SettingsConfigDict(
        env_prefix="AI_PROMPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Artifacts and discovery
    generated_file: Path = Path("prompts.gen.json")
    prompt_pattern: str = "**/*_prompt.py"

    # Provider
    provider: Provider = "openai"
    model: str = "gpt-4o"
    api_key_env_var: str = ""
    base_url: str = ""

    # Run behaviour
    no_cache: bool = False
    max_iterations: int = 3
    prompt_ids: str = ""
    verbose: bool = False
    judge: bool = False

    def synthesizer_config(self) -> SynthesizerConfig:
        """Build the provider configuration from these settings."""
        return SynthesizerConfig(
            provider=self.provider,
            model=self.model,
            api_key_env_var=self.api_key_env_var or None,
            base_url=self.base_url or None,
        )

    def prompt_id_filter(self) -> list[str]:
        """Split the comma-separated prompt id filter, dropping blanks."""
        return [part.strip() for part in self.prompt_ids.split(",") if part.strip()]


settings = Settings()
"""Global settings instance, created at import time."""
