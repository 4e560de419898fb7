"""Exception hierarchy for AI Prompt Core.

All exceptions inherit from PromptCoreError, providing a consistent error handling interface.
Synthesizer failures are classified so callers can tell a broken configuration (fatal for
the whole run) from a failed call (fatal only for the prompt/variant being processed).
"""


class PromptCoreError(Exception):
    """Base exception for all AI Prompt Core errors."""


class PromptDefinitionError(PromptCoreError):
    """Raised when a prompt specification is built incorrectly."""


class PromptNotGeneratedError(PromptCoreError):
    """Raised when evaluation or improvement is requested before any prompt was generated."""


class SynthesizerError(PromptCoreError):
    """Base exception for failed text-generation calls.

    The message names the operation that failed and lists remediation steps.
    """

    title = "Text generation failed"
    remediation: tuple[str, ...] = ()

    def __init__(self, detail: str = "", *, operation: str = "calling the model", model: str = "") -> None:
        self.detail = detail
        self.operation = operation
        self.model = model
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [f"{self.title} while {self.operation}."]
        if self.detail:
            lines.append(self.detail)
        hints = [hint.format(model=self.model or "<unset>") for hint in self.remediation]
        if hints:
            lines.append("")
            lines.append("Please check:")
            lines.extend(f"  - {hint}" for hint in hints)
        return "\n".join(lines)


class SynthesizerConfigError(SynthesizerError):
    """Provider configuration is unusable. Aborts the whole run."""

    title = "Invalid provider configuration"


class MissingCredentialError(SynthesizerConfigError):
    """Configured credential environment variable is not set."""

    title = "Missing API key"
    remediation = (
        "The environment variable named by api_key_env_var is exported (or present in .env)",
        "The variable is not empty",
    )


class InvalidEndpointError(SynthesizerConfigError):
    """Custom endpoint is missing or is not a well-formed http(s) URL."""

    title = "Invalid endpoint"
    remediation = (
        "base_url is set when provider is 'local'",
        "base_url is an http:// or https:// URL with a host, e.g. http://localhost:11434/v1",
    )


class NetworkError(SynthesizerError):
    """Endpoint could not be reached."""

    title = "Network error"
    remediation = (
        "Your internet connection",
        "The API base URL in your configuration",
        "If using a local model, that its server is running",
    )


class AuthenticationFailedError(SynthesizerError):
    """Provider rejected the credential (401/403)."""

    title = "Authentication failed"
    remediation = (
        "Your API key environment variable is set correctly",
        "The API key is valid, not expired, and has access to model '{model}'",
        "You have sufficient quota or credits",
    )


class ModelNotFoundError(SynthesizerError):
    """Provider does not know the configured model (404)."""

    title = "Model not found"
    remediation = (
        "The model name '{model}' is spelled correctly",
        "The model is available with your provider",
        "For OpenRouter, use the 'provider/model-name' form",
    )


class RateLimitedError(SynthesizerError):
    """Provider rate limit exceeded (429)."""

    title = "Rate limit exceeded"
    remediation = (
        "Wait a moment and try again",
        "Your API plan limits",
        "Whether a different model has more headroom",
    )


class ServerError(SynthesizerError):
    """Provider returned a 5xx-class error."""

    title = "Provider server error"
    remediation = (
        "Wait a moment and try again",
        "The provider's status page",
    )


class MalformedResponseError(SynthesizerError):
    """Response envelope could not be parsed."""

    title = "Invalid response format"
    remediation = (
        "The endpoint speaks the OpenAI chat-completions protocol",
        "Model '{model}' follows instructions well enough (try a more capable model)",
    )


class EmptyResponseError(SynthesizerError):
    """Model returned no content."""

    title = "Empty response"
    remediation = (
        "Model '{model}' can handle the task (small or local models often cannot)",
        "The model's context window is large enough for the prompt",
    )
