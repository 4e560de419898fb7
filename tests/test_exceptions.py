"""Tests for the exception hierarchy."""

import pytest

from ai_prompt_core.exceptions import (
    AuthenticationFailedError,
    EmptyResponseError,
    InvalidEndpointError,
    MalformedResponseError,
    MissingCredentialError,
    ModelNotFoundError,
    NetworkError,
    PromptCoreError,
    PromptDefinitionError,
    PromptNotGeneratedError,
    RateLimitedError,
    ServerError,
    SynthesizerConfigError,
    SynthesizerError,
)


@pytest.mark.parametrize(
    "cls",
    [
        AuthenticationFailedError,
        EmptyResponseError,
        MalformedResponseError,
        ModelNotFoundError,
        NetworkError,
        RateLimitedError,
        ServerError,
    ],
)
def test_call_errors_are_not_config_errors(cls: type[SynthesizerError]):
    error = cls()
    assert isinstance(error, SynthesizerError)
    assert not isinstance(error, SynthesizerConfigError)
    assert error.remediation


@pytest.mark.parametrize("cls", [MissingCredentialError, InvalidEndpointError])
def test_config_errors(cls: type[SynthesizerConfigError]):
    assert issubclass(cls, SynthesizerConfigError)
    assert issubclass(cls, PromptCoreError)


def test_definition_and_generation_errors_share_base():
    assert issubclass(PromptDefinitionError, PromptCoreError)
    assert issubclass(PromptNotGeneratedError, PromptCoreError)
    assert not issubclass(PromptDefinitionError, SynthesizerError)


def test_message_layout():
    error = AuthenticationFailedError("401 - invalid key", operation="compiling prompt 'greeter'", model="gpt-4o")
    lines = str(error).split("\n")
    assert lines[0] == "Authentication failed while compiling prompt 'greeter'."
    assert lines[1] == "401 - invalid key"
    assert lines[2] == ""
    assert lines[3] == "Please check:"
    assert "  - The API key is valid, not expired, and has access to model 'gpt-4o'" in lines
    assert error.detail == "401 - invalid key"
    assert error.operation == "compiling prompt 'greeter'"


def test_message_without_detail_or_remediation():
    assert str(SynthesizerError(operation="running a test input")) == "Text generation failed while running a test input."


def test_unset_model_placeholder():
    assert "'<unset>'" in str(ModelNotFoundError())
