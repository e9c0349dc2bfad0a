"""
Tests for LLMService provider routing, with the SDK clients replaced by fakes.
"""
from types import SimpleNamespace

import pytest

from creative_analytics.errors import ConfigurationMissingError, ExternalApiError
from creative_analytics.services import llm_service as llm_module
from creative_analytics.services.llm_service import LLMService


class FakeAnthropic:
    instances = []

    def __init__(self, api_key, http_client=None):
        self.api_key = api_key
        self.http_client = http_client
        self.requests = []
        self.messages = SimpleNamespace(create=self._create)
        FakeAnthropic.instances.append(self)

    def _create(self, **params):
        self.requests.append(params)
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text='{"asset_type": "UGC"}')],
            usage=SimpleNamespace(input_tokens=120, output_tokens=30),
        )


class FailingAnthropic(FakeAnthropic):
    def _create(self, **params):
        raise RuntimeError("overloaded_error")


class FakeOpenAI:
    instances = []

    def __init__(self, api_key, http_client=None):
        self.http_client = http_client
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        FakeOpenAI.instances.append(self)

    def _create(self, **params):
        self.requests.append(params)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="report text"))],
            usage=SimpleNamespace(total_tokens=99),
        )


@pytest.fixture(autouse=True)
def fake_sdks(monkeypatch):
    FakeAnthropic.instances = []
    FakeOpenAI.instances = []
    monkeypatch.setattr(llm_module, "Anthropic", FakeAnthropic)
    monkeypatch.setattr(llm_module, "OpenAI", FakeOpenAI)


def test_claude_models_route_to_anthropic():
    service = LLMService(anthropic_api_key="sk-ant")

    result = service.execute_prompt("Analyze this ad", max_tokens=1024)

    assert result["content"] == '{"asset_type": "UGC"}'
    assert result["tokens_used"] == 150
    request = FakeAnthropic.instances[0].requests[0]
    assert request["model"] == "claude-sonnet-4-5-20250929"
    assert request["max_tokens"] == 1024
    assert request["messages"][0]["content"] == "Analyze this ad"
    assert "system" not in request


def test_gpt_models_route_to_openai():
    service = LLMService(openai_api_key="sk-openai")

    result = service.execute_prompt("Write report", system_message="Be brief", model="gpt-4o", max_tokens=1500)

    assert result["content"] == "report text"
    request = FakeOpenAI.instances[0].requests[0]
    assert request["messages"][0] == {"role": "system", "content": "Be brief"}
    assert request["max_tokens"] == 1500
    assert FakeAnthropic.instances == []


def test_o1_models_omit_max_tokens():
    service = LLMService(openai_api_key="sk-openai")
    service.execute_prompt("hi", model="o1-mini")
    assert "max_tokens" not in FakeOpenAI.instances[0].requests[0]


def test_unknown_model_defaults_to_anthropic():
    service = LLMService(anthropic_api_key="sk-ant")
    service.execute_prompt("hi", model="mystery-model")
    assert FakeAnthropic.instances[0].requests[0]["model"] == "mystery-model"


def test_provider_failure_is_external_api_error(monkeypatch):
    monkeypatch.setattr(llm_module, "Anthropic", FailingAnthropic)
    service = LLMService(anthropic_api_key="sk-ant")
    with pytest.raises(ExternalApiError) as exc_info:
        service.execute_prompt("hi")
    assert "overloaded_error" in exc_info.value.message


def test_missing_keys_are_configuration_errors():
    service = LLMService()
    with pytest.raises(ConfigurationMissingError):
        service.ensure_configured()
    with pytest.raises(ConfigurationMissingError):
        service.ensure_configured("gpt-4o")
    with pytest.raises(ConfigurationMissingError):
        service.execute_prompt("hi")
    assert FakeAnthropic.instances == []


def test_model_names_are_passed_through():
    service = LLMService(anthropic_api_key="sk-ant")
    service.execute_prompt("hi", model="claude-3-sonnet")
    assert FakeAnthropic.instances[0].requests[0]["model"] == "claude-3-sonnet"


def test_http_client_is_closed_after_each_call():
    anthropic_service = LLMService(anthropic_api_key="sk-ant")
    anthropic_service.execute_prompt("hi")
    anthropic_service.execute_prompt("again")
    assert len(FakeAnthropic.instances) == 2
    assert all(fake.http_client.is_closed for fake in FakeAnthropic.instances)

    LLMService(openai_api_key="sk-openai").execute_prompt("hi", model="gpt-4o")
    assert FakeOpenAI.instances[0].http_client.is_closed


def test_http_client_is_closed_when_provider_fails(monkeypatch):
    monkeypatch.setattr(llm_module, "Anthropic", FailingAnthropic)
    with pytest.raises(ExternalApiError):
        LLMService(anthropic_api_key="sk-ant").execute_prompt("hi")
    assert FakeAnthropic.instances[0].http_client.is_closed
