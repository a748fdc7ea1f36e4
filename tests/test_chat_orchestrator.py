"""Tests for the chat orchestrator.

The Anthropic client is always mocked; no test reaches the network.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from fixtures import FAKE_API_KEY
from oncograph.config import Settings
from oncograph.core import NO_INFORMATION_FOUND, ChatOrchestrator, classify_error
from oncograph.core.chat_orchestrator import EMPTY_RESPONSE_TEXT
from oncograph.utils import ValidationError

API_URL = "https://api.anthropic.com/v1/messages"


def make_api_response(text="EGFR is a receptor tyrosine kinase.", input_tokens=120, output_tokens=45):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def make_status_error(error_class, status_code):
    request = httpx.Request("POST", API_URL)
    response = httpx.Response(status_code, request=request)
    return error_class("API error", response=response, body=None)


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.messages.create.return_value = make_api_response()
    return client


@pytest.fixture
def orchestrator(extractor, mock_client):
    return ChatOrchestrator(extractor, api_key=FAKE_API_KEY, client=mock_client)


class TestChatOrchestrator:
    """Test suite for a full chat turn."""

    def test_answer_success(self, orchestrator, mock_client):
        """Test that a turn returns the answer paired with its subgraph."""
        response = orchestrator.answer("What is EGFR?")

        assert response.is_error is False
        assert response.text == "EGFR is a receptor tyrosine kinase."
        assert response.subgraph.anchor_ids == ["gene:EGFR"]
        assert response.input_tokens == 120
        assert response.output_tokens == 45
        mock_client.messages.create.assert_called_once()

    def test_request_shape(self, orchestrator, mock_client):
        """Test that one system prompt and one user message are sent."""
        orchestrator.answer("What is EGFR?")

        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-haiku-4-5"
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"] == [{"role": "user", "content": "What is EGFR?"}]
        assert "KNOWLEDGE GRAPH DATA:" in kwargs["system"]
        assert "- GENE: EGFR (ID: gene:EGFR)" in kwargs["system"]
        assert "- Osimertinib targets EGFR" in kwargs["system"]

    def test_history_not_resent(self, orchestrator, mock_client):
        orchestrator.answer("What is EGFR?")
        orchestrator.answer("Drugs for lung cancer")

        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Drugs for lung cancer"}]

    def test_no_graph_match_still_calls_api(self, orchestrator, mock_client):
        """Test that an empty subgraph sends the no-information sentinel."""
        response = orchestrator.answer("Tell me about quantum physics")

        assert response.is_error is False
        assert response.subgraph.is_empty
        assert NO_INFORMATION_FOUND in mock_client.messages.create.call_args.kwargs["system"]

    def test_empty_model_output(self, orchestrator, mock_client):
        mock_client.messages.create.return_value = make_api_response(text="")
        response = orchestrator.answer("What is EGFR?")
        assert response.text == EMPTY_RESPONSE_TEXT

    def test_non_text_blocks_ignored(self, orchestrator, mock_client):
        mock_client.messages.create.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="thinking", thinking="..."),
                SimpleNamespace(type="text", text="Answer"),
            ],
            usage=None,
        )
        response = orchestrator.answer("What is EGFR?")
        assert response.text == "Answer"
        assert response.input_tokens == 0

    @pytest.mark.parametrize("api_key", [None, "", "   "])
    def test_missing_api_key(self, extractor, mock_client, api_key):
        """Test that a missing key is reported without any API call."""
        orchestrator = ChatOrchestrator(extractor, api_key=api_key, client=mock_client)
        response = orchestrator.answer("What is EGFR?")

        assert response.error_kind == "configuration"
        assert "ANTHROPIC_API_KEY" in response.text
        assert response.subgraph is None
        mock_client.messages.create.assert_not_called()

    def test_malformed_api_key(self, extractor, mock_client):
        orchestrator = ChatOrchestrator(extractor, api_key="sk-proj-123", client=mock_client)
        response = orchestrator.answer("What is EGFR?")

        assert response.error_kind == "configuration"
        assert '"sk-ant-"' in response.text
        mock_client.messages.create.assert_not_called()

    @pytest.mark.parametrize("error, kind", [
        (make_status_error(anthropic.AuthenticationError, 401), "authentication"),
        (make_status_error(anthropic.RateLimitError, 429), "rate_limit"),
        (make_status_error(anthropic.InternalServerError, 500), "server"),
        (anthropic.APIConnectionError(request=httpx.Request("POST", API_URL)), "network"),
        (RuntimeError("boom"), "generic"),
    ])
    def test_api_failures(self, orchestrator, mock_client, error, kind):
        """Test that every failure becomes a message without a subgraph."""
        mock_client.messages.create.side_effect = error
        response = orchestrator.answer("What is EGFR?")

        assert response.error_kind == kind
        assert response.subgraph is None
        assert response.text

    def test_client_created_lazily(self, extractor):
        """Test that the real client is built from the validated key on first use."""
        with patch("oncograph.core.chat_orchestrator.anthropic.Anthropic") as client_class:
            client_class.return_value.messages.create.return_value = make_api_response()
            orchestrator = ChatOrchestrator(extractor, api_key=f"  {FAKE_API_KEY}  ")
            client_class.assert_not_called()

            orchestrator.answer("What is EGFR?")
            orchestrator.answer("What is KRAS?")

        client_class.assert_called_once_with(api_key=FAKE_API_KEY)

    def test_from_settings(self, extractor, mock_client):
        settings = Settings(anthropic_api_key=FAKE_API_KEY, claude_model="claude-sonnet-4-5", claude_max_tokens=500)
        orchestrator = ChatOrchestrator.from_settings(settings, extractor, client=mock_client)
        orchestrator.answer("What is EGFR?")

        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5"
        assert kwargs["max_tokens"] == 500

    def test_missing_prompt_file(self, extractor, tmp_path):
        (tmp_path / "context_header.txt").write_text("HEADER", encoding="utf-8")
        with pytest.raises(FileNotFoundError):
            ChatOrchestrator(extractor, api_key=FAKE_API_KEY, prompts_dir=tmp_path)


class TestClassifyError:
    """Test suite for error classification messages."""

    def test_authentication_message(self):
        kind, message = classify_error(make_status_error(anthropic.AuthenticationError, 401))
        assert kind == "authentication"
        assert message.startswith("Authentication failed.")

    def test_rate_limit_message(self):
        kind, message = classify_error(make_status_error(anthropic.RateLimitError, 429))
        assert message == "Rate limit exceeded. Please wait a moment and try again."

    def test_client_error_is_generic(self):
        kind, message = classify_error(make_status_error(anthropic.BadRequestError, 400))
        assert kind == "generic"
        assert message.startswith("Error: ")

    def test_validation_error_verbatim(self):
        kind, message = classify_error(ValidationError("Question cannot be empty"))
        assert kind == "configuration"
        assert message == "Question cannot be empty"
