"""Unit tests for the extraction client."""
import asyncio
import json
import httpx
import pytest
import requests
from unittest.mock import Mock, patch

from certtool.errors import (
    ExtractionError,
    ExtractionParseError,
    InvalidCredential,
    SchemaError,
    TransientServiceError,
)
from certtool.llm import extract_from_image, extract_from_text
from certtool.prompts import IMAGE_SYSTEM_PROMPT, TEXT_SYSTEM_PROMPT


def _http_error(status_code: int) -> requests.HTTPError:
    return requests.HTTPError(f"{status_code} error", response=Mock(status_code=status_code))


@pytest.fixture
def mock_client():
    with patch("certtool.llm.InferenceClient") as client_cls:
        client = Mock()
        client_cls.return_value = client
        yield client


@pytest.mark.unit
class TestExtractFromText:
    """Tests for extract_from_text."""

    def test_success(self, mock_client, chat_response, sample_raw_extraction):
        mock_client.chat.completions.create.return_value = chat_response(json.dumps(sample_raw_extraction))

        result = asyncio.run(extract_from_text("certificate text", "hf_key", retry_delay=0))

        assert result.report_number == "MO-374-GBM-25-17-652"
        assert result.game_instances[0].files[0].name == "mega.dll"

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": TEXT_SYSTEM_PROMPT}
        assert kwargs["messages"][1] == {"role": "user", "content": "certificate text"}
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_strips_code_fence(self, mock_client, chat_response, sample_raw_extraction):
        fenced = "```json\n" + json.dumps(sample_raw_extraction) + "\n```"
        mock_client.chat.completions.create.return_value = chat_response(fenced)

        result = asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert result.supplier_registration_number == "GRSM1241574"

    def test_transient_error_retried_exactly_three_times(self, mock_client):
        mock_client.chat.completions.create.side_effect = _http_error(500)

        with pytest.raises(TransientServiceError):
            asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert mock_client.chat.completions.create.call_count == 3

    def test_transient_error_then_success(self, mock_client, chat_response, sample_raw_extraction):
        mock_client.chat.completions.create.side_effect = [
            requests.ConnectionError("reset"),
            chat_response(json.dumps(sample_raw_extraction)),
        ]

        result = asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert result.report_number == "MO-374-GBM-25-17-652"
        assert mock_client.chat.completions.create.call_count == 2

    def test_connect_error_then_success(self, mock_client, chat_response, sample_raw_extraction):
        mock_client.chat.completions.create.side_effect = [
            httpx.ConnectError("All connection attempts failed"),
            chat_response(json.dumps(sample_raw_extraction)),
        ]

        result = asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert result.report_number == "MO-374-GBM-25-17-652"
        assert mock_client.chat.completions.create.call_count == 2

    def test_timeout_retried_exactly_three_times(self, mock_client):
        mock_client.chat.completions.create.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(TransientServiceError):
            asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert mock_client.chat.completions.create.call_count == 3

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_invalid_credential_not_retried(self, mock_client, status_code):
        mock_client.chat.completions.create.side_effect = _http_error(status_code)

        with pytest.raises(InvalidCredential):
            asyncio.run(extract_from_text("text", "bad_key", retry_delay=0))

        assert mock_client.chat.completions.create.call_count == 1

    def test_other_http_error_not_retried(self, mock_client):
        mock_client.chat.completions.create.side_effect = _http_error(400)

        with pytest.raises(ExtractionError) as exc_info:
            asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert not isinstance(exc_info.value, TransientServiceError)
        assert mock_client.chat.completions.create.call_count == 1

    def test_invalid_json_fails_fast(self, mock_client, chat_response):
        mock_client.chat.completions.create.return_value = chat_response("Sorry, I cannot help with that.")

        with pytest.raises(ExtractionParseError):
            asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert mock_client.chat.completions.create.call_count == 1

    def test_schema_error_fails_fast(self, mock_client, chat_response):
        mock_client.chat.completions.create.return_value = chat_response('{"reportNumber": null}')

        with pytest.raises(SchemaError):
            asyncio.run(extract_from_text("text", "hf_key", retry_delay=0))

        assert mock_client.chat.completions.create.call_count == 1


@pytest.mark.unit
class TestExtractFromImage:
    """Tests for extract_from_image."""

    def test_sends_image_as_data_url(self, mock_client, chat_response, sample_raw_extraction):
        mock_client.chat.completions.create.return_value = chat_response(json.dumps(sample_raw_extraction))

        result = asyncio.run(extract_from_image(b"abc", "image/png", "hf_key", retry_delay=0))

        assert result.game_instances[0].game_name == "Mega Fortune"
        messages = mock_client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0]["content"] == IMAGE_SYSTEM_PROMPT
        image_part = messages[1]["content"][0]
        assert image_part["image_url"]["url"] == "data:image/png;base64,YWJj"
