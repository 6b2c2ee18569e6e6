import asyncio
import json
import logging

import httpx
import requests
from huggingface_hub import InferenceClient, InferenceTimeoutError
from huggingface_hub.utils import HfHubHTTPError

from certtool import config
from certtool.errors import (
    ExtractionError,
    ExtractionParseError,
    InvalidCredential,
    TransientServiceError,
)
from certtool.prompts import IMAGE_SYSTEM_PROMPT, IMAGE_USER_PROMPT, TEXT_SYSTEM_PROMPT
from certtool.schemas import ExtractedInfo
from certtool.utils import attempt, strip_code_fence, to_data_url
from certtool.validation import validate_extraction

logger = logging.getLogger(__name__)

RAW_ERROR_LENGTH = 1000


def _status_code(error):
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None)


def _classify_error(error: Exception, mode: str) -> ExtractionError:
    if isinstance(error, (InferenceTimeoutError, httpx.TransportError, requests.ConnectionError, requests.Timeout)):
        return TransientServiceError(f"Model service unavailable ({mode}): {error}")

    status = _status_code(error)
    if status in (401, 403):
        return InvalidCredential("Invalid API key. Please check your configuration.")
    if status is not None and (status >= 500 or status == 429):
        return TransientServiceError(f"Model service error {status} ({mode}): {error}")
    return ExtractionError(f"Failed to get data from model ({mode}): {error}")


async def _call_model(messages, model: str, credential: str, mode: str) -> str:
    client = InferenceClient(api_key=credential)
    try:
        response = await asyncio.to_thread(
            client.chat.completions.create,
            model=model,
            messages=messages,
            max_tokens=config.MAX_TOKENS,
            response_format={"type": "json_object"},
        )
    except (HfHubHTTPError, InferenceTimeoutError, httpx.HTTPError, requests.RequestException) as e:
        raise _classify_error(e, mode) from e
    return response.choices[0].message.content or ""


def _parse_response(content: str, mode: str) -> ExtractedInfo:
    json_str = strip_code_fence(content)
    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(f"Model returned invalid JSON ({mode}). Raw: {content[:RAW_ERROR_LENGTH]}")
        raise ExtractionParseError(
            f"Failed to parse JSON from model ({mode}). Raw: {content[:RAW_ERROR_LENGTH]}. Err: {e}"
        ) from e
    return validate_extraction(parsed, content)


async def _request_extraction(messages, model: str, credential: str, mode: str, retry_delay=None) -> ExtractedInfo:
    delay = config.RETRY_DELAY_SECONDS if retry_delay is None else retry_delay

    content = await attempt(
        lambda: _call_model(messages, model, credential, mode),
        max_attempts=config.MAX_ATTEMPTS,
        is_retryable=lambda e: isinstance(e, TransientServiceError),
        backoff=lambda attempt_number: delay * attempt_number,
    )
    # Malformed output will not get better on retry, so parsing stays outside the retry loop
    return _parse_response(content, mode)


async def extract_from_text(text: str, credential: str, *, model=None, retry_delay=None) -> ExtractedInfo:
    messages = [
        {"role": "system", "content": TEXT_SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]
    return await _request_extraction(messages, model or config.TEXT_MODEL_ID, credential, "text", retry_delay)


async def extract_from_image(image_bytes: bytes, mime_type: str, credential: str, *, model=None, retry_delay=None) -> ExtractedInfo:
    messages = [
        {"role": "system", "content": IMAGE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": to_data_url(image_bytes, mime_type)}},
                {"type": "text", "text": IMAGE_USER_PROMPT},
            ],
        },
    ]
    return await _request_extraction(messages, model or config.VISION_MODEL_ID, credential, "image", retry_delay)
