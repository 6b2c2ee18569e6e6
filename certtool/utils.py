import asyncio
import base64
import logging
import re

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


# ----------- Strip ```json fences around model output ------------
def strip_code_fence(text):
    """
    Returns the body of a fenced block when the whole answer is wrapped in one.
    e.g., '```json\\n{"a": 1}\\n```' -> '{"a": 1}'
    """
    stripped = (text or "").strip()
    match = _FENCE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


# ----------- Image bytes -> data URL for the chat payload ------------
def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


# ----------- Bounded retry ------------
async def attempt(func, max_attempts, is_retryable, backoff):
    """
    Awaits func() up to max_attempts times.

    Retries only when is_retryable(error) is true, sleeping backoff(n) seconds
    after failed attempt n. Non-retryable errors and the error of the last
    attempt are raised unchanged.
    """
    for attempt_number in range(1, max_attempts + 1):
        try:
            return await func()
        except Exception as e:
            if attempt_number >= max_attempts or not is_retryable(e):
                raise
            delay = backoff(attempt_number)
            logger.warning(f"Attempt {attempt_number}/{max_attempts} failed ({e}); retrying in {delay:.1f}s")
            await asyncio.sleep(delay)
