"""Client for the AI proxy endpoint.

The dashboard never holds a model credential: it posts the prompt to the
proxy (see proxy.py), which forwards it to the hosted model. Every call
returns text that can be shown to the user, including on failure.
"""

from __future__ import annotations

import logging

import httpx

from weathersensor import config

logger = logging.getLogger(__name__)


class GenerationFailed(Exception):
    """Raised when the proxy call fails or returns a malformed body."""


def _post_prompt(prompt: str) -> str:
    """POST the prompt to the proxy and return the generated text.

    Raises:
        GenerationFailed: On HTTP errors, non-2xx statuses, or a body
            without a string "response".
    """
    try:
        response = httpx.post(
            config.AI_PROXY_URL,
            json={"prompt": prompt},
            timeout=config.AI_REQUEST_TIMEOUT,
        )
    except httpx.TimeoutException:
        raise GenerationFailed("The AI service timed out.")
    except httpx.HTTPError as exc:
        raise GenerationFailed(f"Could not reach the AI service: {exc}")

    try:
        body = response.json()
    except ValueError:
        body = None

    if not response.is_success:
        detail = body.get("error") if isinstance(body, dict) else None
        raise GenerationFailed(detail or f"AI service returned HTTP {response.status_code}")

    if not isinstance(body, dict) or not isinstance(body.get("response"), str):
        raise GenerationFailed("AI service returned a malformed response.")
    return body["response"]


def query(prompt: str) -> str:
    """Send a prompt through the proxy.

    Returns:
        The generated text, or a short error message if generation failed.
    """
    try:
        return _post_prompt(prompt)
    except GenerationFailed as exc:
        logger.warning("AI query failed: %s", exc)
        return f"Error querying the AI service: {exc}"
