"""AI proxy server: keeps the model credential off the dashboard.

Run with: weathersensor-proxy  (or python -m weathersensor.proxy)

POST /api/gemini  {"prompt": "..."}
    200 {"response": "..."}                 generated (or mocked) text
    400 {"error": "..."}                    missing prompt
    502 {"error": "...", "details": "..."}  upstream model call failed

When ANTHROPIC_API_KEY is not configured the route returns a mocked echo
of the prompt so the dashboard can be developed offline.
"""

from __future__ import annotations

import logging

import anthropic
from flask import Flask, jsonify, request
from flask_cors import CORS

from weathersensor import config

logger = logging.getLogger(__name__)

MOCK_PREVIEW_CHARS = 400


def mocked_response(prompt: str) -> str:
    """Deterministic stand-in used when no credential is configured."""
    return f"Mocked AI response for prompt:\n\n{prompt[:MOCK_PREVIEW_CHARS]}..."


def generate_text(prompt: str, api_key: str) -> str:
    """Send a single-turn prompt to the hosted model and return its text.

    Raises:
        anthropic.AnthropicError: If the upstream call fails.
        TypeError: If the response content is not a list of blocks.
    """
    client = anthropic.Anthropic(api_key=api_key)
    response = client.messages.create(
        model=config.ANTHROPIC_MODEL,
        max_tokens=config.AI_MAX_TOKENS,
        messages=[{"role": "user", "content": prompt}],
    )
    return "".join(
        block.text for block in response.content if getattr(block, "type", "") == "text"
    )


def create_app() -> Flask:
    """Build the proxy Flask app with CORS enabled for the dashboard."""
    app = Flask(__name__)
    CORS(app)

    @app.route("/api/gemini", methods=["POST"])
    def generate():
        data = request.get_json(silent=True) or {}
        prompt = data.get("prompt") if isinstance(data, dict) else None
        if not prompt or not isinstance(prompt, str):
            return jsonify({"error": "Missing prompt in request body"}), 400

        api_key = config.get_anthropic_api_key()
        if not api_key:
            logger.warning("ANTHROPIC_API_KEY not set, returning mocked response")
            return jsonify({"response": mocked_response(prompt)})

        logger.info("Forwarding prompt (%d chars) to %s", len(prompt), config.ANTHROPIC_MODEL)
        try:
            text = generate_text(prompt, api_key)
        except (anthropic.AnthropicError, AttributeError, TypeError) as exc:
            logger.error("Error calling AI provider: %s", exc)
            return jsonify({"error": "Failed to contact AI provider", "details": str(exc)}), 502

        logger.info("AI provider response received")
        return jsonify({"response": text})

    return app


def main() -> None:
    """Entry point for the weathersensor-proxy console script."""
    config.configure_logging()
    api_key = config.get_anthropic_api_key()
    logger.info("Environment check:")
    logger.info("- PORT: %s", config.PROXY_PORT)
    logger.info(
        "- API key loaded: %s",
        f"Yes (length: {len(api_key)})" if api_key else "No",
    )
    app = create_app()
    logger.info("Backend server listening on http://%s:%s", config.PROXY_HOST, config.PROXY_PORT)
    app.run(host=config.PROXY_HOST, port=config.PROXY_PORT)


if __name__ == "__main__":
    main()
