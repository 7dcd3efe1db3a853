import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from ..config import Settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> genai.Client:
    return genai.Client(api_key=Settings.get_gemini_api_key())


def query_gemini(
    prompt: str,
    response_schema: Optional[Dict[str, Any]] = None,
    response_mime_type: Optional[str] = None,
    model: Optional[str] = None,
) -> Any:
    """
    Send a prompt to Gemini.

    When response_mime_type is "application/json" the parsed JSON is returned,
    otherwise the response text.
    """
    config = None
    if response_schema is not None or response_mime_type is not None:
        config = types.GenerateContentConfig(
            response_mime_type=response_mime_type,
            response_json_schema=response_schema,
        )

    response = get_client().models.generate_content(
        model=model or Settings.GEMINI_MODEL,
        contents=prompt,
        config=config,
    )
    text = response.text or ""

    if response_mime_type == "application/json":
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Gemini returned non-JSON content | length=%s", len(text))
            return text
    return text
