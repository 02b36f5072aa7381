"""JSON extraction utilities for LLM responses."""

import json
import re
from typing import Any, Dict, Optional

from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)


def fix_json_common_issues(json_text: str) -> str:
    """
    Fix common JSON issues in LLM responses.

    Handles trailing commas before closing brackets and typographic quotes.
    """
    fixed = json_text.replace("“", '"').replace("”", '"')
    fixed = re.sub(r",\s*([}\]])", r"\1", fixed)
    return fixed


def _try_load(candidate: str) -> Optional[Any]:
    for text in (candidate, fix_json_common_issues(candidate)):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            continue
    return None


def extract_json_object(response_text: str) -> Optional[Dict[str, Any]]:
    """
    Extract a JSON object from an LLM response with several fallback strategies.

    Args:
        response_text: Raw response from the model

    Returns:
        Parsed dictionary, or None when no strategy yields a JSON object
    """
    if not response_text:
        return None

    # Strategy 1: ```json fenced block
    json_block_match = re.search(r"```json\s*(.*?)\s*```", response_text, re.DOTALL)
    if json_block_match:
        parsed = _try_load(json_block_match.group(1))
        if isinstance(parsed, dict):
            return parsed

    # Strategy 2: any fenced block
    code_block_match = re.search(r"```\s*(.*?)\s*```", response_text, re.DOTALL)
    if code_block_match:
        parsed = _try_load(code_block_match.group(1))
        if isinstance(parsed, dict):
            return parsed

    # Strategy 3: first { to last }
    json_start = response_text.find("{")
    json_end = response_text.rfind("}") + 1
    if json_start >= 0 and json_end > json_start:
        parsed = _try_load(response_text[json_start:json_end])
        if isinstance(parsed, dict):
            return parsed

    logger.debug("json_extraction_failed", response_preview=response_text[:200])
    return None
