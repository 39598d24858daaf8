"""
Response Parser - Pure functions to clean and parse AI outputs.
"""
import re
import json
from typing import Dict, Any, Optional


class ResponseParser:
    """Utility to clean and structure AI responses."""

    @staticmethod
    def clean_markdown(text: str) -> str:
        """
        Remove a markdown code fence around the text.
        Example: ```json ... ``` -> ...
        """
        if not text:
            return ""
        cleaned = re.sub(r'^```\w*\s*', '', text.strip())
        cleaned = re.sub(r'\s*```$', '', cleaned)
        return cleaned.strip()

    @staticmethod
    def extract_json(text: str) -> Optional[Dict[str, Any]]:
        """
        Parse the JSON object in ``text``: raw, fenced, or embedded in prose.
        Returns None when no object can be parsed.
        """
        if not text:
            return None

        candidates = [text, ResponseParser.clean_markdown(text)]
        start = text.find('{')
        end = text.rfind('}')
        if start != -1 and end > start:
            candidates.append(text[start:end + 1])

        for candidate in candidates:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed
        return None
