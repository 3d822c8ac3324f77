#!/usr/bin/env python3
# ABOUTME: Request and response payloads for the DeepLX /translate endpoint.
# ABOUTME: Handles JSON conversion and normalizes missing or null fields.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


@dataclass
class TranslationRequest:
    """Body sent to POST /translate. Language codes are always upper-case."""

    text: str
    source_lang: str = "AUTO"
    target_lang: str = "EN"

    def __post_init__(self):
        self.source_lang = self.source_lang.upper()
        self.target_lang = self.target_lang.upper()

    def to_dict(self) -> Dict[str, str]:
        return {
            "text": self.text,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
        }


@dataclass
class TranslationResponse:
    """Parsed reply from the server.

    `code` mirrors HTTP status semantics inside the payload; a 200 transport
    status can still carry a failure code here.
    """

    code: int = 0
    id: int = 0
    data: str = ""
    alternatives: List[str] = field(default_factory=list)
    source_lang: str = ""
    target_lang: str = ""
    method: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TranslationResponse":
        """Create a response from decoded JSON.

        Args:
            payload: Decoded JSON object

        Returns:
            TranslationResponse with defaults for absent fields

        Raises:
            TypeError, ValueError: If a field has an unusable type
        """
        alternatives = payload.get("alternatives") or []
        if not isinstance(alternatives, list):
            raise TypeError("'alternatives' is not a list")

        return cls(
            code=int(payload.get("code") or 0),
            id=int(payload.get("id") or 0),
            data=_as_text(payload.get("data")),
            alternatives=[_as_text(alt) for alt in alternatives],
            source_lang=_as_text(payload.get("source_lang")),
            target_lang=_as_text(payload.get("target_lang")),
            method=_as_text(payload.get("method")),
        )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
