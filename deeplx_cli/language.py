#!/usr/bin/env python3
# ABOUTME: Language code utilities for DeepLX requests.
# ABOUTME: Upper-cases codes and maps full language names to ISO-639 codes.

import re
from typing import Dict

import pycountry


class LanguageHandler:
    """Normalizes user-supplied languages into the codes DeepLX expects."""

    AUTO = "AUTO"

    # Plain codes such as "en", "deu", "pt-br", "zh_hans", "en-US"
    CODE_PATTERN = re.compile(r"^[a-z]{2,3}(?:[-_][a-z0-9]{2,4})?$", re.IGNORECASE)

    # Direct lookup for common language names and variations
    LANGUAGE_CODES: Dict[str, str] = {
        "chinese": "zh",
        "mandarin": "zh",
        "simplified chinese": "zh-hans",
        "traditional chinese": "zh-hant",
        "spanish": "es",
        "español": "es",
        "english": "en",
        "british english": "en-gb",
        "american english": "en-us",
        "arabic": "ar",
        "portuguese": "pt",
        "brazilian": "pt-br",
        "brazilian portuguese": "pt-br",
        "european portuguese": "pt-pt",
        "russian": "ru",
        "japanese": "ja",
        "german": "de",
        "deutsch": "de",
        "korean": "ko",
        "french": "fr",
        "français": "fr",
        "turkish": "tr",
        "italian": "it",
        "italiano": "it",
        "polish": "pl",
        "polski": "pl",
        "romanian": "ro",
        "dutch": "nl",
        "greek": "el",
        "czech": "cs",
        "swedish": "sv",
        "danish": "da",
        "finnish": "fi",
        "hungarian": "hu",
        "norwegian": "nb",
        "ukrainian": "uk",
        "indonesian": "id",
        "bulgarian": "bg",
        "estonian": "et",
        "latvian": "lv",
        "lithuanian": "lt",
        "slovak": "sk",
        "slovenian": "sl",
    }

    @classmethod
    def normalize_code(cls, language: str) -> str:
        """Turn a language code or name into the upper-case code sent to the server.

        Args:
            language: A code ("en", "pt-br", "auto") or a name ("Spanish")

        Returns:
            The upper-cased language code; unknown names are upper-cased as-is
        """
        value = language.strip()
        if not value:
            return value
        if value.lower() == "auto":
            return cls.AUTO

        if cls.CODE_PATTERN.match(value):
            return value.replace("_", "-").upper()

        code = cls.get_language_code(value)
        if code:
            return code.upper()
        return value.upper()

    @classmethod
    def get_language_code(cls, language_name: str) -> str:
        """Convert a language name to its ISO 639-1 code.

        Args:
            language_name: The name of the language to convert

        Returns:
            The lower-case code, or an empty string if the name is unknown
        """
        # Collapse punctuation and repeated whitespace, keep accented letters
        normalized = " ".join(re.sub(r"[\W_]+", " ", language_name.lower()).split())
        if not normalized:
            return ""

        if normalized in cls.LANGUAGE_CODES:
            return cls.LANGUAGE_CODES[normalized]

        try:
            lang = pycountry.languages.get(name=normalized.title())
        except (AttributeError, KeyError, LookupError):
            lang = None

        return getattr(lang, "alpha_2", "") if lang else ""
