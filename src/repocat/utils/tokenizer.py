# src/repocat/utils/tokenizer.py
from typing import Optional

import tiktoken


class Tokenizer:
    _encoding: Optional["tiktoken.Encoding"] = None
    _unavailable = False

    @classmethod
    def get_encoding(cls) -> Optional["tiktoken.Encoding"]:
        # tiktoken downloads encodings on first use; offline runs fall back to estimates
        if cls._encoding is None and not cls._unavailable:
            try:
                cls._encoding = tiktoken.get_encoding("cl100k_base")
            except Exception:
                cls._unavailable = True
        return cls._encoding

    @staticmethod
    def estimate(text: str) -> int:
        return len(text) // 4

    @classmethod
    def count(cls, text: str) -> int:
        """Estimates token count for a given text."""
        encoding = cls.get_encoding()
        if encoding is None:
            return cls.estimate(text)
        return len(encoding.encode(text, disallowed_special=()))
