"""Text normalization for documents and queries.

Both ingestion and query text go through the same ``Tokenizer`` so token
containment checks compare like with like.
"""

from __future__ import annotations

from collections.abc import Iterable
import re

from unidecode import unidecode


DEFAULT_SPLIT_CHARACTERS: tuple[str, ...] = ("-", "(", ")", "_", ".", ",", "/", "\\", "[", "]", "{", "}")


class Tokenizer:
    """Splits on whitespace and punctuation, transliterates to ASCII and lowercases.

    Fragments that end up empty (consecutive delimiters, characters with no
    ASCII transliteration) are dropped.
    """

    def __init__(self, split_characters: Iterable[str] = DEFAULT_SPLIT_CHARACTERS) -> None:
        self.split_characters = tuple(split_characters)
        escaped = "".join(re.escape(char) for char in self.split_characters)
        self._pattern = re.compile(rf"[\s{escaped}]+" if escaped else r"\s+")

    def encode(self, text: str) -> list[str]:
        tokens: list[str] = []
        for fragment in self._pattern.split(text.strip()):
            if not fragment:
                continue
            token = unidecode(fragment).lower().strip()
            if token:
                tokens.append(token)
        return tokens

    def __call__(self, text: str) -> list[str]:
        return self.encode(text)

    def __repr__(self) -> str:
        return f"Tokenizer(split_characters={self.split_characters!r})"


_DEFAULT_TOKENIZER = Tokenizer()


def encode(text: str) -> list[str]:
    """Tokenize ``text`` with the default split characters."""
    return _DEFAULT_TOKENIZER.encode(text)
