from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Special:
    id: int


Segment = Union[Literal, Special]


class SpecialTokenSegmenter:
    """Cut text into literal runs and special tokens (e.g. '<|endoftext|>').

    Special tokens must never be split by the pre-tokenizers or merged by BPE, so
    they are taken out of the text before anything else happens. When several
    special tokens match at the same position, the longest one wins. Two distinct
    tokens of the same length can never both match at one position, so the winner
    is always unique.
    """

    def __init__(self, special_tokens: dict[str, int]):
        self.special_tokens = dict(special_tokens)  # Map literal to token index

        # Longest first: the first token that matches is then the longest match
        self._candidates = sorted(
            (token for token in self.special_tokens if token),
            key=len,
            reverse=True,
        )
        self._first_chars = {token[0] for token in self._candidates}

    def __len__(self) -> int:
        return len(self.special_tokens)

    def match_at(self, text: str, pos: int) -> str | None:
        if text[pos] not in self._first_chars:
            return None
        for token in self._candidates:
            if text.startswith(token, pos):
                return token
        return None

    def segment(self, text: str) -> list[Segment]:
        if not self._candidates:
            return [Literal(text)] if text else []

        segments: list[Segment] = []
        start = 0  # Start of the pending literal run
        pos = 0
        while pos < len(text):
            token = self.match_at(text, pos)
            if token is None:
                pos += 1
                continue
            if pos > start:
                segments.append(Literal(text[start:pos]))
            segments.append(Special(self.special_tokens[token]))
            pos += len(token)
            start = pos

        if pos > start:
            segments.append(Literal(text[start:pos]))
        return segments
