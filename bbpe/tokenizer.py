import logging
import operator
from pathlib import Path
from typing import Any

from bbpe.byte_mapping import ByteMapping
from bbpe.config import TokenizerConfig
from bbpe.errors import InvalidInputError, TokenNotFoundError
from bbpe.merges import MergeRule, MergeTable
from bbpe.pre_tokenizers import build_pre_tokenizers, pre_tokenize
from bbpe.special_tokens import Literal, SpecialTokenSegmenter
from bbpe.vocab import Vocabulary


class Tokenizer:
    """Byte-level BPE tokenizer that runs a vocabulary trained elsewhere.

    Encoding goes through four steps:
        1. Special tokens are cut out of the text and mapped straight to their ids.
        2. The remaining text is split into chunks by the pre-tokenizers.
        3. The UTF-8 bytes of each chunk are mapped to printable symbols and looked
            up in the vocabulary, which gives one token per byte.
        4. Adjacent tokens are merged, always applying the merge that was learned
            earliest during training, until no rule applies.

    Decoding maps every id back to its string and every symbol of that string back
    to its byte. Nothing is learned here: the merges are applied in exactly the
    order in which they were trained, so the ids match the training-time tokenizer.

    The tokenizer is never modified after construction, so it can be shared by
    several threads calling `encode` and `decode` concurrently.
    """

    def __init__(self, config: TokenizerConfig):
        self.byte_mapping = ByteMapping()
        self.vocab = Vocabulary(config.vocab)
        self.merges = MergeTable(self.vocab, config.merges)
        self.pre_tokenizers = build_pre_tokenizers(config.pre_tokenizers)
        self.ignore_merges = config.ignore_merges

        # Initial token of every byte, None if the vocabulary lacks it. Built before
        # the added tokens are registered so that only the model's own vocabulary
        # supplies byte tokens.
        self.byte_ids: list[int | None] = [self._byte_id(b) for b in range(256)]

        special_tokens = {}
        for token in config.added_tokens:
            self.vocab.add(token.content, token.id)
            special_tokens[token.content] = token.id
        self.segmenter = SpecialTokenSegmenter(special_tokens)
        self.released = False

        logging.info(
            f"Loaded tokenizer: {len(self.vocab)} tokens (id space {self.vocab.size}), "
            f"{len(self.merges)} merges, {len(self.pre_tokenizers)} pre-tokenizers, "
            f"{len(self.segmenter)} special tokens"
        )

    @classmethod
    def from_config(cls, tree: dict[str, Any]) -> "Tokenizer":
        return cls(TokenizerConfig.from_dict(tree))

    @classmethod
    def from_json(cls, content: str) -> "Tokenizer":
        return cls(TokenizerConfig.from_json(content))

    @classmethod
    def from_file(cls, path: str | Path) -> "Tokenizer":
        return cls(TokenizerConfig.from_file(path))

    def __enter__(self) -> "Tokenizer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def release(self) -> None:
        """Drop every structure owned by the tokenizer. It cannot be used afterwards."""
        self.released = True
        self.vocab = None
        self.merges = None
        self.pre_tokenizers = ()
        self.segmenter = None
        self.byte_ids = []

    def _check_usable(self) -> None:
        if self.released:
            raise InvalidInputError("The tokenizer has been released")

    @property
    def vocab_size(self) -> int:
        self._check_usable()
        return self.vocab.size

    @property
    def special_tokens(self) -> dict[str, int]:
        self._check_usable()
        return dict(self.segmenter.special_tokens)

    def token_to_id(self, token: str) -> int | None:
        self._check_usable()
        return self.vocab.id_of(token)

    def id_to_token(self, idx: int) -> str | None:
        self._check_usable()
        return self.vocab.token_of(idx)

    def _byte_id(self, b: int) -> int | None:
        idx = self.vocab.id_of(self.byte_mapping.symbol_of(b))
        # Some vocabularies store ASCII bytes verbatim instead of as symbols
        if idx is None and b < 128:
            idx = self.vocab.id_of(chr(b))
        return idx

    def _find_best_merge(self, ids: list[int]) -> tuple[int, MergeRule | None]:
        """Find the position of the applicable merge with the lowest priority, i.e.
        the one learned earliest. Returns (-1, None) if no adjacent pair merges.
        """
        best_idx, best_rule = -1, None
        for i in range(len(ids) - 1):
            rule = self.merges.lookup(ids[i], ids[i + 1])
            if rule is not None and (best_rule is None or rule.priority < best_rule.priority):
                best_idx, best_rule = i, rule
        return best_idx, best_rule

    def _encode_chunk(self, chunk: str, token_ids: list[int]) -> None:
        """Encode a chunk of text and append its token ids to `token_ids`."""
        chunk_bytes = chunk.encode("utf-8")
        if not chunk_bytes:
            return

        if self.ignore_merges:
            idx = self.vocab.id_of(self.byte_mapping.encode(chunk_bytes))
            if idx is not None:
                token_ids.append(idx)
                return

        ids = []
        for b in chunk_bytes:
            idx = self.byte_ids[b]
            if idx is None:
                raise TokenNotFoundError(
                    f"Byte {b:#04x} ({self.byte_mapping.symbol_of(b)!r}) is not in the vocabulary"
                )
            ids.append(idx)

        # Each merge shortens the sequence by one, so this terminates
        while len(ids) >= 2:
            best_idx, rule = self._find_best_merge(ids)
            if rule is None:
                break
            ids[best_idx] = rule.new_id
            del ids[best_idx + 1]

        token_ids.extend(ids)

    def encode(self, text: str) -> list[int]:
        self._check_usable()
        if not isinstance(text, str):
            raise InvalidInputError(f"Expected text as str, got {type(text).__name__}")
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            # E.g. a lone surrogate
            raise InvalidInputError(f"Text is not valid unicode: {e}") from e

        token_ids = []
        for segment in self.segmenter.segment(text):
            if isinstance(segment, Literal):
                for chunk in pre_tokenize(self.pre_tokenizers, segment.text):
                    self._encode_chunk(chunk, token_ids)
            else:
                token_ids.append(segment.id)
        return token_ids

    def decode_bytes(self, token_ids: list[int]) -> bytes:
        """Convert a sequence of token ids back to the raw bytes they represent.

        Symbols produced by the byte mapping turn back into their byte. Any other
        character (e.g. in a special token, whose text never went through the byte
        mapping) is emitted as its own UTF-8 encoding.
        """
        self._check_usable()
        if not token_ids:
            raise InvalidInputError("Cannot decode an empty sequence of ids")

        # First pass: validate the ids and compute the size of the output
        tokens = []
        total_bytes = 0
        for idx in token_ids:
            if isinstance(idx, bool):
                raise InvalidInputError(f"Token ids must be integers, got {idx!r}")
            # Accepts integer scalars of array libraries as well
            try:
                idx = operator.index(idx)
            except TypeError as e:
                raise InvalidInputError(f"Token ids must be integers, got {idx!r}") from e
            token = self.vocab.token_of(idx)
            if token is None:
                raise TokenNotFoundError(f"Invalid token id: {idx}")
            tokens.append(token)
            for ch in token:
                if self.byte_mapping.to_byte(ord(ch)) is not None:
                    total_bytes += 1
                    continue
                try:
                    total_bytes += len(ch.encode("utf-8"))
                except UnicodeEncodeError as e:
                    # E.g. a lone surrogate in the configuration
                    raise InvalidInputError(
                        f"Token {idx} is not valid unicode: {token!r}"
                    ) from e

        # Second pass: write into a buffer of the final size
        buffer = bytearray(total_bytes)
        pos = 0
        for token in tokens:
            for ch in token:
                b = self.byte_mapping.to_byte(ord(ch))
                if b is not None:
                    buffer[pos] = b
                    pos += 1
                else:
                    encoded = ch.encode("utf-8")
                    buffer[pos : pos + len(encoded)] = encoded
                    pos += len(encoded)

        return bytes(buffer)

    def decode(self, token_ids: list[int]) -> str:
        text_bytes = self.decode_bytes(token_ids)

        # Not every byte sequence is valid UTF-8, e.g. if a model emits the first
        # token of a multi-byte character on its own. Replace invalid bytes with the
        # unicode replacement character rather than failing.
        return text_bytes.decode("utf-8", errors="replace")
