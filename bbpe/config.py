import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bbpe.errors import (
    ConfigurationError,
    JsonParseError,
    UnsupportedTypeError,
    VocabMissingError,
)


@dataclass
class AddedToken:
    content: str  # Literal text of the token, matched verbatim
    id: int


@dataclass
class TokenizerConfig:
    """The parts of a `tokenizer.json` file needed to run a byte-level BPE tokenizer.

    Merges are kept in training order, which is their priority. Pre-tokenizer
    descriptors are stored flattened: a `Sequence` contributes its stages in order.
    """

    vocab: dict[str, int]
    merges: list[tuple[str, str]] = field(default_factory=list)
    pre_tokenizers: list[dict[str, Any]] = field(default_factory=list)
    added_tokens: list[AddedToken] = field(default_factory=list)
    ignore_merges: bool = False

    @classmethod
    def from_dict(cls, tree: dict[str, Any]) -> "TokenizerConfig":
        if not isinstance(tree, dict):
            raise ConfigurationError("The tokenizer configuration must be an object")

        model = tree.get("model")
        if not isinstance(model, dict) or not model.get("vocab"):
            raise VocabMissingError("The configuration has no vocabulary (model.vocab)")

        model_type = model.get("type")
        if model_type is not None and model_type != "BPE":
            raise UnsupportedTypeError(f"Unsupported model type: {model_type!r}")

        vocab = model["vocab"]
        if not isinstance(vocab, dict):
            raise ConfigurationError("model.vocab must map token strings to ids")

        return cls(
            vocab=vocab,
            merges=parse_merges(model.get("merges")),
            pre_tokenizers=flatten_pre_tokenizers(tree.get("pre_tokenizer")),
            added_tokens=parse_added_tokens(tree.get("added_tokens")),
            ignore_merges=model.get("ignore_merges") is True,
        )

    @classmethod
    def from_json(cls, content: str) -> "TokenizerConfig":
        try:
            tree = json.loads(content)
        except json.JSONDecodeError as e:
            raise JsonParseError(f"Invalid tokenizer JSON: {e}") from e
        return cls.from_dict(tree)

    @classmethod
    def from_file(cls, path: str | Path) -> "TokenizerConfig":
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_json(content)


def parse_merges(merges: Any) -> list[tuple[str, str]]:
    """Normalize the merge list. Each rule is either "left right" (split at the
    first space) or a [left, right] pair. Malformed records are skipped.
    """
    if not isinstance(merges, list):
        return []

    pairs = []
    for merge in merges:
        if isinstance(merge, str):
            left, sep, right = merge.partition(" ")
            if not sep:
                logging.debug(f"Skipping merge without separator: {merge!r}")
                continue
            pairs.append((left, right))
        elif (
            isinstance(merge, list)
            and len(merge) == 2
            and all(isinstance(part, str) for part in merge)
        ):
            pairs.append((merge[0], merge[1]))
        else:
            logging.debug(f"Skipping malformed merge: {merge!r}")
    return pairs


def flatten_pre_tokenizers(descriptor: Any) -> list[dict[str, Any]]:
    if descriptor is None:
        return []
    if not isinstance(descriptor, dict):
        raise ConfigurationError(f"Invalid pre_tokenizer: {descriptor!r}")

    if descriptor.get("type") == "Sequence":
        stages = descriptor.get("pretokenizers")
        if not isinstance(stages, list):
            raise ConfigurationError("Sequence pre_tokenizer without pretokenizers")
        return [stage for item in stages for stage in flatten_pre_tokenizers(item)]

    return [descriptor]


def parse_added_tokens(added_tokens: Any) -> list[AddedToken]:
    if not isinstance(added_tokens, list):
        return []

    tokens = []
    for record in added_tokens:
        if not isinstance(record, dict):
            continue
        content, idx = record.get("content"), record.get("id")
        if not isinstance(content, str) or isinstance(idx, bool) or not isinstance(idx, int):
            logging.debug(f"Skipping malformed added token: {record!r}")
            continue
        tokens.append(AddedToken(content=content, id=idx))
    return tokens
