import logging
from dataclasses import dataclass
from typing import Any, Union

import regex as re

from bbpe.errors import ConfigurationError, PatternCompileError, UnsupportedTypeError


@dataclass(frozen=True)
class ByteLevel:
    """Keep the text as a single chunk, optionally prefixed with a space so that the
    first word is tokenized like any word that follows a space.
    """

    add_prefix_space: bool = False

    def split(self, text: str) -> list[str]:
        return [" " + text] if self.add_prefix_space else [text]


@dataclass(frozen=True)
class PatternSplit:
    """Split the text around every match of a regex pattern. Both the matches and the
    text between them become chunks, so that no text is lost.

    This is what prevents BPE from merging across categories of characters, e.g.
    from creating separate tokens for 'dog.', 'dog!' and 'dog?'.
    """

    pattern: re.Pattern

    def split(self, text: str) -> list[str]:
        chunks = []
        last_end = 0  # End of the text that has been assigned to a chunk
        offset = 0  # Where to look for the next match
        while offset < len(text):
            match = self.pattern.search(text, offset)
            if match is None:
                break
            start, end = match.span()

            # An empty match is not a split point: move on by one character
            if start == end:
                offset = start + 1
                continue

            if start > last_end:
                chunks.append(text[last_end:start])
            chunks.append(text[start:end])
            last_end = offset = end

        if last_end < len(text):
            chunks.append(text[last_end:])

        # E.g. the pattern never matched, or the text is empty
        if not chunks:
            chunks.append(text)
        return chunks


PreTokenizer = Union[ByteLevel, PatternSplit]


def pre_tokenize(stages: tuple[PreTokenizer, ...], text: str) -> list[str]:
    """Run the chain of pre-tokenizers over `text`.

    Each stage is applied to every chunk produced by the previous stage, and the
    results are concatenated in order. Without any stage the text is returned as a
    single chunk.
    """
    chunks = [text]
    for stage in stages:
        chunks = [part for chunk in chunks for part in stage.split(chunk)]
    return chunks


def compile_pattern(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternCompileError(f"Invalid split pattern {pattern!r}: {e}") from e


def build_pre_tokenizer(descriptor: dict[str, Any]) -> PreTokenizer:
    """Create a single pre-tokenizer stage from its configuration descriptor."""
    if not isinstance(descriptor, dict) or not isinstance(descriptor.get("type"), str):
        raise ConfigurationError(f"Pre-tokenizer without a type: {descriptor!r}")

    stage_type = descriptor["type"]
    if stage_type == "ByteLevel":
        return ByteLevel(add_prefix_space=descriptor.get("add_prefix_space") is True)

    if stage_type == "Split":
        pattern = descriptor.get("pattern")
        if isinstance(pattern, dict) and isinstance(pattern.get("Regex"), str):
            compiled = compile_pattern(pattern["Regex"])
        elif isinstance(pattern, dict) and isinstance(pattern.get("String"), str):
            compiled = compile_pattern(re.escape(pattern["String"]))
        else:
            raise ConfigurationError(f"Split pre-tokenizer without a pattern: {pattern!r}")

        behavior = descriptor.get("behavior", "Isolated")
        if behavior != "Isolated" or descriptor.get("invert"):
            logging.warning(
                f"Split pre-tokenizer with behavior={behavior!r} and "
                f"invert={descriptor.get('invert')!r} is applied as an isolated split"
            )
        return PatternSplit(compiled)

    raise UnsupportedTypeError(f"Unsupported pre-tokenizer type: {stage_type!r}")


def build_pre_tokenizers(descriptors: list[dict[str, Any]]) -> tuple[PreTokenizer, ...]:
    return tuple(build_pre_tokenizer(descriptor) for descriptor in descriptors)
