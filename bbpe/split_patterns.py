"""Split patterns used by the pre-tokenizers of well-known byte-level BPE models.

Both are meant for the `regex` module: they rely on unicode properties (\\p{L},
\\p{N}) and, for GPT-4, on possessive quantifiers, none of which the standard
library `re` supports.
"""

# fmt: off
GPT2_SPLIT_PATTERN = r"""'s|'t|'re|'ve|'m|'ll|'d| ?\p{L}+| ?\p{N}+| ?[^\s\p{L}\p{N}]+|\s+(?!\S)|\s+"""
GPT4_SPLIT_PATTERN = r"""'(?i:[sdmt]|ll|ve|re)|[^\r\n\p{L}\p{N}]?+\p{L}+|\p{N}{1,3}| ?[^\s\p{L}\p{N}]++[\r\n]*|\s*[\r\n]|\s+(?!\S)|\s+"""
# fmt: on
