import unittest

import regex as re

from bbpe.errors import ConfigurationError, PatternCompileError, UnsupportedTypeError
from bbpe.pre_tokenizers import (
    ByteLevel,
    PatternSplit,
    build_pre_tokenizer,
    build_pre_tokenizers,
    pre_tokenize,
)
from bbpe.split_patterns import GPT2_SPLIT_PATTERN, GPT4_SPLIT_PATTERN


class TestByteLevel(unittest.TestCase):
    def test_split(self):
        self.assertEqual(ByteLevel().split("hello world"), ["hello world"])
        self.assertEqual(
            ByteLevel(add_prefix_space=True).split("hello world"), [" hello world"]
        )
        self.assertEqual(ByteLevel(add_prefix_space=True).split(""), [" "])


class TestPatternSplit(unittest.TestCase):
    def test_split_gpt2(self):
        stage = PatternSplit(re.compile(GPT2_SPLIT_PATTERN))
        self.assertEqual(stage.split("Hello how're you"), ["Hello", " how", "'re", " you"])
        self.assertEqual(
            stage.split("Hello how are         you?"),
            ["Hello", " how", " are", "        ", " you", "?"],
        )

    def test_split_gpt4(self):
        stage = PatternSplit(re.compile(GPT4_SPLIT_PATTERN))
        self.assertEqual(stage.split("Hello HOW'RE you"), ["Hello", " HOW", "'RE", " you"])
        self.assertEqual(stage.split("Hello\nWorld"), ["Hello", "\n", "World"])
        self.assertEqual(stage.split("1234567"), ["123", "456", "7"])

    def test_unmatched_text_is_kept(self):
        stage = PatternSplit(re.compile(r"\d+"))
        self.assertEqual(
            stage.split("ab12cd3"),
            ["ab", "12", "cd", "3"],
            msg="Text between matches must become chunks of its own!",
        )
        self.assertEqual(stage.split("12ab"), ["12", "ab"])

    def test_no_match(self):
        stage = PatternSplit(re.compile(r"\d+"))
        self.assertEqual(stage.split("abc"), ["abc"])
        self.assertEqual(stage.split(""), [""])

    def test_empty_matches_are_skipped(self):
        stage = PatternSplit(re.compile(r"x*"))
        self.assertEqual(stage.split("abxxc"), ["ab", "xx", "c"])
        self.assertEqual(stage.split("abc"), ["abc"])

    def test_unicode(self):
        stage = PatternSplit(re.compile(GPT2_SPLIT_PATTERN))
        self.assertEqual(stage.split("안녕 👋!"), ["안녕", " 👋!"])


class TestPreTokenize(unittest.TestCase):
    def test_no_stages(self):
        self.assertEqual(pre_tokenize((), "Hello how are you"), ["Hello how are you"])
        self.assertEqual(pre_tokenize((), ""), [""])

    def test_chain(self):
        stages = (ByteLevel(add_prefix_space=True), PatternSplit(re.compile(GPT2_SPLIT_PATTERN)))
        self.assertEqual(pre_tokenize(stages, "hello world"), [" hello", " world"])

    def test_each_stage_runs_on_every_chunk(self):
        stages = (PatternSplit(re.compile(r"\s+")), ByteLevel(add_prefix_space=True))
        self.assertEqual(
            pre_tokenize(stages, "a b"),
            [" a", "  ", " b"],
            msg="The second stage should run on each of the 3 chunks of the first one, "
            "in order.",
        )


class TestBuildPreTokenizer(unittest.TestCase):
    def test_byte_level(self):
        self.assertEqual(build_pre_tokenizer({"type": "ByteLevel"}), ByteLevel())
        self.assertEqual(
            build_pre_tokenizer(
                {"type": "ByteLevel", "add_prefix_space": True, "trim_offsets": True}
            ),
            ByteLevel(add_prefix_space=True),
        )

    def test_split_regex(self):
        stage = build_pre_tokenizer(
            {"type": "Split", "pattern": {"Regex": GPT4_SPLIT_PATTERN}, "behavior": "Isolated"}
        )
        self.assertIsInstance(stage, PatternSplit)
        self.assertEqual(stage.split("we'll go"), ["we", "'ll", " go"])

    def test_split_string(self):
        stage = build_pre_tokenizer({"type": "Split", "pattern": {"String": "."}})
        self.assertEqual(
            stage.split("a.b"), ["a", ".", "b"], msg="String patterns are literals!"
        )
        self.assertEqual(stage.split("ab"), ["ab"])

    def test_unsupported_behavior(self):
        with self.assertLogs(level="WARNING"):
            stage = build_pre_tokenizer(
                {"type": "Split", "pattern": {"Regex": r"\s"}, "behavior": "Removed"}
            )
        self.assertEqual(stage.split("a b"), ["a", " ", "b"])

    def test_errors(self):
        self.assertRaises(
            PatternCompileError,
            build_pre_tokenizer,
            {"type": "Split", "pattern": {"Regex": "(unclosed"}},
        )
        self.assertRaises(UnsupportedTypeError, build_pre_tokenizer, {"type": "Whitespace"})
        self.assertRaises(ConfigurationError, build_pre_tokenizer, {})
        self.assertRaises(ConfigurationError, build_pre_tokenizer, {"type": "Split"})
        self.assertRaises(
            ConfigurationError, build_pre_tokenizer, {"type": "Split", "pattern": {}}
        )

    def test_build_pre_tokenizers(self):
        stages = build_pre_tokenizers(
            [{"type": "Split", "pattern": {"Regex": r"\d+"}}, {"type": "ByteLevel"}]
        )
        self.assertEqual(len(stages), 2)
        self.assertIsInstance(stages[0], PatternSplit)
        self.assertEqual(stages[1], ByteLevel())
        self.assertEqual(build_pre_tokenizers([]), ())


if __name__ == "__main__":
    unittest.main()
