"""Exceptions raised while loading a tokenizer or converting between text and ids."""


class TokenizerError(Exception):
    """Base class for every error raised by the tokenizer."""


class ConfigurationError(TokenizerError, ValueError):
    """The tokenizer configuration is malformed or incomplete. Only raised while
    loading: a tokenizer that was constructed successfully never raises it.
    """


class JsonParseError(ConfigurationError):
    pass


class VocabMissingError(ConfigurationError):
    pass


class UnsupportedTypeError(ConfigurationError):
    """The configuration names a model or pre-tokenizer type we cannot run."""


class PatternCompileError(ConfigurationError):
    pass


class TokenNotFoundError(TokenizerError, LookupError):
    """A byte (while encoding) or an id (while decoding) has no vocabulary entry.
    The tokenizer remains usable for further calls.
    """


class InvalidInputError(TokenizerError, ValueError):
    pass
