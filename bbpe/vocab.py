import logging

from bbpe.errors import ConfigurationError, VocabMissingError


class Vocabulary:
    """Bidirectional index between token strings and token ids.

    The id -> string direction is a list sized by the largest id seen. Ids are
    normally dense, but added tokens may introduce ids beyond the trained vocabulary
    and leave gaps behind; those slots hold None.
    """

    def __init__(self, vocab: dict[str, int] | None):
        if not vocab:
            raise VocabMissingError("The configuration has no vocabulary (model.vocab)")

        self.token_to_id: dict[str, int] = {}  # Map token string to token index
        self.id_to_token: list[str | None] = []  # Map token index to token string

        max_id = -1
        for token, idx in vocab.items():
            self._check_id(token, idx)
            self.token_to_id[token] = idx
            max_id = max(max_id, idx)

        self.id_to_token = [None] * (max_id + 1)
        for token, idx in self.token_to_id.items():
            if self.id_to_token[idx] is not None:
                raise ConfigurationError(
                    f"Token id {idx} is assigned to both {self.id_to_token[idx]!r} "
                    f"and {token!r}"
                )
            self.id_to_token[idx] = token

    @staticmethod
    def _check_id(token: str, idx: int) -> None:
        # bool is a subclass of int but never a valid id
        if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
            raise ConfigurationError(f"Invalid id {idx!r} for token {token!r}")

    @property
    def size(self) -> int:
        """One more than the largest id, i.e. the size of the id space."""
        return len(self.id_to_token)

    def __len__(self) -> int:
        return len(self.token_to_id)

    def __contains__(self, token: str) -> bool:
        return token in self.token_to_id

    def id_of(self, token: str) -> int | None:
        return self.token_to_id.get(token)

    def token_of(self, idx: int) -> str | None:
        if 0 <= idx < len(self.id_to_token):
            return self.id_to_token[idx]
        return None

    def add(self, token: str, idx: int) -> bool:
        """Register an added token, growing the id space if `idx` lies beyond it.

        Returns True if the id now maps to `token`. An id that is already taken by a
        different string keeps its original string.
        """
        self._check_id(token, idx)
        if idx >= len(self.id_to_token):
            self.id_to_token.extend([None] * (idx + 1 - len(self.id_to_token)))

        current = self.id_to_token[idx]
        if current is None:
            self.id_to_token[idx] = token
            self.token_to_id.setdefault(token, idx)
            return True
        if current != token:
            logging.warning(
                f"Added token {token!r} reuses id {idx} of {current!r}; "
                f"keeping {current!r} for decoding"
            )
            return False
        return True
