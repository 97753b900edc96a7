import logging
from bisect import bisect_left
from dataclasses import dataclass
from typing import NamedTuple

from bbpe.vocab import Vocabulary


class MergeRule(NamedTuple):
    right_id: int
    new_id: int
    priority: int  # Index in the training-time merge list: lower merges first


@dataclass
class MergeRuleRow:
    """All rules whose left token is the same, sorted by right token id."""

    right_ids: list[int]  # Sorted keys for the binary search
    rules: list[MergeRule]


class MergeTable:
    """Lookup table answering "do these two adjacent tokens merge, into what, and
    how early?".

    The merge list of a trained tokenizer is ordered: the first pair was the most
    frequent one during training and must therefore be merged first at inference
    time. We store each rule under its left token id and binary search the row by
    right token id, so a lookup costs O(log k) where k is the number of rules that
    share the left token.
    """

    def __init__(self, vocab: Vocabulary, merges: list[tuple[str, str]]):
        records = []  # (left_id, rule)
        seen: set[tuple[int, int]] = set()
        num_skipped = 0
        for priority, (left, right) in enumerate(merges):
            left_id = vocab.id_of(left)
            right_id = vocab.id_of(right)
            new_id = vocab.id_of(left + right)

            # Configs are not always consistent with their vocabulary: drop rules
            # that reference unknown tokens instead of failing
            if left_id is None or right_id is None or new_id is None:
                num_skipped += 1
                continue

            # The earliest occurrence of a pair wins
            if (left_id, right_id) in seen:
                num_skipped += 1
                continue
            seen.add((left_id, right_id))

            records.append((left_id, MergeRule(right_id, new_id, priority)))

        if num_skipped:
            logging.debug(f"Skipped {num_skipped} merge rules that do not resolve")

        # Count first so that every row is allocated once at its final size
        counts: dict[int, int] = {}
        for left_id, _ in records:
            counts[left_id] = counts.get(left_id, 0) + 1
        rows_rules: dict[int, list[MergeRule | None]] = {
            left_id: [None] * count for left_id, count in counts.items()
        }

        filled: dict[int, int] = dict.fromkeys(counts, 0)
        for left_id, rule in records:
            rows_rules[left_id][filled[left_id]] = rule
            filled[left_id] += 1

        self.rows: dict[int, MergeRuleRow] = {}
        for left_id, rules in rows_rules.items():
            rules.sort(key=lambda rule: rule.right_id)
            self.rows[left_id] = MergeRuleRow(
                right_ids=[rule.right_id for rule in rules], rules=rules
            )

        self.num_rules = len(records)

    def __len__(self) -> int:
        return self.num_rules

    def lookup(self, left_id: int, right_id: int) -> MergeRule | None:
        row = self.rows.get(left_id)
        if row is None:
            return None
        i = bisect_left(row.right_ids, right_id)
        if i < len(row.right_ids) and row.right_ids[i] == right_id:
            return row.rules[i]
        return None
