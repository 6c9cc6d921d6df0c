# coding=utf-8
"""
Rule list engine with incremental capture tracking.

A ruleset is an ordered list of rules applied to a fixed population of
samples. Each sample is captured by the first rule in list order whose
truth table matches it. For every position the ruleset keeps the exact
bit-vector of samples that position captures, so the captures of all
positions partition the sample universe.

The structural edits (insert, delete, adjacent swap, arbitrary swap) only
recompute the window of positions whose captures can change:

    add(r, k)        positions k .. end
    delete(k)        positions k+1 .. end
    swap(i, i + 1)   positions i and i+1, two bit-vector operations
    swap_any(i, j)   positions min(i, j) .. max(i, j)

Every edit validates its arguments, allocates its scratch storage and
computes the new captures of its window before writing anything back, so a
failed edit leaves the ruleset as it was.

License: MIT
"""
from __future__ import annotations

from collections import namedtuple

import numpy as np
import pandas as pd

from .bitvec import (bv_and, bv_and_eq_not, bv_clone, bv_init, bv_init_block,
                     bv_is_zero, bv_n_ones, bv_or_eq_and, bv_set_all)
from .exceptions import AllocationError, InvariantViolation
from .rules import RuleTable

Entry = namedtuple('Entry', ['rule_id', 'captures'])


def _alloc_ids(n: int) -> np.ndarray:
    try:
        return np.zeros(n, dtype=np.intp)
    except MemoryError as e:
        raise AllocationError(f"Could not allocate rule id array of length {n}") from e


def _as_position(pos, what: str) -> int:
    if isinstance(pos, (bool, np.bool_)) or not isinstance(pos, (int, np.integer)):
        raise TypeError(f"{what} must be an integer, got {pos!r}")
    return int(pos)


class Ruleset:
    """An ordered rule list and the samples captured at each position.

    Args:
        order (sequence[int]): Rule ids in list order. Ids must be distinct
            rules of ``rule_table``; the default rule 0 is conventionally last.
        n_samples (int): Size of the sample universe. Must match the table.
        rule_table (RuleTable): Shared, immutable rule truth tables.
        check (bool): If True, run the full partition check after every edit.
            Meant for debugging; it costs a sweep over the whole list.

    Raises:
        ValueError: Duplicate or unknown rule ids, or a size mismatch.
        InvariantViolation: Some sample is matched by no rule in ``order``
            (typically because the default rule is missing).
        AllocationError: The capture storage could not be allocated.
    """

    def __init__(self, order, n_samples: int, rule_table: RuleTable, check: bool = False):
        if not isinstance(rule_table, RuleTable):
            raise TypeError("rule_table must be a RuleTable.")
        if not isinstance(n_samples, (int, np.integer)) or n_samples < 0:
            raise ValueError("n_samples must be a non-negative integer.")
        if n_samples != rule_table.n_samples:
            raise ValueError(f"n_samples ({n_samples}) does not match the rule table "
                             f"({rule_table.n_samples} samples).")
        if not isinstance(check, bool):
            raise ValueError("check must be a boolean.")

        ids = [rule_table.check_rule_id(r) for r in order]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Rule ids in a ruleset must be distinct, got {ids}")

        n_rules = len(ids)
        rule_ids = _alloc_ids(max(n_rules, 1))
        captures = bv_init_block(max(n_rules, 1), int(n_samples))
        not_captured = bv_set_all(bv_init(int(n_samples)))

        for i, rule_id in enumerate(ids):
            rule_ids[i] = rule_id
            # i.captures = not_captured & truthtable
            bv_and(captures[i], not_captured, rule_table.truthtable(rule_id))
            # not_captured &= ~i.captures
            bv_and_eq_not(not_captured, captures[i])

        if not bv_is_zero(not_captured):
            raise InvariantViolation(
                f"{bv_n_ones(not_captured)} samples are matched by no rule in {ids}; "
                "the default rule (0) is probably missing.")

        self._table = rule_table
        self._n_samples = int(n_samples)
        self._n_rules = n_rules
        self._ids = rule_ids
        self._captures = captures
        self.check = check

    # --- Read access ---

    @property
    def rule_table(self) -> RuleTable:
        return self._table

    @property
    def n_samples(self) -> int:
        return self._n_samples

    @property
    def capacity(self) -> int:
        """Number of entries that fit before the storage has to grow."""
        self._check_live()
        return self._ids.shape[0]

    @property
    def destroyed(self) -> bool:
        return self._captures is None

    @property
    def rule_ids(self) -> tuple:
        self._check_live()
        return tuple(int(r) for r in self._ids[:self._n_rules])

    def __len__(self):
        return self._n_rules

    def __repr__(self):
        if self.destroyed:
            return "Ruleset(<destroyed>)"
        return f"Ruleset(rule_ids={list(self.rule_ids)}, n_samples={self._n_samples})"

    def __iter__(self):
        for i in range(self._n_rules):
            yield Entry(int(self._ids[i]), self.captures(i))

    def rule_id(self, i: int) -> int:
        i = self._check_index(i, self._n_rules, 'Position')
        return int(self._ids[i])

    def captures(self, i: int) -> np.ndarray:
        """Read-only view of the samples captured at position i.

        The view is only valid until the next edit. Edits that keep the
        capacity leave it showing whatever entry then sits at position i;
        an insert that grows the capacity moves the storage, and older
        views keep pointing at the abandoned array. Copy it to keep it.
        """
        i = self._check_index(i, self._n_rules, 'Position')
        view = self._captures[i].view()
        view.flags.writeable = False
        return view

    def n_captured(self, i: int) -> int:
        i = self._check_index(i, self._n_rules, 'Position')
        return bv_n_ones(self._captures[i])

    def captured_counts(self) -> np.ndarray:
        """Number of samples captured at each position."""
        self._check_live()
        return np.count_nonzero(self._captures[:self._n_rules], axis=1)

    def to_frame(self) -> pd.DataFrame:
        """One row per position: rule id, label, rule support and captured count."""
        ids = self.rule_ids
        return pd.DataFrame({
            'rule_id': list(ids),
            'label': [self._table.label(r) for r in ids],
            'support': [self._table.support(r) for r in ids],
            'captured': self.captured_counts(),
        })

    # --- Snapshot / copy / teardown ---

    def backup(self, ids: list = None) -> list:
        """Saves the rule id order so a rejected edit can be rolled back.

        Args:
            ids (list, optional): List to reuse. It is resized in place to
                the current length.

        Returns:
            list: The rule ids in order. Pass it to ``Ruleset`` to rebuild.
        """
        self._check_live()
        if ids is None:
            ids = []
        ids[:] = self._ids[:self._n_rules].tolist()
        return ids

    def copy(self) -> 'Ruleset':
        """Deep copy. The copy shares only the (immutable) rule table."""
        self._check_live()
        n = self._n_rules
        dest = Ruleset.__new__(Ruleset)
        dest._table = self._table
        dest._n_samples = self._n_samples
        dest._n_rules = n
        dest._ids = _alloc_ids(max(n, 1))
        dest._ids[:n] = self._ids[:n]
        dest._captures = bv_clone(self._captures[:max(n, 1)])
        dest.check = self.check
        return dest

    def destroy(self):
        """Releases the capture storage. The ruleset is unusable afterwards."""
        self._check_live()
        self._ids = None
        self._captures = None
        self._n_rules = 0

    # --- Structural edits ---

    def add(self, rule_id: int, ndx: int):
        """Inserts rule_id at position ndx, shifting later entries down by one.

        Only positions ndx .. end are recomputed: the samples they captured
        before the insert are exactly the samples that get re-partitioned.
        Entries before ndx are never touched.

        Args:
            rule_id (int): Rule to insert; must not already be in the list.
            ndx (int): Target position in [0, len(self)].
        """
        self._check_live()
        rule_id = self._table.check_rule_id(rule_id)
        n = self._n_rules
        ndx = self._check_index(ndx, n + 1, 'Insert position')
        if rule_id in self._ids[:n]:
            raise ValueError(f"Rule {rule_id} is already in the ruleset.")

        self._reserve(n + 1)
        suffix_ids = [rule_id] + self._ids[ndx:n].tolist()
        suffix = bv_init_block(len(suffix_ids), self._n_samples)

        # Everything caught at or after ndx gets re-partitioned.
        not_caught = bv_init(self._n_samples)
        np.any(self._captures[ndx:n], axis=0, out=not_caught)

        for k, rid in enumerate(suffix_ids):
            bv_and(suffix[k], not_caught, self._table.truthtable(rid))
            bv_and_eq_not(not_caught, suffix[k])
        if not bv_is_zero(not_caught):
            raise InvariantViolation(
                f"Inserting rule {rule_id} at {ndx} left {bv_n_ones(not_caught)} samples uncaptured.")

        self._ids[ndx + 1:n + 1] = self._ids[ndx:n]
        self._ids[ndx] = rule_id
        self._captures[ndx:n + 1] = suffix
        self._n_rules = n + 1
        self._post_check()

    def delete(self, ndx: int):
        """Deletes the entry at position ndx.

        Samples the deleted rule captured fall through to the first later
        rule that matches them, exactly as if it had never been in the list.

        Raises:
            InvariantViolation: Some of its samples match no later rule, as
                happens when deleting a default rule that still captures.
        """
        self._check_live()
        n = self._n_rules
        ndx = self._check_index(ndx, n, 'Position')

        leftover = bv_clone(self._captures[ndx])
        suffix = bv_clone(self._captures[ndx + 1:n])
        for k in range(n - ndx - 1):
            truthtable = self._table.truthtable(self._ids[ndx + 1 + k])
            # captures |= truthtable & leftover
            bv_or_eq_and(suffix[k], truthtable, leftover)
            bv_and_eq_not(leftover, suffix[k])
        if not bv_is_zero(leftover):
            raise InvariantViolation(
                f"Deleting position {ndx} (rule {self._ids[ndx]}) leaves "
                f"{bv_n_ones(leftover)} samples uncaptured.")

        self._ids[ndx:n - 1] = self._ids[ndx + 1:n]
        self._captures[ndx:n - 1] = suffix
        self._ids[n - 1] = 0
        self._captures[n - 1] = False
        self._n_rules = n - 1
        self._post_check()

    def swap(self, i: int, j: int = None):
        """Swaps the adjacent entries at positions i and j = i + 1.

        Samples rule i captured that rule j also matches move to j, since j
        now comes first; nothing outside the pair changes. The last entry
        (the default rule) cannot take part; use ``swap_any`` for that.

        Raises:
            ValueError: j is not i + 1.
            IndexError: The pair is not within [0, len(self) - 1).
        """
        self._check_live()
        i = _as_position(i, 'Position')
        j = i + 1 if j is None else _as_position(j, 'Position')
        if j != i + 1:
            raise ValueError(f"swap needs adjacent positions (i + 1 == j), got {i} and {j}")
        if i < 0 or j >= self._n_rules - 1:
            raise IndexError(f"Adjacent swap ({i}, {j}) out of range for "
                             f"{self._n_rules} rules; the last rule cannot be swapped.")

        cap_i = self._captures[i]
        cap_j = self._captures[j]
        # j.captures |= i.captures & j.truthtable
        new_j = bv_clone(cap_j)
        bv_or_eq_and(new_j, cap_i, self._table.truthtable(self._ids[j]))
        # i.captures &= ~j.captures
        new_i = bv_clone(cap_i)
        bv_and_eq_not(new_i, new_j)

        self._captures[i] = new_j
        self._captures[j] = new_i
        self._ids[i], self._ids[j] = self._ids[j], self._ids[i]
        self._post_check()

    def swap_any(self, i: int, j: int):
        """Swaps the rules at any two positions i and j.

        The window between them is re-swept from the samples it captured
        before the swap; entries outside it are untouched. No-op if i == j.

        Raises:
            IndexError: A position is outside [0, len(self)).
            InvariantViolation: The window could not be re-partitioned.
        """
        self._check_live()
        i = self._check_index(i, self._n_rules, 'Position')
        j = self._check_index(j, self._n_rules, 'Position')
        if i == j:
            return
        if i > j:
            i, j = j, i

        caught = bv_init(self._n_samples)
        np.any(self._captures[i:j + 1], axis=0, out=caught)
        cnt = bv_n_ones(caught)

        window_ids = self._ids[i:j + 1].copy()
        window_ids[0], window_ids[-1] = window_ids[-1], window_ids[0]
        window = bv_init_block(j - i + 1, self._n_samples)

        cnt_check = 0
        for k, rid in enumerate(window_ids):
            bv_and(window[k], caught, self._table.truthtable(rid))
            cnt_check += bv_n_ones(window[k])
            bv_and_eq_not(caught, window[k])
        if not bv_is_zero(caught) or cnt != cnt_check:
            raise InvariantViolation(
                f"Swapping positions {i} and {j}: {bv_n_ones(caught)} samples left uncaptured, "
                f"{cnt_check} recaptured of {cnt}.")

        self._ids[i:j + 1] = window_ids
        self._captures[i:j + 1] = window
        self._post_check()

    # --- Invariant checking ---

    def validate(self):
        """Full check of the partition invariant.

        Recomputes the first-match captures of the whole list and compares
        them with the stored ones.

        Raises:
            InvariantViolation: Captures overlap, miss samples, or differ
                from the first-match assignment.
        """
        self._check_live()
        caps = self._captures[:self._n_rules]
        per_sample = np.count_nonzero(caps, axis=0)
        if (per_sample == 0).any():
            raise InvariantViolation(
                f"Samples {np.flatnonzero(per_sample == 0).tolist()} are captured by no rule.")
        if (per_sample > 1).any():
            raise InvariantViolation(
                f"Samples {np.flatnonzero(per_sample > 1).tolist()} are captured by several rules.")

        not_captured = bv_set_all(bv_init(self._n_samples))
        expected = bv_init(self._n_samples)
        for i in range(self._n_rules):
            bv_and(expected, not_captured, self._table.truthtable(self._ids[i]))
            if not np.array_equal(expected, caps[i]):
                raise InvariantViolation(
                    f"Position {i} (rule {self._ids[i]}) does not capture its first-match samples.")
            bv_and_eq_not(not_captured, expected)

    # --- Internals ---

    def _check_live(self):
        if self._captures is None:
            raise ValueError("Ruleset has been destroyed.")

    def _check_index(self, pos, upper: int, what: str) -> int:
        self._check_live()
        pos = _as_position(pos, what)
        if not (0 <= pos < upper):
            raise IndexError(f"{what} {pos} out of range [0, {upper - 1}]")
        return pos

    def _reserve(self, n: int):
        """Grows the storage to hold at least n entries."""
        capacity = self._ids.shape[0]
        if capacity >= n:
            return
        new_capacity = max(n, 2 * capacity)
        ids = _alloc_ids(new_capacity)
        captures = bv_init_block(new_capacity, self._n_samples)
        ids[:self._n_rules] = self._ids[:self._n_rules]
        captures[:self._n_rules] = self._captures[:self._n_rules]
        self._ids = ids
        self._captures = captures

    def _post_check(self):
        if self.check:
            self.validate()
