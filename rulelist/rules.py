# coding=utf-8
"""
Static rule table.

A rule table holds, for every candidate rule, its precomputed truth table
(which samples the rule matches) and a display label. Rule 0 is always the
default rule, whose truth table matches every sample. The table never
changes after construction, so any number of rulesets may share it.

License: MIT
"""
from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import sparse


class RuleTable:
    """Immutable table of rule truth tables.

    Args:
        truthtables (array-like): Boolean array of shape (n_rules, n_samples).
            Row ``r`` is the truth table of rule ``r``; row 0 must be all True.
        labels (list[str], optional): Display label per rule. Defaults to
            ``"default"`` for rule 0 and ``"rule_<r>"`` for the others.

    Attributes:
        n_rules (int): Number of rules, default rule included.
        n_samples (int): Size of the sample universe.
    """

    def __init__(self, truthtables, labels=None):
        tt = np.array(truthtables, dtype=bool, copy=True)
        if tt.ndim != 2:
            raise ValueError(f"truthtables must be 2-D (n_rules, n_samples), got shape {tt.shape}")
        if tt.shape[0] < 1:
            raise ValueError("A rule table needs at least the default rule.")
        if not tt[0].all():
            raise ValueError("Rule 0 must be the default rule matching every sample.")

        if labels is None:
            labels = ['default'] + [f"rule_{r}" for r in range(1, tt.shape[0])]
        labels = [str(label) for label in labels]
        if len(labels) != tt.shape[0]:
            raise ValueError(f"Got {len(labels)} labels for {tt.shape[0]} rules.")

        tt.flags.writeable = False
        self._truthtables = tt
        self._labels = tuple(labels)
        self._support = np.count_nonzero(tt, axis=1)
        self._support.flags.writeable = False

    @classmethod
    def from_matrix(cls, rmatrix, labels=None, default_label: str = 'default') -> 'RuleTable':
        """Builds a table from a samples x rules coverage matrix.

        The all-ones default rule is prepended as rule 0, so column ``c`` of
        ``rmatrix`` becomes rule ``c + 1``.

        Args:
            rmatrix: Boolean matrix of shape (n_samples, n_rules), dense or
                ``scipy.sparse``.
            labels (list[str], optional): One label per column of ``rmatrix``.
            default_label (str): Label for the default rule.
        """
        if sparse.issparse(rmatrix):
            dense = rmatrix.astype(bool).toarray()
        else:
            dense = np.asarray(rmatrix, dtype=bool)
        if dense.ndim != 2:
            raise ValueError(f"rmatrix must be 2-D (n_samples, n_rules), got shape {dense.shape}")

        n_samples, n_cols = dense.shape
        if labels is None:
            labels = [f"rule_{c + 1}" for c in range(n_cols)]
        elif len(labels) != n_cols:
            raise ValueError(f"Got {len(labels)} labels for {n_cols} rule columns.")

        truthtables = np.empty((n_cols + 1, n_samples), dtype=bool)
        truthtables[0] = True
        truthtables[1:] = dense.T
        return cls(truthtables, [default_label] + list(labels))

    @classmethod
    def from_frame(cls, df: pd.DataFrame, default_label: str = 'default') -> 'RuleTable':
        """Builds a table from a binary DataFrame (rows samples, columns rules).

        Column names become rule labels; rule 0 is the prepended default rule.
        """
        if not isinstance(df, pd.DataFrame):
            raise TypeError("Input 'df' must be a pandas DataFrame.")
        try:
            values = df.to_numpy(dtype=bool)
        except (TypeError, ValueError) as e:
            raise ValueError(f"DataFrame could not be converted to boolean: {e}") from e
        return cls.from_matrix(values, labels=[str(c) for c in df.columns],
                               default_label=default_label)

    @property
    def n_rules(self) -> int:
        return self._truthtables.shape[0]

    @property
    def n_samples(self) -> int:
        return self._truthtables.shape[1]

    def __len__(self):
        return self.n_rules

    def __repr__(self):
        return f"RuleTable(n_rules={self.n_rules}, n_samples={self.n_samples})"

    def check_rule_id(self, rule_id) -> int:
        """Returns rule_id as an int, raising ValueError if it is not a rule of this table."""
        if isinstance(rule_id, (bool, np.bool_)) or not isinstance(rule_id, (int, np.integer)):
            raise TypeError(f"Rule id must be an integer, got {rule_id!r}")
        if not (0 <= rule_id < self.n_rules):
            raise ValueError(f"Rule id {rule_id} out of range [0, {self.n_rules - 1}]")
        return int(rule_id)

    def truthtable(self, rule_id: int) -> np.ndarray:
        """Read-only truth table of a rule."""
        return self._truthtables[rule_id]

    def label(self, rule_id: int) -> str:
        return self._labels[rule_id]

    def support(self, rule_id: int) -> int:
        """Number of samples the rule matches, regardless of position."""
        return int(self._support[rule_id])

    @property
    def labels(self) -> tuple:
        return self._labels
