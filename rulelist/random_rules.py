# coding=utf-8
"""
Random rulesets and random rule selection.

Used to build initial proposals for an MCMC search over rule lists and to
pick a rule to insert. Draws are uniform over the non-default rules
[1, n_rules - 1], rejecting ids already in use. After MAX_TRIES rejected
draws the choice falls back to a deterministic cyclic scan, so both helpers
always terminate.

License: MIT
"""
from __future__ import annotations

import warnings

import numpy as np
from sklearn.utils import check_random_state

from .rules import RuleTable
from .ruleset import Ruleset

MAX_TRIES = 10


def _draw_unused(rng: np.random.RandomState, used: np.ndarray) -> int:
    """Draws an id in [1, len(used) - 1] whose ``used`` mark is False.

    Args:
        rng: Source of randomness.
        used (np.ndarray): Boolean marks indexed by rule id.

    Returns:
        int: The chosen rule id, or -1 if every non-default id is used.
    """
    n_rules = used.shape[0]
    if n_rules < 2 or used[1:].all():
        return -1

    candidate = 1
    for _ in range(MAX_TRIES):
        candidate = int(rng.randint(1, n_rules))
        if not used[candidate]:
            return candidate

    warnings.warn(f"No unused rule after {MAX_TRIES} random draws, "
                  "falling back to a deterministic pick.")
    free = np.flatnonzero(~used[1:]) + 1
    start = 1 + (candidate % (n_rules - 1))
    after = free[free >= start]
    return int(after[0]) if after.size else int(free[0])


def create_random_ruleset(size: int, n_samples: int, rule_table: RuleTable,
                          random_state=None, check: bool = False) -> Ruleset:
    """Builds a ruleset of ``size`` distinct random rules ending with the default rule.

    Args:
        size (int): Number of entries, default rule included.
        n_samples (int): Size of the sample universe.
        rule_table (RuleTable): Rules to draw from.
        random_state (int, np.random.RandomState or None): Seed or generator.
        check (bool): Passed through to ``Ruleset``.

    Returns:
        Ruleset: The new ruleset.
    """
    if not isinstance(size, (int, np.integer)) or size < 1:
        raise ValueError("size must be a positive integer.")
    if size > rule_table.n_rules:
        raise ValueError(f"Cannot draw {size - 1} distinct rules from "
                         f"{rule_table.n_rules - 1} non-default rules.")
    rng = check_random_state(random_state)

    used = np.zeros(rule_table.n_rules, dtype=bool)
    ids = []
    for _ in range(size - 1):
        next_rule = _draw_unused(rng, used)
        used[next_rule] = True
        ids.append(next_rule)

    # The default rule always goes last.
    ids.append(0)
    return Ruleset(ids, n_samples, rule_table, check=check)


def pick_random_rule(ruleset: Ruleset, rule_table: RuleTable = None, random_state=None) -> int:
    """Picks a random non-default rule that is not already in the ruleset.

    Raises:
        ValueError: Every non-default rule is already in the ruleset.
    """
    if rule_table is None:
        rule_table = ruleset.rule_table
    rng = check_random_state(random_state)

    used = np.zeros(rule_table.n_rules, dtype=bool)
    used[list(ruleset.rule_ids)] = True
    new_rule = _draw_unused(rng, used)
    if new_rule < 0:
        raise ValueError(f"All {rule_table.n_rules - 1} non-default rules are already in the ruleset.")
    return new_rule
