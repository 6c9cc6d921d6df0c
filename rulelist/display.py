# coding=utf-8
"""Printing and plotting of rules and rulesets, for debugging."""
from __future__ import annotations

import matplotlib.pyplot as plt

from .bitvec import bv_format, bv_n_ones
from .rules import RuleTable
from .ruleset import Ruleset


def print_rule(rule_table: RuleTable, rule_id: int, detail: bool = False):
    print(f"RULE {rule_id} ({rule_table.label(rule_id)}), support={rule_table.support(rule_id)}")
    if detail:
        print(bv_format(rule_table.truthtable(rule_id)))


def print_all_rules(rule_table: RuleTable):
    for rule_id in range(rule_table.n_rules):
        print_rule(rule_table, rule_id, detail=True)


def print_entry(ruleset: Ruleset, i: int, detail: bool = False):
    captures = ruleset.captures(i)
    print(f"{bv_n_ones(captures)} captured; ")
    if detail:
        print(bv_format(captures))


def print_ruleset(ruleset: Ruleset, rule_table: RuleTable = None, detail: bool = False):
    """Prints every rule of the ruleset with its captured count.

    Args:
        ruleset (Ruleset): Ruleset to print.
        rule_table (RuleTable, optional): Defaults to the ruleset's own table.
        detail (bool): Also print truth tables and capture bit-vectors.
    """
    if rule_table is None:
        rule_table = ruleset.rule_table

    print(f"\n{len(ruleset)} rules {ruleset.n_samples} samples")
    total_support = 0
    for i, entry in enumerate(ruleset):
        print_rule(rule_table, entry.rule_id, detail)
        print_entry(ruleset, i, detail)
        total_support += bv_n_ones(entry.captures)
    print(f"Total Captured: {total_support}")


def plot_captures(ruleset: Ruleset, rule_table: RuleTable = None, ax=None):
    """Bar chart of the number of samples captured at each position.

    Returns:
        matplotlib.axes.Axes: The axes drawn on.
    """
    if rule_table is None:
        rule_table = ruleset.rule_table
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 4))

    counts = ruleset.captured_counts()
    positions = list(range(len(counts)))
    ax.bar(positions, counts, color='darkorange')
    ax.set_xticks(positions)
    ax.set_xticklabels([rule_table.label(r) for r in ruleset.rule_ids], rotation=45, ha='right')
    ax.set_xlabel('Rule')
    ax.set_ylabel('Samples captured')
    ax.set_title(f"Captures of {len(ruleset)} rules over {ruleset.n_samples} samples")
    return ax
