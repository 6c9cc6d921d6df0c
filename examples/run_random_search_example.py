#!/usr/bin/env python
# coding: utf-8
"""
Example script for driving a simple rule list search with ``rulelist``.

This script demonstrates how to:
1. Build a rule table from a binary DataFrame
2. Start from a random ruleset
3. Propose insert / delete / swap edits and score them from the captures
4. Roll back rejected edits with backup and rebuild
5. Plot the captures of the best rule list found
"""

import os
import sys
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

# Add the parent directory to the path so we can import the rulelist package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from rulelist import (RuleTable, Ruleset, create_random_ruleset,
                      pick_random_rule, print_ruleset, plot_captures)


def make_data(n_samples=500, n_rules=40, seed=42):
    """Random binary rule coverage and a label that depends on a few rules."""
    rng = np.random.RandomState(seed)
    coverage = pd.DataFrame(rng.rand(n_samples, n_rules) < 0.2,
                            columns=[f"cond_{c}" for c in range(n_rules)])
    y = (coverage['cond_3'] | (coverage['cond_7'] & ~coverage['cond_11'])).to_numpy()
    noise = rng.rand(n_samples) < 0.05
    return coverage, y ^ noise


def score(rs, y):
    """Accuracy of predicting the majority label of each rule's captures."""
    correct = 0
    for entry in rs:
        n_pos = int(np.count_nonzero(y & entry.captures))
        n_neg = int(np.count_nonzero(entry.captures)) - n_pos
        correct += max(n_pos, n_neg)
    return correct / rs.n_samples - 0.002 * len(rs)


def propose(rs, rng):
    """Applies one random structural edit in place. The default rule stays last."""
    n = len(rs)
    move = rng.choice(['add', 'delete', 'swap', 'swap_any'])
    if (move == 'add' or n < 3) and n < rs.rule_table.n_rules:
        rs.add(pick_random_rule(rs, random_state=rng), rng.randint(n))
    elif move == 'delete':
        rs.delete(rng.randint(n - 1))
    elif move == 'swap':
        rs.swap(rng.randint(n - 2))
    else:
        i, j = rng.randint(n - 1, size=2)
        rs.swap_any(i, j)
    return move


def run_search(n_iter=2000, temperature=0.01, seed=0):
    coverage, y = make_data()
    table = RuleTable.from_frame(coverage)
    print(f"Rule table: {table.n_rules} rules over {table.n_samples} samples")

    rng = np.random.RandomState(seed)
    rs = create_random_ruleset(5, table.n_samples, table, random_state=rng)
    current = score(rs, y)
    best, best_ids = current, rs.backup()
    ids = []

    print(f"\nStarting search for {n_iter} iterations...")
    for it in range(n_iter):
        rs.backup(ids)
        move = propose(rs, rng)
        new = score(rs, y)
        if new >= current or rng.rand() < np.exp((new - current) / temperature):
            current = new
            if current > best:
                best, best_ids = current, rs.backup()
                print(f"  ** New best at iter = {it + 1} ({move}) -> Score: {best:.4f}, "
                      f"{len(rs)} rules **")
        else:
            rs = Ruleset(ids, table.n_samples, table)

    print(f"\nSearch complete. Final best score: {best:.4f}")
    best_rs = Ruleset(best_ids, table.n_samples, table)
    print_ruleset(best_rs, table)
    print(best_rs.to_frame())

    ax = plot_captures(best_rs, table)
    ax.figure.tight_layout()
    ax.figure.savefig('captures.png')
    plt.close(ax.figure)
    print("Captures plot saved as 'captures.png'")
    return best_rs


if __name__ == "__main__":
    run_search()
