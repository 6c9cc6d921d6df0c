# coding=utf-8
"""
Ordered rule lists with incremental capture tracking.

A rule list classifies each sample by the first rule that matches it. This
package keeps, for every position of a rule list, the set of samples that
position captures, and updates it locally as an MCMC search inserts,
deletes and reorders rules.

License: MIT
"""
from .exceptions import AllocationError, InvariantViolation
from .rules import RuleTable
from .ruleset import Entry, Ruleset
from .random_rules import MAX_TRIES, create_random_ruleset, pick_random_rule
from .display import plot_captures, print_all_rules, print_entry, print_rule, print_ruleset

__version__ = '0.1.0'

__all__ = [
    'AllocationError',
    'InvariantViolation',
    'RuleTable',
    'Entry',
    'Ruleset',
    'MAX_TRIES',
    'create_random_ruleset',
    'pick_random_rule',
    'plot_captures',
    'print_all_rules',
    'print_entry',
    'print_rule',
    'print_ruleset',
]
