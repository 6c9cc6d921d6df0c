# coding=utf-8
"""Exceptions raised by the rule list engine."""


class AllocationError(MemoryError):
    """A bit-vector or container allocation failed."""


class InvariantViolation(RuntimeError):
    """The capture partition could not be re-established.

    Raised when, after a structural edit, some sample is captured by no rule
    or by more than one rule. This points at a caller contract breach such as
    a rule table without a true default rule.
    """
