import numpy as np
import pytest

from rulelist import MAX_TRIES, Ruleset, create_random_ruleset, pick_random_rule


class StuckRandomState(np.random.RandomState):
    """Always draws the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value
        self.draws = 0

    def randint(self, low, high=None, size=None, dtype=int):
        self.draws += 1
        return self.value


class TestCreateRandomRuleset:
    def test_distinct_rules_ending_with_default(self, random_table):
        rs = create_random_ruleset(6, random_table.n_samples, random_table, random_state=0)
        ids = rs.rule_ids
        assert len(ids) == 6
        assert ids[-1] == 0
        assert len(set(ids)) == 6
        assert all(1 <= r < random_table.n_rules for r in ids[:-1])
        rs.validate()

    def test_seed_is_reproducible(self, random_table):
        a = create_random_ruleset(8, random_table.n_samples, random_table, random_state=42)
        b = create_random_ruleset(8, random_table.n_samples, random_table, random_state=42)
        assert a.rule_ids == b.rule_ids

    def test_accepts_random_state_instance(self, random_table):
        rng = np.random.RandomState(3)
        rs = create_random_ruleset(4, random_table.n_samples, random_table, random_state=rng)
        assert rs.rule_ids[-1] == 0

    def test_default_only(self, small_table):
        rs = create_random_ruleset(1, 4, small_table)
        assert rs.rule_ids == (0,)

    def test_uses_every_rule(self, small_table):
        rs = create_random_ruleset(small_table.n_rules, 4, small_table, random_state=1)
        assert sorted(rs.rule_ids) == list(range(small_table.n_rules))

    def test_too_many_rules(self, small_table):
        with pytest.raises(ValueError):
            create_random_ruleset(small_table.n_rules + 1, 4, small_table)

    def test_size_must_be_positive(self, small_table):
        with pytest.raises(ValueError):
            create_random_ruleset(0, 4, small_table)

    def test_passes_check_flag(self, small_table):
        rs = create_random_ruleset(3, 4, small_table, random_state=0, check=True)
        assert rs.check


class TestPickRandomRule:
    def test_picks_unused_rule(self, random_table):
        rs = Ruleset([3, 8, 1, 0], random_table.n_samples, random_table)
        for seed in range(20):
            rule = pick_random_rule(rs, random_table, random_state=seed)
            assert 1 <= rule < random_table.n_rules
            assert rule not in rs.rule_ids

    def test_defaults_to_ruleset_table(self, small_table):
        rs = Ruleset([1, 2, 0], 4, small_table)
        assert pick_random_rule(rs, random_state=0) == 3

    def test_falls_back_after_max_tries(self, small_table):
        rs = Ruleset([1, 2, 0], 4, small_table)
        rng = StuckRandomState(1)
        with pytest.warns(UserWarning):
            rule = pick_random_rule(rs, small_table, random_state=rng)
        assert rule == 3
        assert rng.draws == MAX_TRIES

    def test_fallback_wraps_around(self, small_table):
        rs = Ruleset([2, 3, 0], 4, small_table)
        with pytest.warns(UserWarning):
            rule = pick_random_rule(rs, small_table, random_state=StuckRandomState(2))
        # the scan starts at 3, after the last draw, and wraps to 1
        assert rule == 1

    def test_no_rule_left(self, small_table):
        rs = Ruleset([1, 2, 3, 0], 4, small_table)
        with pytest.raises(ValueError):
            pick_random_rule(rs, small_table, random_state=0)
