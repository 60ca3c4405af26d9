"""Unit tests for Bayesian Knowledge Tracing skill updates."""

import pytest

from mathwiz.engines.mastery import posterior, seed_skill, update_skill_mastery
from mathwiz.schemas.profile import DEFAULT_P_GUESS, DEFAULT_P_LEARN, DEFAULT_P_SLIP


class TestSkillTracer:
    def test_seed_uses_default_parameters(self, now):
        skill = seed_skill("addition", now=now)
        assert skill.skill_name == "Addition"
        assert skill.mastery_level == 0.0
        assert (skill.p_learn, skill.p_guess, skill.p_slip) == (DEFAULT_P_LEARN, DEFAULT_P_GUESS, DEFAULT_P_SLIP)
        assert skill.practice_count == 0

    def test_first_correct_answer_from_zero(self, now):
        """With nothing known yet only the learning transition moves the estimate."""
        skill = update_skill_mastery(seed_skill("addition", now=now), True, now=now)
        assert skill.mastery_level == pytest.approx(DEFAULT_P_LEARN)
        assert skill.practice_count == 1

    def test_incorrect_answer_uses_posterior(self, now):
        skill = update_skill_mastery(seed_skill("addition", 0.5, now=now), False, now=now)
        assert skill.mastery_level == pytest.approx(0.05 / 0.425)

    def test_correct_answers_trend_up(self, now):
        skill = seed_skill("addition", 0.2, now=now)
        for _ in range(10):
            previous = skill.mastery_level
            skill = update_skill_mastery(skill, True, now=now)
            assert skill.mastery_level >= previous
        assert skill.mastery_level > 0.9

    def test_incorrect_answers_trend_down(self, now):
        skill = seed_skill("addition", 0.9, now=now)
        for _ in range(5):
            previous = skill.mastery_level
            skill = update_skill_mastery(skill, False, now=now)
            assert skill.mastery_level <= previous

    @pytest.mark.parametrize("start", [0.0, 0.01, 0.5, 0.99, 1.0])
    @pytest.mark.parametrize("correct", [True, False])
    def test_estimate_stays_in_unit_interval(self, now, start, correct):
        skill = update_skill_mastery(seed_skill("addition", start, now=now), correct, now=now)
        assert 0.0 <= skill.mastery_level <= 1.0

    def test_degenerate_parameters_keep_estimate(self):
        assert posterior(0.4, True, p_guess=0.0, p_slip=1.0) == 0.4

    def test_original_record_untouched(self, now):
        skill = seed_skill("addition", 0.5, now=now)
        update_skill_mastery(skill, True, now=now)
        assert skill.mastery_level == 0.5
        assert skill.practice_count == 0
