"""Tests for the PreventionStrategyService."""

from errorscope.models import Category, PreventionStrategy
from errorscope.prevention import (
    PreventionStrategyService,
    estimate_effort,
    estimate_impact,
    priority_score,
)

from conftest import make_record


def _make_strategy(steps=3, benefits=2, id="s", category=Category.RUNTIME):
    return PreventionStrategy(
        id=id,
        category=category,
        title=id.title(),
        description="",
        tools=("tool",),
        steps=tuple(f"step {i}" for i in range(steps)),
        tradeoffs="",
        benefits=tuple(f"benefit {i}" for i in range(benefits)),
    )


class TestEstimates:
    def test_effort(self):
        assert estimate_effort(_make_strategy(steps=3)) == "Low"
        assert estimate_effort(_make_strategy(steps=5)) == "Medium"
        assert estimate_effort(_make_strategy(steps=6)) == "High"

    def test_impact(self):
        assert estimate_impact(_make_strategy(benefits=3)) == "High"
        assert estimate_impact(_make_strategy(benefits=2)) == "Medium"
        assert estimate_impact(_make_strategy(benefits=1)) == "Low"

    def test_priority(self):
        assert priority_score(_make_strategy(steps=2, benefits=4)) == 9
        assert priority_score(_make_strategy(steps=8, benefits=0)) == 1


class TestLookups:
    def setup_method(self):
        self.service = PreventionStrategyService()

    def test_strategies_for_type(self):
        ids = [s.id for s in self.service.get_strategies_for_type("security")]
        assert ids == ["security_audit", "parameterized_queries", "secret_scanning"]
        assert self.service.get_strategies_for_type(Category.SYNTAX)[0].id == "linter_setup"

    def test_unknown_type(self):
        assert self.service.get_strategies_for_type("astrology") == []
        assert self.service.get_tool_recommendations("astrology") == []
        assert self.service.get_tradeoff_analysis("astrology") == []

    def test_every_category_but_failures_has_strategies(self):
        for category in Category:
            found = self.service.get_strategies_for_type(category)
            if category is Category.ANALYZER_FAILURE:
                assert found == []
            else:
                assert found

    def test_tool_recommendations_dedupe(self):
        service = PreventionStrategyService(
            [_make_strategy(id="a"), _make_strategy(id="b")]
        )
        assert service.get_tool_recommendations("runtime") == ["tool"]
        tools = self.service.get_tool_recommendations("syntax")
        assert tools[:2] == ["ruff", "ESLint"]
        assert len(tools) == len(set(tools))

    def test_tradeoffs(self):
        entries = {e.strategy_id: e for e in self.service.get_tradeoff_analysis("runtime")}
        assert entries["static_typing"].effort == "Low"
        assert entries["static_typing"].impact == "High"
        assert entries["promise_handling"].effort == "Medium"

    def test_config_example_and_steps(self):
        assert "ruff" in self.service.get_config_example("linter_setup")
        assert self.service.get_config_example("code_review_checklist") is None
        assert self.service.get_config_example("missing") is None

        steps = self.service.get_implementation_steps("strict_comparisons")
        assert [s["order"] for s in steps] == [1, 2]
        assert steps[0] == {"order": 1, "description": "Enable eqeqeq", "is_complex": False}
        assert self.service.get_implementation_steps("missing") == []


class TestPreventionPlan:
    def test_plan(self):
        service = PreventionStrategyService()
        records = [
            make_record("a", Category.SYNTAX),
            make_record("b", Category.RUNTIME),
            make_record("c", Category.RUNTIME),
        ]
        plan = service.generate_prevention_plan(records)

        assert plan["summary"] == "Prevention plan for 3 errors across 2 categories"
        assert [g["category"] for g in plan["strategies"]] == ["runtime", "syntax"]
        assert [a["strategy_id"] for a in plan["prioritized_actions"]] == [
            "static_typing",
            "unit_tests",
            "formatter_setup",
            "linter_setup",
            "promise_handling",
            "typescript_strict",
        ]
        assert plan["estimated_effort"] == "Low"

    def test_empty(self):
        plan = PreventionStrategyService().generate_prevention_plan([])
        assert plan["prioritized_actions"] == []
        assert plan["estimated_effort"] == "Low"

    def test_high_effort(self):
        service = PreventionStrategyService([_make_strategy(steps=9, id="big")])
        plan = service.generate_prevention_plan([make_record()])
        assert plan["estimated_effort"] == "High"
