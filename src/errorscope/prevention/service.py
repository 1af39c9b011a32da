"""Prevention strategy service: process-level advice per error category."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

from ..models import Category, ErrorRecord, PreventionStrategy, TradeoffEntry
from .catalog import STRATEGIES

logger = logging.getLogger(__name__)

_IMPACT_SCORE = {"High": 3, "Medium": 2, "Low": 1}
_EFFORT_SCORE = {"Low": 3, "Medium": 2, "High": 1}


def estimate_effort(strategy: PreventionStrategy) -> str:
    """By step count: up to 3 is Low, up to 5 Medium, more is High."""
    count = len(strategy.steps)
    if count <= 3:
        return "Low"
    if count <= 5:
        return "Medium"
    return "High"


def estimate_impact(strategy: PreventionStrategy) -> str:
    """By benefit count: 3 or more is High, 2 Medium, fewer Low."""
    count = len(strategy.benefits)
    if count >= 3:
        return "High"
    if count >= 2:
        return "Medium"
    return "Low"


def priority_score(strategy: PreventionStrategy) -> int:
    return _IMPACT_SCORE[estimate_impact(strategy)] * _EFFORT_SCORE[estimate_effort(strategy)]


class PreventionStrategyService:
    def __init__(self, strategies: Optional[Iterable[PreventionStrategy]] = None) -> None:
        self._strategies = tuple(strategies) if strategies is not None else STRATEGIES

    @staticmethod
    def _category(error_type: "str | Category") -> Optional[Category]:
        try:
            return Category.parse(error_type)
        except ValueError:
            logger.debug(f"No prevention strategies for unknown type {error_type!r}")
            return None

    def get_all_strategies(self) -> List[PreventionStrategy]:
        return list(self._strategies)

    def get_strategies_for_type(self, error_type: "str | Category") -> List[PreventionStrategy]:
        """Strategies for a category; ``[]`` for unknown categories."""
        category = self._category(error_type)
        if category is None:
            return []
        return [s for s in self._strategies if s.category is category]

    def get_strategy_by_id(self, strategy_id: str) -> Optional[PreventionStrategy]:
        for strategy in self._strategies:
            if strategy.id == strategy_id:
                return strategy
        return None

    def get_tool_recommendations(self, error_type: "str | Category") -> List[str]:
        """Distinct tools across the category's strategies, in catalog order."""
        tools: "OrderedDict[str, None]" = OrderedDict()
        for strategy in self.get_strategies_for_type(error_type):
            for tool in strategy.tools:
                tools.setdefault(tool, None)
        return list(tools)

    def get_tradeoff_analysis(self, error_type: "str | Category") -> List[TradeoffEntry]:
        return [
            TradeoffEntry(
                strategy_id=s.id,
                strategy=s.title,
                tradeoffs=s.tradeoffs,
                benefits=s.benefits,
                effort=estimate_effort(s),
                impact=estimate_impact(s),
            )
            for s in self.get_strategies_for_type(error_type)
        ]

    def get_config_example(self, strategy_id: str) -> Optional[str]:
        strategy = self.get_strategy_by_id(strategy_id)
        return strategy.config_example if strategy else None

    def get_implementation_steps(self, strategy_id: str) -> List[Dict[str, Any]]:
        strategy = self.get_strategy_by_id(strategy_id)
        if strategy is None:
            return []
        return [
            {"order": i, "description": step, "is_complex": len(step) > 50}
            for i, step in enumerate(strategy.steps, start=1)
        ]

    def generate_prevention_plan(self, records: Iterable[ErrorRecord]) -> Dict[str, Any]:
        """Strategies for every category present, with actions ranked by
        impact times inverse effort."""
        records = list(records)
        categories = sorted({r.category for r in records}, key=lambda c: c.value)

        groups = []
        actions = []
        for category in categories:
            strategies = self.get_strategies_for_type(category)
            groups.append(
                {"category": category.value, "strategies": [s.to_dict() for s in strategies]}
            )
            for strategy in strategies:
                actions.append(
                    {
                        "strategy_id": strategy.id,
                        "action": strategy.title,
                        "category": category.value,
                        "effort": estimate_effort(strategy),
                        "impact": estimate_impact(strategy),
                        "priority": priority_score(strategy),
                    }
                )
        actions.sort(key=lambda a: (-a["priority"], a["category"], a["strategy_id"]))

        return {
            "summary": (
                f"Prevention plan for {len(records)} errors across "
                f"{len(categories)} categories"
            ),
            "strategies": groups,
            "prioritized_actions": actions,
            "estimated_effort": _overall_effort(actions),
        }


def _overall_effort(actions: List[Dict[str, Any]]) -> str:
    if not actions:
        return "Low"
    high = sum(1 for a in actions if a["effort"] == "High")
    ratio = high / len(actions)
    if ratio > 0.5:
        return "High"
    if ratio > 0.2:
        return "Medium"
    return "Low"
