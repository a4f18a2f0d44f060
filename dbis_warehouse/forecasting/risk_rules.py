"""
Unit risk scoring rules

Each rule is tagged with the metric it reads. Within a metric only the
first matching rule scores, so the rules of a metric are ordered from the
most to the least severe.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class RiskRule:
    tag: str
    metric: str
    comparison: str
    threshold: float
    points: int

    def matches(self, value: float) -> bool:
        if self.comparison == "lt":
            return value < self.threshold
        if self.comparison == "ge":
            return value >= self.threshold
        raise ValueError(f"Unknown comparison: {self.comparison}")


RISK_RULES: List[RiskRule] = [
    RiskRule("uptime_below_30", "uptime_pct", "lt", 30, 40),
    RiskRule("uptime_below_60", "uptime_pct", "lt", 60, 25),
    RiskRule("uptime_below_80", "uptime_pct", "lt", 80, 10),
    RiskRule("failures_5_plus", "failure_count", "ge", 5, 30),
    RiskRule("failures_3_plus", "failure_count", "ge", 3, 20),
    RiskRule("failures_1_plus", "failure_count", "ge", 1, 10),
    RiskRule("mtbf_below_15", "mtbf_days", "lt", 15, 30),
    RiskRule("mtbf_below_30", "mtbf_days", "lt", 30, 15),
]


def score_unit(metrics: Dict[str, float], rules: List[RiskRule] = RISK_RULES) -> Tuple[int, List[str]]:
    """Total risk score plus the tags of the rules that fired"""
    score = 0
    fired: List[str] = []
    scored_metrics = set()

    for rule in rules:
        if rule.metric in scored_metrics:
            continue
        if rule.matches(metrics[rule.metric]):
            score += rule.points
            fired.append(rule.tag)
            scored_metrics.add(rule.metric)

    return score, fired
