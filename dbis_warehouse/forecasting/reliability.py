"""
Station reliability and unit failure risk from daily snapshots

A failure is an edge: a station going from at least one unit online to
none online, or a unit going from online to offline, between consecutive
report days.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.forecasting.regression import half_split_trend, mean
from dbis_warehouse.forecasting.risk_rules import RISK_RULES, RiskRule, score_unit
from dbis_warehouse.models.data_models import HistoricalSnapshot, StationAggregate, Unit, UnitStatus
from dbis_warehouse.models.forecast_models import StationReliability, UnitRisk

RISK_ORDER = {"critical": 0, "warning": 1, "good": 2}


def count_failures(states: List[Any], is_up: Callable[[Any], bool], is_down: Callable[[Any], bool]) -> Tuple[int, int]:
    """Number of up -> down transitions and the index of the last one (-1 if none)"""
    failures = 0
    last_index = -1
    for index in range(1, len(states)):
        if is_up(states[index - 1]) and is_down(states[index]):
            failures += 1
            last_index = index
    return failures, last_index


def uptime_risk_level(uptime_pct: float, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    if uptime_pct < config.UPTIME_CRITICAL_PCT:
        return "critical"
    if uptime_pct < config.UPTIME_WARNING_PCT:
        return "warning"
    return "good"


def score_risk_level(score: int, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    if score >= config.RISK_HIGH_SCORE:
        return "high"
    if score >= config.RISK_MEDIUM_SCORE:
        return "medium"
    return "low"


def compute_station_reliability(
    snapshots: List[HistoricalSnapshot],
    config: Optional[Settings] = None,
) -> List[StationReliability]:
    config = config or default_settings

    by_station: Dict[str, List[StationAggregate]] = {}
    for snapshot in snapshots:
        for station in snapshot.stations:
            by_station.setdefault(station.station, []).append(station)

    results = []
    for name, days in by_station.items():
        up = [d.units_online > 0 for d in days]
        total_days = len(days)
        uptime = sum(up) / total_days * 100
        failures, _ = count_failures(up, bool, lambda flag: not flag)
        mtbf = total_days / failures if failures else float(total_days)
        utilizations = [d.station_utilization_pct for d in days if d.station_utilization_pct]
        latest = days[-1]

        results.append(StationReliability(
            station=name,
            period_days=total_days,
            uptime_pct=round(uptime, 1),
            avg_utilization_pct=round(mean(utilizations), 1),
            total_units=latest.total_units,
            online_units=latest.units_online,
            offline_units=latest.units_offline,
            failure_count=failures,
            mtbf_days=round(mtbf, 1),
            trend=half_split_trend([1.0 if u else 0.0 for u in up], config.RELIABILITY_TREND_BAND, "improving", "declining"),
            risk_level=uptime_risk_level(uptime, config),
        ))

    results.sort(key=lambda r: RISK_ORDER[r.risk_level])
    logger.info(f"Computed reliability for {len(results)} stations")
    return results


def compute_unit_risk(
    snapshots: List[HistoricalSnapshot],
    config: Optional[Settings] = None,
    rules: List[RiskRule] = RISK_RULES,
) -> List[UnitRisk]:
    config = config or default_settings

    by_unit: Dict[Tuple[str, str], List[Unit]] = {}
    for snapshot in snapshots:
        for unit in snapshot.units:
            by_unit.setdefault((unit.station, unit.unit_number), []).append(unit)

    results = []
    for (station, unit_number), days in by_unit.items():
        total_days = len(days)
        online = [d.status == UnitStatus.ONLINE for d in days]
        uptime = sum(online) / total_days * 100

        # online -> offline only; no_data days do not count as failures
        failures, last_failure = count_failures(
            [d.status for d in days],
            lambda s: s == UnitStatus.ONLINE,
            lambda s: s == UnitStatus.OFFLINE,
        )

        mtbf = total_days / failures if failures else float(total_days)
        days_since = total_days - last_failure if last_failure >= 0 else total_days
        score, fired = score_unit(
            {"uptime_pct": uptime, "failure_count": failures, "mtbf_days": mtbf}, rules
        )

        results.append(UnitRisk(
            station=station,
            engine=days[0].engine,
            unit_number=unit_number,
            derated_mw=days[0].derated_capacity_mw or 0.0,
            uptime_pct_90d=round(uptime, 1),
            failure_count_90d=failures,
            mtbf_days=round(mtbf, 1),
            days_since_last_failure=days_since,
            predicted_failure_days=max(0, round(mtbf - days_since)),
            risk_level=score_risk_level(score, config),
            risk_score=score,
            matched_rules=fired,
        ))

    results.sort(key=lambda r: r.risk_score, reverse=True)
    logger.info(f"Computed risk for {len(results)} units, {sum(1 for r in results if r.risk_level == 'high')} high")
    return results
