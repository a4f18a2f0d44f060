"""
Read-only history contract consumed by the forecasting engine
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Iterable, List

from dbis_warehouse.models.data_models import HistoricalSnapshot, MonthlyKpiSnapshot


class HistorySource(ABC):
    """Persisted report history; the forecasting engine never writes through it"""

    @abstractmethod
    def get_historical_snapshots(self, range_days: int, reference_date: date) -> List[HistoricalSnapshot]:
        """Daily snapshots dated within `range_days` before `reference_date`, oldest first"""
        pass

    @abstractmethod
    def get_monthly_kpi_series(self) -> List[MonthlyKpiSnapshot]:
        """Monthly KPI snapshots, oldest first"""
        pass


class InMemoryHistory(HistorySource):
    """History held in memory, e.g. assembled by a caller or in tests"""

    def __init__(self, snapshots: Iterable[HistoricalSnapshot] = (), monthly: Iterable[MonthlyKpiSnapshot] = ()):
        self._snapshots = sorted(snapshots, key=lambda s: s.report_date)
        self._monthly = sorted(monthly, key=lambda m: m.report_month)

    def get_historical_snapshots(self, range_days: int, reference_date: date) -> List[HistoricalSnapshot]:
        start = reference_date - timedelta(days=range_days)
        return [s for s in self._snapshots if start <= s.report_date <= reference_date]

    def get_monthly_kpi_series(self) -> List[MonthlyKpiSnapshot]:
        return list(self._monthly)
