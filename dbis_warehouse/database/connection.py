"""
Database connection and read-side history queries
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import create_engine, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from dbis_warehouse.config.settings import settings
from dbis_warehouse.database.history import HistorySource
from dbis_warehouse.models.data_models import (
    HistoricalSnapshot,
    MonthlyKpiSnapshot,
    ReportSummary,
    StationAggregate,
    Unit,
)
from dbis_warehouse.models.database_schema import (
    Base,
    DailyStations,
    DailySummary,
    DailyUnits,
    MonthlyKpis,
    Uploads,
)

CONFIRMED = 'confirmed'


class DatabaseConnection:
    """Database connection manager"""

    def __init__(self, connection_string: Optional[str] = None, create_tables: bool = True):
        if connection_string is None:
            connection_string = settings.DATABASE_URL

        self.engine = create_engine(connection_string)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        # Read-only callers skip DDL
        if create_tables:
            self._create_tables()

    def _create_tables(self):
        """Create all tables if they don't exist"""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Error creating tables: {str(e)}")
            raise

    def get_session(self):
        """Get database session"""
        return self.SessionLocal()

    def test_connection(self) -> bool:
        """Test database connection"""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection test failed: {str(e)}")
            return False


def _columns(row, model_cls) -> dict:
    values = {name: getattr(row, name, None) for name in model_cls.model_fields}
    return {name: value for name, value in values.items() if value is not None}


class SqlHistorySource(HistorySource):
    """History read from the warehouse tables (confirmed uploads only)"""

    def __init__(self, connection: DatabaseConnection):
        self.connection = connection

    def get_historical_snapshots(self, range_days: int, reference_date: date) -> List[HistoricalSnapshot]:
        start = reference_date - timedelta(days=range_days)
        confirmed = select(Uploads.id).where(Uploads.status == CONFIRMED)

        with self.connection.get_session() as session:
            summaries = session.execute(
                select(DailySummary)
                .where(DailySummary.upload_id.in_(confirmed))
                .where(DailySummary.report_date >= start, DailySummary.report_date <= reference_date)
                .order_by(DailySummary.report_date)
            ).scalars().all()

            stations_by_date: Dict[date, List[StationAggregate]] = defaultdict(list)
            for row in session.execute(
                select(DailyStations)
                .where(DailyStations.upload_id.in_(confirmed))
                .where(DailyStations.report_date >= start, DailyStations.report_date <= reference_date)
                .order_by(DailyStations.report_date, DailyStations.station)
            ).scalars():
                stations_by_date[row.report_date].append(StationAggregate(**_columns(row, StationAggregate)))

            units_by_date: Dict[date, List[Unit]] = defaultdict(list)
            for row in session.execute(
                select(DailyUnits)
                .where(DailyUnits.upload_id.in_(confirmed))
                .where(DailyUnits.report_date >= start, DailyUnits.report_date <= reference_date)
                .order_by(DailyUnits.report_date, DailyUnits.station, DailyUnits.unit_number)
            ).scalars():
                units_by_date[row.report_date].append(Unit(**_columns(row, Unit)))

            snapshots = [
                HistoricalSnapshot(
                    report_date=row.report_date,
                    summary=ReportSummary(**_columns(row, ReportSummary)),
                    stations=stations_by_date.get(row.report_date, []),
                    units=units_by_date.get(row.report_date, []),
                )
                for row in summaries
            ]

        logger.info(f"Loaded {len(snapshots)} historical snapshots from {start} to {reference_date}")
        return snapshots

    def get_monthly_kpi_series(self) -> List[MonthlyKpiSnapshot]:
        by_month: Dict[date, Dict[str, float]] = {}
        with self.connection.get_session() as session:
            rows = session.execute(
                select(MonthlyKpis).order_by(MonthlyKpis.report_month, MonthlyKpis.kpi_name)
            ).scalars().all()
            for row in rows:
                values = by_month.setdefault(row.report_month, {})
                if row.value is not None:
                    values[row.kpi_name] = float(row.value)

        logger.info(f"Loaded monthly KPIs for {len(by_month)} months")
        return [MonthlyKpiSnapshot(report_month=month, values=values) for month, values in by_month.items()]
