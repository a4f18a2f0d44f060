"""
Database schema definitions for the persisted report history
"""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Numeric columns come back as floats; the forecasting code works in floats
MW = Numeric(10, 4, asdecimal=False)
PCT = Numeric(7, 2, asdecimal=False)


class Uploads(Base):
    """One uploaded workbook; only confirmed uploads feed the forecasts"""
    __tablename__ = 'gpl_uploads'

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_date = Column(Date, nullable=False)
    filename = Column(Text)
    status = Column(String(20), nullable=False, default='pending')
    uploaded_at = Column(DateTime, default=datetime.now)

    # Relationships
    summary = relationship("DailySummary", back_populates="upload", uselist=False)
    stations = relationship("DailyStations", back_populates="upload")
    units = relationship("DailyUnits", back_populates="upload")


class DailySummary(Base):
    """System summary KPIs for one report date"""
    __tablename__ = 'gpl_daily_summary'

    id = Column(Integer, primary_key=True, autoincrement=True)
    upload_id = Column(Integer, ForeignKey('gpl_uploads.id'), nullable=False)
    report_date = Column(Date, nullable=False)
    total_fossil_capacity_mw = Column(MW)
    expected_peak_demand_mw = Column(MW)
    reserve_capacity_mw = Column(MW)
    average_for_pct = Column(PCT)
    expected_capacity_mw = Column(MW)
    expected_reserve_mw = Column(MW)
    solar_hampshire_mwp = Column(MW)
    solar_prospect_mwp = Column(MW)
    solar_trafalgar_mwp = Column(MW)
    total_renewable_mwp = Column(MW)
    total_dbis_capacity_mw = Column(MW)
    evening_peak_on_bars_mw = Column(MW)
    evening_peak_suppressed_mw = Column(MW)
    day_peak_on_bars_mw = Column(MW)
    day_peak_suppressed_mw = Column(MW)
    gen_availability_at_suppressed_peak_mw = Column(MW)
    approx_suppressed_peak_mw = Column(MW)
    system_utilization_pct = Column(PCT)
    reserve_margin_pct = Column(PCT)

    # Relationships
    upload = relationship("Uploads", back_populates="summary")


class DailyStations(Base):
    """Station aggregates for one report date"""
    __tablename__ = 'gpl_daily_stations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    upload_id = Column(Integer, ForeignKey('gpl_uploads.id'), nullable=False)
    report_date = Column(Date, nullable=False)
    station = Column(String(100), nullable=False)
    total_units = Column(Integer, default=0)
    units_online = Column(Integer, default=0)
    units_offline = Column(Integer, default=0)
    units_no_data = Column(Integer, default=0)
    total_derated_capacity_mw = Column(MW)
    total_available_mw = Column(MW)
    station_utilization_pct = Column(PCT)

    # Relationships
    upload = relationship("Uploads", back_populates="stations")


class DailyUnits(Base):
    """Unit rows for one report date"""
    __tablename__ = 'gpl_daily_units'

    id = Column(Integer, primary_key=True, autoincrement=True)
    upload_id = Column(Integer, ForeignKey('gpl_uploads.id'), nullable=False)
    report_date = Column(Date, nullable=False)
    row_number = Column(Integer)
    station = Column(String(100), nullable=False)
    engine = Column(String(50))
    unit_number = Column(String(20), nullable=False)
    installed_capacity_mva = Column(MW)
    installed_capacity_mw = Column(MW)
    derated_capacity_mw = Column(MW)
    available_mw = Column(MW)
    status = Column(String(10), nullable=False)
    utilization_pct = Column(PCT)

    # Relationships
    upload = relationship("Uploads", back_populates="units")


class MonthlyKpis(Base):
    """Monthly KPI values, one row per month and KPI"""
    __tablename__ = 'gpl_monthly_kpis'

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_month = Column(Date, nullable=False)
    kpi_name = Column(String(100), nullable=False)
    value = Column(Numeric(14, 4, asdecimal=False))
    raw_value = Column(Text)
