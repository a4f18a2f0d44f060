"""
Configuration settings for the DBIS generation report warehouse
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_CONFIG_DIR = Path(__file__).resolve().parent


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


class Settings:
    """Application settings"""

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///dbis_history.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    # Sheet layouts (row/column positions per sheet type)
    LAYOUT_FILE: str = os.getenv("LAYOUT_FILE", str(_CONFIG_DIR / "sheet_layouts.json"))
    SUPPORTED_FORMATS: list = [".xlsx", ".xlsm"]

    # Reference date: reports cover "yesterday" in utility local time (UTC-4)
    TIMEZONE_OFFSET_HOURS: float = _env_float("TIMEZONE_OFFSET_HOURS", "-4")

    # Date formats accepted in header and completion-date cells, besides ISO
    DATE_FORMATS: List[str] = [
        "%m/%d/%Y",
        "%m/%d/%y",
        "%d-%b-%Y",
        "%d-%b-%y",
        "%d %B %Y",
        "%d %b %Y",
        "%b %d, %Y",
        "%B %d, %Y",
    ]

    # Data quality
    HIGH_NO_DATA_RATIO: float = _env_float("HIGH_NO_DATA_RATIO", "0.5")
    STATION_SUM_TOLERANCE_MW: float = _env_float("STATION_SUM_TOLERANCE_MW", "0.01")

    # Capacity reserve margin tiers (%)
    RESERVE_CRITICAL_PCT: float = _env_float("RESERVE_CRITICAL_PCT", "5")
    RESERVE_WARNING_PCT: float = _env_float("RESERVE_WARNING_PCT", "15")

    # Station uptime tiers (%)
    UPTIME_CRITICAL_PCT: float = _env_float("UPTIME_CRITICAL_PCT", "50")
    UPTIME_WARNING_PCT: float = _env_float("UPTIME_WARNING_PCT", "80")

    # Unit risk score tiers
    RISK_MEDIUM_SCORE: int = _env_int("RISK_MEDIUM_SCORE", "30")
    RISK_HIGH_SCORE: int = _env_int("RISK_HIGH_SCORE", "60")

    # Forecast windows
    DEMAND_HISTORY_DAYS: int = _env_int("DEMAND_HISTORY_DAYS", "730")
    LOAD_SHEDDING_DAYS: int = _env_int("LOAD_SHEDDING_DAYS", "365")
    RELIABILITY_DAYS: int = _env_int("RELIABILITY_DAYS", "90")
    DEMAND_HORIZON_MONTHS: int = _env_int("DEMAND_HORIZON_MONTHS", "24")
    KPI_HORIZON_MONTHS: int = _env_int("KPI_HORIZON_MONTHS", "12")

    # Trend hysteresis
    LOAD_SHEDDING_TREND_BAND: float = 0.10
    RELIABILITY_TREND_BAND: float = 0.05

    # Analytical backend for scenario forecasts (fallback is used when unset)
    ANALYTICS_BACKEND_URL: Optional[str] = os.getenv("ANALYTICS_BACKEND_URL")
    ANALYTICS_API_KEY: str = os.getenv("ANALYTICS_API_KEY", "")
    ANALYTICS_TIMEOUT: int = _env_int("ANALYTICS_TIMEOUT", "120")
    ANALYTICS_MAX_RETRIES: int = _env_int("ANALYTICS_MAX_RETRIES", "2")

    # Fallback scenario defaults, per grid (MW/month, MW)
    FALLBACK_GROWTH = {"DBIS": 2.0, "Essequibo": 0.16}
    FALLBACK_GROWTH_FLOOR = {"DBIS": 0.5, "Essequibo": 0.05}
    FALLBACK_CURRENT_PEAK = {"DBIS": 200.0, "Essequibo": 13.0}
    FALLBACK_CAPACITY = {"DBIS": 230.0, "Essequibo": 36.0}
    AGGRESSIVE_MULTIPLIER: float = 1.5

    # Monthly KPI catalog
    KNOWN_KPIS: List[str] = [
        "Affected Customers",
        "Collection Rate %",
        "HFO Generation Mix %",
        "LFO Generation Mix %",
        "Installed Capacity DBIS",
        "Installed Capacity Essequibo",
        "Peak Demand DBIS",
        "Peak Demand Essequibo",
    ]


# Global settings instance
settings = Settings()
