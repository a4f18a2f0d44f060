"""
Data validation for parsed reports
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.models.data_models import DataQualityWarning, ParsedReport, UnitStatus, WarningCode


@dataclass
class ValidationResult:
    """Result of data validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[DataQualityWarning] = field(default_factory=list)


class DataValidator:
    """Validator for parsed report data"""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def validate(self, report: ParsedReport) -> ValidationResult:
        """Validate parsed report data"""
        errors = []
        warnings = []

        if not report.units:
            errors.append("No generating units found in Schedule sheet")

        # Station totals must equal the sum of their online units
        tolerance = self.settings.STATION_SUM_TOLERANCE_MW
        for station in report.stations:
            online_sum = sum(
                u.available_mw or 0
                for u in report.units
                if u.station == station.station and u.status == UnitStatus.ONLINE
            )
            if abs(online_sum - station.total_available_mw) > tolerance:
                warnings.append(DataQualityWarning(
                    type=WarningCode.STATION_TOTAL_MISMATCH,
                    message=f"Station {station.station} total {station.total_available_mw} MW differs from unit sum {online_sum:.4f} MW",
                    details={"station": station.station, "station_total": station.total_available_mw, "unit_sum": online_sum},
                ))

        # Check for negative values
        for unit in report.units:
            for label, value in (
                ("installed MVA", unit.installed_capacity_mva),
                ("installed MW", unit.installed_capacity_mw),
                ("derated MW", unit.derated_capacity_mw),
            ):
                if value is not None and value < 0:
                    warnings.append(DataQualityWarning(
                        type=WarningCode.NEGATIVE_CAPACITY,
                        message=f"Negative {label} for {unit.station} unit {unit.unit_number} (row {unit.row_number})",
                        details={"row": unit.row_number, "field": label, "value": value},
                    ))

        for w in warnings:
            logger.warning(f"Validation: {w.message}")

        is_valid = len(errors) == 0

        return ValidationResult(
            is_valid=is_valid,
            errors=errors,
            warnings=warnings,
        )
