"""
Exceptions raised inside the warehouse core
"""

from typing import Optional


class StructuralError(Exception):
    """A required sheet, row or column is absent; the parse cannot continue"""

    def __init__(self, message: str, artifact: Optional[str] = None):
        super().__init__(message)
        self.artifact = artifact


class ForecastingError(Exception):
    """No historical point exists to forecast from"""


class AnalyticsBackendUnavailable(Exception):
    """The analytical backend could not be reached or returned an unusable answer"""
