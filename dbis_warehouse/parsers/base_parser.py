"""
Abstract base class for all sheet parsers
"""

from abc import ABC, abstractmethod
from itertools import accumulate
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from dbis_warehouse.config.layouts import SheetLayouts, load_layouts
from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.exceptions import StructuralError
from dbis_warehouse.models.data_models import DataQualityWarning, ParseResult
from dbis_warehouse.utils.helpers import clean_text

Grid = List[List[Any]]


def forward_fill(values: Iterable[Any], normalize: Callable[[Any], Optional[str]]) -> List[Optional[str]]:
    """Carry the last non-empty label down over rows that omit it"""
    labels = (normalize(value) for value in values)
    return list(accumulate(labels, lambda current, label: label or current))


def cell(row: Sequence[Any], index: int) -> Any:
    """Cell value, or None where the row is shorter than the column"""
    return row[index] if index < len(row) else None


class BaseSheetParser(ABC):
    """Abstract base class for all sheet parsers"""

    SHEET_TYPE = "unknown"

    def __init__(self, layouts: Optional[SheetLayouts] = None, config: Optional[Settings] = None):
        self.layouts = layouts or load_layouts()
        self.settings = config or default_settings
        self.warnings: List[DataQualityWarning] = []

    @abstractmethod
    def _parse(self, sheets: Dict[str, Grid], *args, **kwargs):
        """Parse the sheet; raise StructuralError when the layout is absent"""
        pass

    def parse(self, sheets: Dict[str, Grid], *args, **kwargs) -> ParseResult:
        """Main parsing method; never raises past this boundary"""
        self.warnings = []
        try:
            data = self._parse(sheets, *args, **kwargs)
        except StructuralError as e:
            logger.error(f"{self.SHEET_TYPE} sheet structure error: {e}")
            return ParseResult(
                success=False,
                error=str(e),
                warnings=self.warnings,
                available_sheets=list(sheets.keys()) if e.artifact == "sheet" else None,
            )
        except (ValueError, TypeError, IndexError, KeyError) as e:
            logger.error(f"Failed to parse {self.SHEET_TYPE} sheet: {e}")
            return ParseResult(success=False, error=f"Failed to parse {self.SHEET_TYPE} sheet: {e}")

        return ParseResult(success=True, data=data, warnings=self.warnings)

    def normalize_station(self, value: Any) -> Optional[str]:
        """Map station spelling variants to the canonical name"""
        name = clean_text(value)
        if name is None:
            return None
        return self.layouts.station_aliases.get(name.lower(), name)

    def normalize_engine(self, value: Any) -> Optional[str]:
        """Map engine spelling variants (e.g. 'Wartisla') to the canonical name"""
        engine = clean_text(value)
        if engine is None:
            return None
        lowered = engine.lower()
        for fragment, canonical in self.layouts.engine_aliases.items():
            if fragment in lowered:
                return canonical
        return engine

    def add_warning(self, warning: DataQualityWarning):
        logger.warning(f"[{self.SHEET_TYPE}] {warning.message}")
        self.warnings.append(warning)
