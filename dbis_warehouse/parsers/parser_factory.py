"""
Factory for creating sheet parsers by sheet type
"""

from typing import Dict, Optional, Type

from loguru import logger

from dbis_warehouse.config.layouts import SheetLayouts
from dbis_warehouse.config.settings import Settings
from dbis_warehouse.parsers.base_parser import BaseSheetParser
from dbis_warehouse.parsers.schedule_parser import ScheduleParser
from dbis_warehouse.parsers.status_parser import StatusParser


class ParserFactory:
    """Factory for creating sheet parsers"""

    def __init__(self, layouts: Optional[SheetLayouts] = None, config: Optional[Settings] = None):
        self.layouts = layouts
        self.config = config
        self._parsers: Dict[str, Type[BaseSheetParser]] = {
            ScheduleParser.SHEET_TYPE: ScheduleParser,
            StatusParser.SHEET_TYPE: StatusParser,
        }

    def get_parser(self, sheet_type: str) -> BaseSheetParser:
        """Get appropriate parser for a sheet type"""
        if sheet_type not in self._parsers:
            raise ValueError(f"No parser available for sheet type: {sheet_type}")

        parser_class = self._parsers[sheet_type]
        return parser_class(layouts=self.layouts, config=self.config)

    def register_parser(self, sheet_type: str, parser_class: Type[BaseSheetParser]):
        """Register a new parser"""
        self._parsers[sheet_type] = parser_class
        logger.info(f"Registered parser for {sheet_type}")
