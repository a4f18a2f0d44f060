"""
Cross-reference Generation Status outages with Schedule units
"""

from typing import Dict, List, Tuple

from loguru import logger

from dbis_warehouse.models.data_models import Outage, Unit


def match_outages_to_units(outages: List[Outage], units: List[Unit]) -> List[Outage]:
    """
    Enrich outages with the matching Schedule unit.

    Matching is by (station, unit number) with the station compared
    case-insensitively. An outage without a unit number matches the first
    unit of its station. Unmatched outages are returned unchanged.
    """
    by_key: Dict[Tuple[str, str], Unit] = {}
    first_by_station: Dict[str, Unit] = {}
    for unit in units:
        station = unit.station.casefold()
        by_key.setdefault((station, unit.unit_number), unit)
        first_by_station.setdefault(station, unit)

    matched = []
    hits = 0
    for outage in outages:
        station = outage.station.casefold()
        if outage.unit_number:
            unit = by_key.get((station, outage.unit_number))
        else:
            unit = first_by_station.get(station)

        if unit is None:
            matched.append(outage)
            continue

        hits += 1
        matched.append(outage.model_copy(update={
            "matched_unit_row": unit.row_number,
            "schedule_derated_mw": unit.derated_capacity_mw,
            "schedule_available_mw": unit.available_mw,
            "schedule_status": unit.status,
        }))

    logger.info(f"Matched {hits} of {len(outages)} outages to schedule units")
    return matched
