# vehicles.py
import csv
import logging
import os
import re
from typing import NamedTuple

from openpyxl import load_workbook

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10
MIN_PLATE_LEN = 5
COLUMNS = ('PLACA', 'MARCA', 'FAMILIA', 'DESCRIPCION')


class Vehicle(NamedTuple):
    plate: str
    brand: str = ''
    family: str = ''
    description: str = ''


def normalize_plate(plate) -> str:
    return re.sub(r'\s+', '', str(plate or '')).upper()


class VehicleCatalog:
    """Read-only fleet list used for plate autofill and suggestions."""

    def __init__(self, vehicles=()):
        self.vehicles = tuple(vehicles)
        self._by_plate = {}
        for v in self.vehicles:
            self._by_plate.setdefault(normalize_plate(v.plate), v)

    def __len__(self):
        return len(self.vehicles)

    def find(self, plate):
        key = normalize_plate(plate)
        if len(key) < MIN_PLATE_LEN:
            return None
        return self._by_plate.get(key)

    def suggest(self, fragment, limit: int = MAX_SUGGESTIONS) -> list:
        key = normalize_plate(fragment)
        if not key:
            return []
        limit = min(limit, MAX_SUGGESTIONS)
        out = []
        for v in self.vehicles:
            if key in normalize_plate(v.plate):
                out.append(v)
                if len(out) >= limit:
                    break
        return out


def _clean(value) -> str:
    return '' if value is None else str(value).strip()


def _keep(plate: str) -> bool:
    return bool(plate) and plate not in ('N/A', 'PLACA') and len(plate) >= MIN_PLATE_LEN


def _from_rows(rows) -> list:
    """Rows of cells -> vehicles; the header row may sit below a title block."""
    vehicles = []
    index = None
    for row in rows:
        cells = [_clean(c).upper() for c in row]
        if index is None:
            if 'PLACA' in cells:
                index = {name: cells.index(name) for name in COLUMNS if name in cells}
            continue
        fields = []
        for name in COLUMNS:
            pos = index.get(name)
            fields.append(_clean(row[pos]) if pos is not None and pos < len(row) else '')
        if _keep(fields[0]):
            vehicles.append(Vehicle(*fields))
    return vehicles


def load_catalog(path: str) -> VehicleCatalog:
    if not path or not os.path.exists(path):
        logger.warning('Vehicle list %s not found; autofill disabled', path)
        return VehicleCatalog()
    if path.lower().endswith(('.xlsx', '.xlsm')):
        wb = load_workbook(path, read_only=True, data_only=True)
        try:
            vehicles = _from_rows(wb.worksheets[0].iter_rows(values_only=True))
        finally:
            wb.close()
    else:
        with open(path, newline='', encoding='utf-8-sig') as f:
            vehicles = _from_rows(csv.reader(f))
    logger.info('Loaded %d vehicles from %s', len(vehicles), path)
    return VehicleCatalog(vehicles)
