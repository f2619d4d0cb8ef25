# coordinates.py
"""Fixed cell layout of the pre-printed weekly inspection form.

Every address below points into the first worksheet of the corporate template.
The table is read only; nothing here touches a workbook.
"""
from types import MappingProxyType

from checklist import ITEMS_BY_ID, DayBlock, Status

MARK = 'X'

# item id -> worksheet row (section title rows are skipped)
ITEM_ROWS = MappingProxyType({
    1: 14, 2: 15, 3: 17, 4: 18, 5: 19,
    6: 21, 7: 22, 8: 23, 9: 24, 10: 25,
    11: 27, 12: 28, 13: 29, 14: 30, 15: 31, 16: 32,
    17: 34, 18: 35, 19: 36, 20: 37,
    21: 39, 22: 40, 23: 41, 24: 42, 25: 43, 26: 44, 27: 45,
    28: 46, 29: 47, 30: 48, 31: 49, 32: 50, 33: 51, 34: 52, 35: 53,
    36: 55, 37: 56,
    38: 58, 39: 59, 40: 60, 41: 61,
    42: 63, 43: 64, 44: 65, 45: 66, 46: 67, 47: 68,
    48: 70, 49: 71, 50: 72, 51: 73, 52: 74, 53: 75, 54: 76,
    55: 78, 56: 79, 57: 80, 58: 81, 59: 82,
    60: 84, 61: 85, 62: 86,
})

# (C, NC, NA) columns for each day
DAY_COLUMNS = MappingProxyType({
    DayBlock.MONDAY: ('E', 'F', 'G'),
    DayBlock.TUESDAY: ('H', 'I', 'J'),
    DayBlock.WEDNESDAY: ('K', 'L', 'M'),
    DayBlock.THURSDAY: ('N', 'O', 'P'),
    DayBlock.FRIDAY: ('Q', 'R', 'S'),
    DayBlock.SATURDAY: ('T', 'U', 'V'),
    DayBlock.SUNDAY: ('W', 'X', 'Y'),
})

STATUS_ORDER = (Status.COMPLIANT, Status.NON_COMPLIANT, Status.NOT_APPLICABLE)

DATE_HEADER_CELLS = MappingProxyType({
    DayBlock.MONDAY: 'E11',
    DayBlock.TUESDAY: 'H11',
    DayBlock.WEDNESDAY: 'K11',
    DayBlock.THURSDAY: 'N11',
    DayBlock.FRIDAY: 'Q11',
    DayBlock.SATURDAY: 'T11',
    DayBlock.SUNDAY: 'W11',
})

# record attribute -> value cell (label sits to the left on the form)
HEADER_CELLS = MappingProxyType({
    'city': 'C5',
    'month_year': 'J5',
    'plate': 'S5',
    'driver_name': 'C6',
    'vehicle_type': 'J6',
    'brand': 'S6',
    'model': 'C7',
    'odometer_start': 'J7',
    'license_expiry': 'S8',
    'sota_expiry': 'C9',
    'rtm_expiry': 'J9',
    'policy_expiry': 'S9',
})

FUEL_TYPE_CELLS = MappingProxyType({
    'GASOLINA': 'E8',
    'DIESEL': 'G8',
    'GAS': 'I8',
    'ELECTRICO': 'K8',
})

LICENSE_CATEGORY_CELLS = MappingProxyType({
    'A1': 'E10', 'A2': 'F10',
    'B1': 'H10', 'B2': 'I10', 'B3': 'J10',
    'C1': 'L10', 'C2': 'M10', 'C3': 'N10',
})

SIGNATURE_ROLES = ('driver', 'safety_officer')

SIGNATURE_CELLS = MappingProxyType({
    'driver': MappingProxyType({
        'full_name': 'E93', 'id_number': 'E94', 'role': 'E95', 'signed_at': 'E96',
    }),
    'safety_officer': MappingProxyType({
        'full_name': 'Q93', 'id_number': 'Q94', 'role': 'Q95', 'signed_at': 'Q96',
    }),
})

SIGNATURE_IMAGE_ANCHORS = MappingProxyType({
    'driver': 'E89',
    'safety_officer': 'Q89',
})


def status_cells(item_id, block) -> dict | None:
    """{Status: address} for one item on one day, or None when either is unmapped."""
    try:
        row = ITEM_ROWS.get(int(item_id))
        cols = DAY_COLUMNS.get(DayBlock(block))
    except (TypeError, ValueError):
        return None
    if row is None or cols is None:
        return None
    return {status: f'{col}{row}' for status, col in zip(STATUS_ORDER, cols)}


def date_cell(block) -> str | None:
    try:
        return DATE_HEADER_CELLS.get(DayBlock(block))
    except ValueError:
        return None


def unmapped_items() -> list[int]:
    """Catalog ids with no row on the form."""
    return sorted(set(ITEMS_BY_ID) - set(ITEM_ROWS))


def unmapped_rows() -> list[int]:
    """Row-table ids with no catalog entry."""
    return sorted(set(ITEM_ROWS) - set(ITEMS_BY_ID))
