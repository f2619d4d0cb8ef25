from __future__ import annotations

import pytest

from checklist import DayBlock, Status
from coordinates import (
    DATE_HEADER_CELLS,
    FUEL_TYPE_CELLS,
    HEADER_CELLS,
    ITEM_ROWS,
    LICENSE_CATEGORY_CELLS,
    SIGNATURE_CELLS,
    SIGNATURE_IMAGE_ANCHORS,
    date_cell,
    status_cells,
    unmapped_items,
    unmapped_rows,
)


def test_catalog_and_rows_match() -> None:
    assert unmapped_items() == []
    assert unmapped_rows() == []


def test_status_cells_first_and_last_item() -> None:
    assert status_cells(1, DayBlock.MONDAY) == {
        Status.COMPLIANT: 'E14', Status.NON_COMPLIANT: 'F14', Status.NOT_APPLICABLE: 'G14',
    }
    assert status_cells(62, DayBlock.SUNDAY) == {
        Status.COMPLIANT: 'W86', Status.NON_COMPLIANT: 'X86', Status.NOT_APPLICABLE: 'Y86',
    }


def test_status_cells_accepts_string_ids() -> None:
    assert status_cells('36', 3) == {
        Status.COMPLIANT: 'N55', Status.NON_COMPLIANT: 'O55', Status.NOT_APPLICABLE: 'P55',
    }


@pytest.mark.parametrize('item_id, block', [(9999, 0), (1, 9), ('abc', 0), (None, 0)])
def test_unmapped_lookups_return_none(item_id, block) -> None:
    assert status_cells(item_id, block) is None


def test_date_cells() -> None:
    assert date_cell(DayBlock.THURSDAY) == 'N11'
    assert date_cell(7) is None
    assert list(DATE_HEADER_CELLS.values()) == ['E11', 'H11', 'K11', 'N11', 'Q11', 'T11', 'W11']


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        ITEM_ROWS[1] = 99
    with pytest.raises(TypeError):
        HEADER_CELLS['plate'] = 'A1'


def test_no_two_fields_share_a_cell() -> None:
    addresses = []
    for item_id in ITEM_ROWS:
        for block in DayBlock:
            addresses.extend(status_cells(item_id, block).values())
    addresses.extend(DATE_HEADER_CELLS.values())
    addresses.extend(HEADER_CELLS.values())
    addresses.extend(FUEL_TYPE_CELLS.values())
    addresses.extend(LICENSE_CATEGORY_CELLS.values())
    for cells in SIGNATURE_CELLS.values():
        addresses.extend(cells.values())
    addresses.extend(SIGNATURE_IMAGE_ANCHORS.values())
    assert len(addresses) == len(set(addresses))
