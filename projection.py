# projection.py
import base64
import binascii
import io
import logging
import zipfile

from openpyxl import load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.drawing.image import Image as SheetImage
from openpyxl.styles import Alignment
from openpyxl.utils.exceptions import InvalidFileException
from PIL import Image

from checklist import Status, format_cell_date, month_year_label
from coordinates import (
    FUEL_TYPE_CELLS,
    HEADER_CELLS,
    LICENSE_CATEGORY_CELLS,
    MARK,
    SIGNATURE_CELLS,
    SIGNATURE_IMAGE_ANCHORS,
    SIGNATURE_ROLES,
    date_cell,
    status_cells,
)

logger = logging.getLogger(__name__)

CENTER = Alignment(vertical='center', horizontal='center')
SIGNATURE_MAX_PX = (220, 80)


class TemplateError(Exception):
    pass


# --------------------------- Workbook I/O ---------------------------
def load_template(data: bytes):
    """Open template bytes as an openpyxl workbook."""
    if not data:
        raise TemplateError('La plantilla está vacía')
    try:
        return load_workbook(io.BytesIO(data))
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise TemplateError(f'La plantilla no es un archivo .xlsx válido: {e}') from None


def workbook_bytes(workbook) -> bytes:
    buf = io.BytesIO()
    workbook.save(buf)
    data = buf.getvalue()
    buf.close()
    return data


# --------------------------- Cell helpers ---------------------------
def _target(ws, address):
    cell = ws[address]
    if isinstance(cell, MergedCell):
        for rng in ws.merged_cells.ranges:
            if address in rng:
                return ws.cell(row=rng.min_row, column=rng.min_col)
    return cell


def write_cell(ws, address: str, value) -> None:
    cell = _target(ws, address)
    cell.value = value
    cell.alignment = CENTER


def clear_cell(ws, address: str) -> None:
    _target(ws, address).value = None


def mark_status(ws, item_id, block, status) -> bool:
    """Clear the item's three status cells for ``block`` and mark ``status``.

    Returns False (and touches nothing) when the item or block is unmapped.
    """
    cells = status_cells(item_id, block)
    if cells is None:
        return False
    try:
        target = cells[Status(status)]
    except ValueError:
        return False
    for address in cells.values():
        clear_cell(ws, address)
    write_cell(ws, target, MARK)
    return True


# --------------------------- Header ---------------------------------
def project_header(ws, record) -> None:
    """Header fields of ``record``; empty values leave the template untouched."""
    for attr, address in HEADER_CELLS.items():
        if attr == 'month_year':
            value = month_year_label(record.date)
        else:
            value = getattr(record, attr, '')
        if value:
            write_cell(ws, address, str(value).upper())

    fuel = (record.fuel_type or '').upper()
    if fuel:
        for address in FUEL_TYPE_CELLS.values():
            clear_cell(ws, address)
        if fuel in FUEL_TYPE_CELLS:
            write_cell(ws, FUEL_TYPE_CELLS[fuel], MARK)

    if record.license_categories:
        for address in LICENSE_CATEGORY_CELLS.values():
            clear_cell(ws, address)
        for category in record.license_categories:
            address = LICENSE_CATEGORY_CELLS.get(category.upper())
            if address:
                write_cell(ws, address, MARK)


def _signature_image(data_url: str):
    _, _, payload = data_url.partition('base64,')
    raw = base64.b64decode(payload or data_url, validate=True)
    img = Image.open(io.BytesIO(raw))
    if img.mode not in ('RGB', 'RGBA'):
        img = img.convert('RGBA')
    img.thumbnail(SIGNATURE_MAX_PX)
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    buf.seek(0)
    return SheetImage(buf)


def project_signatures(ws, records) -> None:
    """Latest signature per role across ``records`` (already date ordered)."""
    for role in SIGNATURE_ROLES:
        sig = None
        for rec in records:
            candidate = rec.signatures.get(role)
            if candidate is not None and not candidate.is_empty():
                sig = candidate
        if sig is None:
            continue
        for attr, address in SIGNATURE_CELLS[role].items():
            value = getattr(sig, attr)
            if value:
                write_cell(ws, address, value)
        if sig.image:
            try:
                picture = _signature_image(sig.image)
            except (binascii.Error, OSError, ValueError, Image.DecompressionBombError) as e:
                logger.warning('Skipping %s signature image: %s', role, e)
                continue
            picture.anchor = SIGNATURE_IMAGE_ANCHORS[role]
            ws.add_image(picture)


# --------------------------- Projection -----------------------------
def project_record_days(ws, record) -> None:
    """Date header and status marks of one daily record."""
    block = record.block
    address = date_cell(block)
    if address:
        write_cell(ws, address, format_cell_date(record.date))
    for item_id, status in record.responses.items():
        mark_status(ws, item_id, block, status)


def project_records(ws, records):
    """Write a set of daily records of one vehicle/week onto ``ws``.

    Header data comes from the latest record (last write wins); dates and
    marks are written per record in its own day block.
    """
    ordered = sorted((r for r in records if r is not None), key=lambda r: r.date)
    if not ordered:
        return ws
    project_header(ws, ordered[-1])
    for rec in ordered:
        project_record_days(ws, rec)
    project_signatures(ws, ordered)
    return ws
