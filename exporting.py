# exporting.py
import logging
from typing import NamedTuple

from checklist import parse_date, week_id
from projection import load_template, project_records, workbook_bytes
from records import record_key, week_group
from renderer import XLSX_MIME, RenderError
from summary_pdf import build_summary_pdf

logger = logging.getLogger(__name__)

PDF_MIME = 'application/pdf'


class ExportError(Exception):
    """Export aborted; ``str(exc)`` is meant for the user."""


class MissingTemplate(ExportError):
    def __init__(self, msg='Primero cargue la plantilla Excel'):
        super().__init__(msg)


class MissingPlate(ExportError):
    def __init__(self, msg='Ingrese la placa del vehículo'):
        super().__init__(msg)


class NothingToExport(ExportError):
    def __init__(self, msg='No hay datos para exportar'):
        super().__init__(msg)


class RenderFailed(ExportError):
    pass


class ExportResult(NamedTuple):
    filename: str
    content: bytes
    mimetype: str


# --------------------------- Filenames ------------------------------
def xlsx_filename(plate: str, current_date, consolidated: bool = False) -> str:
    if consolidated:
        return f'Preoperacional_{plate}_{week_id(current_date)}_CONSOLIDADO.xlsx'
    return f'Preoperacional_{plate}_{parse_date(current_date).isoformat()}.xlsx'


def pdf_filename(plate: str, current_date) -> str:
    return f'Preoperacional_{plate}_{week_id(current_date)}.pdf'


def summary_filename(plate: str, current_date) -> str:
    return f'Preoperacional_{plate}_{week_id(current_date)}_RESUMEN.pdf'


# --------------------------- Record selection -----------------------
def resolve_records(records, plate: str, current_date, consolidated: bool = False,
                    fallback=None) -> list:
    """Records to project for one export.

    ``records`` maps ``"{plate}_{date}"`` keys to stored InspectionRecords.
    Single-day exports fall back to the unsaved form state when nothing was
    saved for that day.
    """
    if consolidated:
        return week_group(records.values(), plate, week_id(current_date))
    rec = records.get(record_key(plate, current_date)) or fallback
    return [rec] if rec is not None else []


def _check(template, plate):
    if not template:
        raise MissingTemplate()
    if not plate:
        raise MissingPlate()


def _filled_workbook(template: bytes, docs) -> bytes:
    wb = load_template(template)
    project_records(wb.worksheets[0], docs)
    return workbook_bytes(wb)


# --------------------------- Export paths ---------------------------
def export_workbook(template: bytes, records, plate: str, current_date,
                    consolidated: bool = False, fallback=None) -> ExportResult:
    _check(template, plate)
    docs = resolve_records(records, plate, current_date, consolidated, fallback)
    if not docs:
        raise NothingToExport()
    content = _filled_workbook(template, docs)
    name = xlsx_filename(plate, current_date, consolidated)
    logger.info('Exported %s (%d day(s))', name, len(docs))
    return ExportResult(name, content, XLSX_MIME)


def export_pdf(template: bytes, records, plate: str, current_date, renderer) -> ExportResult:
    """Week workbook converted by the external rendering service."""
    _check(template, plate)
    docs = resolve_records(records, plate, current_date, consolidated=True)
    if not docs:
        raise NothingToExport()
    content = _filled_workbook(template, docs)
    try:
        pdf = renderer.convert(content)
    except RenderError as e:
        raise RenderFailed(str(e)) from e
    name = pdf_filename(plate, current_date)
    logger.info('Rendered %s (%d bytes)', name, len(pdf))
    return ExportResult(name, pdf, PDF_MIME)


def export_summary_pdf(records, plate: str, current_date, filename=None) -> ExportResult:
    """Week summary drawn locally; needs no template.

    ``filename`` overrides the ``_RESUMEN`` name, e.g. when this stands in
    for the rendered PDF.
    """
    if not plate:
        raise MissingPlate()
    docs = resolve_records(records, plate, current_date, consolidated=True)
    if not docs:
        raise NothingToExport()
    pdf = build_summary_pdf(docs, week_id(current_date))
    name = filename or summary_filename(plate, current_date)
    return ExportResult(name, pdf, PDF_MIME)
