from __future__ import annotations

import pytest

from checklist import Status
from exporting import (
    MissingPlate,
    MissingTemplate,
    NothingToExport,
    RenderFailed,
    export_pdf,
    export_summary_pdf,
    export_workbook,
    pdf_filename,
    resolve_records,
    summary_filename,
    xlsx_filename,
)
from projection import load_template
from renderer import RenderError


class FakeRenderer:
    def __init__(self, result=b'%PDF-1.4 fake', error=None):
        self.result = result
        self.error = error
        self.sent = []

    def convert(self, data: bytes) -> bytes:
        self.sent.append(data)
        if self.error:
            raise RenderError(self.error)
        return self.result


def _store(*records) -> dict:
    return {r.key: r for r in records}


def test_filenames() -> None:
    assert xlsx_filename('ABC123', '2024-03-14', consolidated=True) == \
        'Preoperacional_ABC123_2024-03-11_CONSOLIDADO.xlsx'
    assert xlsx_filename('ABC123', '2024-03-14') == 'Preoperacional_ABC123_2024-03-14.xlsx'
    assert pdf_filename('ABC123', '2024-03-14') == 'Preoperacional_ABC123_2024-03-11.pdf'
    assert summary_filename('ABC123', '2024-03-14') == 'Preoperacional_ABC123_2024-03-11_RESUMEN.pdf'


def test_single_day_prefers_saved_record(make_record) -> None:
    saved = make_record(date='2024-03-14', driver_name='SAVED')
    unsaved = make_record(date='2024-03-14', driver_name='FORM')
    assert resolve_records(_store(saved), 'ABC123', '2024-03-14', fallback=unsaved) == [saved]
    assert resolve_records({}, 'ABC123', '2024-03-14', fallback=unsaved) == [unsaved]
    assert resolve_records({}, 'ABC123', '2024-03-14') == []


def test_week_resolution_is_sorted(make_record) -> None:
    wed = make_record(date='2024-03-13')
    mon = make_record(date='2024-03-11')
    assert resolve_records(_store(wed, mon), 'ABC123', '2024-03-17', consolidated=True) == [mon, wed]


def test_preconditions_in_order(template_bytes, make_record) -> None:
    store = _store(make_record())
    with pytest.raises(MissingTemplate):
        export_workbook(None, store, '', '2024-03-11')
    with pytest.raises(MissingPlate):
        export_workbook(template_bytes, store, '', '2024-03-11')
    with pytest.raises(NothingToExport) as exc:
        export_workbook(template_bytes, store, 'ABC123', '2024-03-20', consolidated=True)
    assert str(exc.value) == 'No hay datos para exportar'


def test_consolidated_workbook(template_bytes, make_record) -> None:
    store = _store(
        make_record(date='2024-03-11', driver_name='A', responses={1: Status.COMPLIANT}),
        make_record(date='2024-03-13', driver_name='B', responses={1: Status.NON_COMPLIANT}),
        make_record(plate='XYZ987', date='2024-03-12', driver_name='C', responses={1: Status.COMPLIANT}),
    )
    result = export_workbook(template_bytes, store, 'ABC123', '2024-03-14', consolidated=True)
    assert result.filename == 'Preoperacional_ABC123_2024-03-11_CONSOLIDADO.xlsx'
    ws = load_template(result.content).worksheets[0]
    assert ws['C6'].value == 'B'
    assert ws['E14'].value == 'X'     # Monday C
    assert ws['L14'].value == 'X'     # Wednesday NC
    assert ws['H14'].value is None    # Tuesday belongs to another vehicle
    assert ws['H11'].value is None


def test_single_day_uses_unsaved_form(template_bytes, make_record) -> None:
    form = make_record(date='2024-03-12', responses={2: Status.NOT_APPLICABLE})
    result = export_workbook(template_bytes, {}, 'ABC123', '2024-03-12', fallback=form)
    assert result.filename == 'Preoperacional_ABC123_2024-03-12.xlsx'
    ws = load_template(result.content).worksheets[0]
    assert ws['J15'].value == 'X'


def test_export_leaves_records_and_template_alone(template_bytes, make_record) -> None:
    rec = make_record()
    before = rec.to_dict()
    original = bytes(template_bytes)
    export_workbook(template_bytes, _store(rec), 'ABC123', '2024-03-11', consolidated=True)
    export_workbook(template_bytes, _store(rec), 'ABC123', '2024-03-11', consolidated=True)
    assert rec.to_dict() == before
    assert template_bytes == original


def test_pdf_export_sends_filled_workbook(template_bytes, make_record) -> None:
    renderer = FakeRenderer()
    result = export_pdf(template_bytes, _store(make_record()), 'ABC123', '2024-03-14', renderer)
    assert result.filename == 'Preoperacional_ABC123_2024-03-11.pdf'
    assert result.content == b'%PDF-1.4 fake'
    assert result.mimetype == 'application/pdf'
    ws = load_template(renderer.sent[0]).worksheets[0]
    assert ws['E14'].value == 'X'


def test_pdf_export_surfaces_renderer_message(template_bytes, make_record) -> None:
    renderer = FakeRenderer(error='soffice: conversion failed')
    with pytest.raises(RenderFailed) as exc:
        export_pdf(template_bytes, _store(make_record()), 'ABC123', '2024-03-14', renderer)
    assert str(exc.value) == 'soffice: conversion failed'


def test_pdf_export_checks_preconditions_before_rendering(template_bytes) -> None:
    renderer = FakeRenderer()
    with pytest.raises(NothingToExport):
        export_pdf(template_bytes, {}, 'ABC123', '2024-03-14', renderer)
    assert renderer.sent == []


def test_summary_pdf(make_record) -> None:
    store = _store(make_record(date='2024-03-11'), make_record(date='2024-03-15', driver_name='B & C'))
    result = export_summary_pdf(store, 'ABC123', '2024-03-14')
    assert result.filename == 'Preoperacional_ABC123_2024-03-11_RESUMEN.pdf'
    assert result.content.startswith(b'%PDF')


def test_summary_pdf_without_data() -> None:
    with pytest.raises(NothingToExport):
        export_summary_pdf({}, 'ABC123', '2024-03-14')
    with pytest.raises(MissingPlate):
        export_summary_pdf({}, '', '2024-03-14')


def test_summary_pdf_can_take_the_pdf_name(make_record) -> None:
    store = _store(make_record(date='2024-03-11'))
    name = pdf_filename('ABC123', '2024-03-14')
    result = export_summary_pdf(store, 'ABC123', '2024-03-14', filename=name)
    assert result.filename == 'Preoperacional_ABC123_2024-03-11.pdf'
    assert result.content.startswith(b'%PDF')
