# summary_pdf.py
import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from checklist import SECTIONS, DAY_LABELS, Status
from coordinates import MARK, STATUS_ORDER

TITLE = 'INSPECCIÓN PREOPERACIONAL SEMANAL'
NCOLS = 1 + 3 * len(DAY_LABELS)
SECTION_TITLES = frozenset(s.title for s in SECTIONS)


def _grid(records) -> list[list]:
    head = [['ÍTEM'] + [''] * (NCOLS - 1),
            [''] + [s.value for _ in DAY_LABELS for s in STATUS_ORDER]]
    for i, day in enumerate(DAY_LABELS):
        head[0][1 + 3 * i] = day[:3]

    body = []
    for section in SECTIONS:
        body.append([section.title] + [''] * (NCOLS - 1))
        for item in section.items:
            row = [item.label] + [''] * (NCOLS - 1)
            for rec in records:
                status = rec.responses.get(item.id)
                if status is None:
                    continue
                base = 1 + 3 * int(rec.block)
                row[base + STATUS_ORDER.index(Status(status))] = MARK
            body.append(row)
    return head + body


def build_summary_pdf(records, week: str) -> bytes:
    """Landscape grid of one vehicle's week, drawn without the corporate template."""
    records = sorted(records, key=lambda r: r.date)
    last = records[-1]
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4),
                            leftMargin=10*mm, rightMargin=10*mm,
                            topMargin=10*mm, bottomMargin=10*mm,
                            title=f'Preoperacional {last.plate} {week}')
    styles = getSampleStyleSheet()

    data = _grid(records)
    table = Table(data, colWidths=[60*mm] + [(277 - 60) / (NCOLS - 1) * mm] * (NCOLS - 1),
                  repeatRows=2)
    style = [
        ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('FONTSIZE', (0, 0), (-1, -1), 5),
        ('TOPPADDING', (0, 0), (-1, -1), 0.5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 0.5),
        ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
        ('BACKGROUND', (0, 0), (-1, 1), colors.Color(0.78, 0.78, 0.78)),
        ('SPAN', (0, 0), (0, 1)),
    ]
    for i in range(len(DAY_LABELS)):
        col = 1 + 3 * i
        style.append(('SPAN', (col, 0), (col + 2, 0)))
    for r, row in enumerate(data[2:], start=2):
        if row[0] in SECTION_TITLES:
            style += [('SPAN', (0, r), (-1, r)),
                      ('BACKGROUND', (0, r), (-1, r), colors.Color(0.86, 0.86, 0.86)),
                      ('FONTNAME', (0, r), (-1, r), 'Helvetica-Bold')]
    table.setStyle(TableStyle(style))

    story = [
        Paragraph(TITLE, styles['Title']),
        Paragraph(escape(f'PLACA: {last.plate} | CONDUCTOR: {last.driver_name or "-"} | SEMANA: {week}'),
                  styles['Normal']),
        Spacer(1, 4*mm),
        table,
    ]
    doc.build(story)
    pdf = buf.getvalue()
    buf.close()
    return pdf
