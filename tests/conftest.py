from __future__ import annotations

import base64
import datetime as dt
import io
import os
from pathlib import Path

# configure the Flask app before anything imports it
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['VEHICLES_PATH'] = str(Path(__file__).parent / 'data' / 'vehicles.csv')
os.environ['RENDER_URL'] = ''

import pytest
from openpyxl import Workbook
from PIL import Image

from checklist import Status
from projection import load_template
from records import InspectionRecord, SignatureBlock


def build_template() -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = 'PREOPERACIONAL'
    ws['A1'] = 'INSPECCIÓN PREOPERACIONAL SEMANAL'
    ws['B5'] = 'CIUDAD:'
    ws['R5'] = 'PLACA:'
    ws.merge_cells('S5:U5')
    ws['B6'] = 'CONDUCTOR:'
    ws['D13'] = 'ÍTEM'
    ws['A14'] = 'TARJETA DE PROPIEDAD'
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def signature_png() -> str:
    buf = io.BytesIO()
    Image.new('RGBA', (300, 100), 'white').save(buf, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buf.getvalue()).decode('ascii')


@pytest.fixture
def template_bytes() -> bytes:
    return build_template()


@pytest.fixture
def worksheet(template_bytes):
    return load_template(template_bytes).worksheets[0]


@pytest.fixture
def make_record():
    def _make(plate='ABC123', date='2024-03-11', **kwargs) -> InspectionRecord:
        kwargs.setdefault('driver_name', 'JUAN PEREZ')
        kwargs.setdefault('responses', {1: Status.COMPLIANT})
        return InspectionRecord(plate=plate, date=dt.date.fromisoformat(date), **kwargs)
    return _make


@pytest.fixture
def driver_signature():
    return SignatureBlock(full_name='JUAN PEREZ', id_number='1098765432',
                          role='CONDUCTOR', signed_at='11/03/2024 06:30')


@pytest.fixture
def webapp():
    import app as webapp

    webapp.app.config.update(TESTING=True, RENDER_URL='')
    with webapp.app.app_context():
        webapp.db.drop_all()
        webapp.db.create_all()
    webapp.memory_store['template'] = None
    webapp.memory_store['records'] = {}
    webapp.app.extensions.pop('vehicle_catalog', None)
    webapp.app.extensions.pop('render_client', None)
    return webapp


@pytest.fixture
def client(webapp):
    with webapp.app.test_client() as c:
        yield c
