# app.py
import os
import io
import json
import base64
import binascii
import datetime as dt
from dataclasses import replace

import click
from flask import (
    Flask, request, redirect, url_for, render_template_string,
    flash, jsonify, send_file
)
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from checklist import (
    SECTIONS, DayBlock, Status, NATIVE_DAY_SHORT, from_block,
    parse_date, week_dates, week_id
)
from coordinates import unmapped_items, unmapped_rows
from exporting import (
    ExportError, export_pdf, export_summary_pdf, export_workbook, pdf_filename
)
from projection import TemplateError, load_template
from records import (
    FUEL_TYPES, LICENSE_CATEGORIES, InspectionRecord, SignatureBlock,
    completed_blocks, load_records, parse_responses, week_group
)
from renderer import RenderClient
from vehicles import load_catalog, normalize_plate

# --------------------------- App / Config ---------------------------
app = Flask(__name__)

app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret')
app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
    'DATABASE_URL', 'sqlite:///preop.db'
).replace('postgres://', 'postgresql://')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['MAX_CONTENT_LENGTH'] = int(os.getenv('MAX_TEMPLATE_MB', '16')) * 1024 * 1024

# spreadsheet -> PDF conversion service; empty means draw the summary locally
app.config['RENDER_URL'] = os.getenv('RENDER_URL', '')
app.config['RENDER_TIMEOUT'] = float(os.getenv('RENDER_TIMEOUT', '120'))
app.config['VEHICLES_PATH'] = os.getenv(
    'VEHICLES_PATH', os.path.join(os.path.dirname(__file__), 'data', 'vehicles.csv')
)
DEFAULT_CITY = os.getenv('DEFAULT_CITY', 'BARRANCABERMEJA')

db = SQLAlchemy(app)

# Session-only copies kept when the database refuses a write
memory_store = {
    'template': None,
    'records': {},
}

# --------------------------- Models --------------------------------
class StoredTemplate(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255))
    data_b64 = db.Column(db.Text, nullable=False)
    uploaded_at = db.Column(db.DateTime, default=dt.datetime.utcnow)

class StoredInspection(db.Model):
    key = db.Column(db.String(80), primary_key=True)  # "{plate}_{isoDate}"
    payload = db.Column(db.Text, nullable=False)      # InspectionRecord JSON
    updated_at = db.Column(db.DateTime, default=dt.datetime.utcnow)

with app.app_context():
    db.create_all()

# --------------------------- Storage --------------------------------
def get_template():
    if memory_store['template'] is not None:
        return memory_store['template']
    row = db.session.get(StoredTemplate, 1)
    if row is None:
        return None
    try:
        return base64.b64decode(row.data_b64, validate=True)
    except (binascii.Error, ValueError):
        app.logger.warning('Discarding stored template: not valid base64')
        db.session.delete(row)
        db.session.commit()
        return None

def save_template(data: bytes, filename: str = '') -> bool:
    row = db.session.get(StoredTemplate, 1) or StoredTemplate(id=1)
    row.filename = filename
    row.data_b64 = base64.b64encode(data).decode('ascii')
    row.uploaded_at = dt.datetime.utcnow()
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception('Failed to persist template')
        memory_store['template'] = data
        return False
    memory_store['template'] = None
    return True

def clear_template():
    memory_store['template'] = None
    StoredTemplate.query.delete()
    db.session.commit()

def get_records() -> dict:
    blobs = {}
    for row in StoredInspection.query.all():
        blobs[row.key] = row.payload
    blobs.update(memory_store['records'])

    decoded = {}
    for key, payload in blobs.items():
        try:
            decoded[key] = json.loads(payload)
        except (TypeError, ValueError):
            app.logger.warning('Discarding stored record %s: not JSON', key)
    return load_records(decoded)

def save_record(rec: InspectionRecord) -> bool:
    payload = json.dumps(rec.to_dict(), ensure_ascii=False)
    row = db.session.get(StoredInspection, rec.key) or StoredInspection(key=rec.key)
    row.payload = payload
    row.updated_at = dt.datetime.utcnow()
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception('Failed to persist inspection %s', rec.key)
        memory_store['records'][rec.key] = payload
        return False
    memory_store['records'].pop(rec.key, None)
    app.logger.info('Saved inspection %s', rec.key)
    return True

# --------------------------- Helpers --------------------------------
def vehicle_catalog():
    catalog = app.extensions.get('vehicle_catalog')
    if catalog is None:
        catalog = app.extensions['vehicle_catalog'] = load_catalog(app.config['VEHICLES_PATH'])
    return catalog

def renderer():
    url = app.config.get('RENDER_URL')
    if not url:
        return None
    client = app.extensions.get('render_client')
    if client is None or client.url != url:
        client = app.extensions['render_client'] = RenderClient(
            url, timeout=app.config['RENDER_TIMEOUT'])
    return client

def today() -> dt.date:
    return dt.date.today()

def _form_date(value):
    try:
        return parse_date(value) if value else today()
    except ValueError:
        return today()

def _text(form, name) -> str:
    return (form.get(name) or '').strip().upper()

def _signature(form, prefix: str, role: str):
    name = (form.get(f'{prefix}_nombre') or '').strip()
    id_number = (form.get(f'{prefix}_cedula') or '').strip()
    image = form.get(f'{prefix}_imagen') or ''
    if not image.startswith('data:image/png;base64,'):
        image = None
    if not (name or id_number or image):
        return None
    signed_at = (form.get(f'{prefix}_fecha') or '').strip() or \
        dt.datetime.now().strftime('%d/%m/%Y %H:%M')
    return SignatureBlock(full_name=name.upper(), id_number=id_number,
                          role=_text(form, f'{prefix}_cargo') or role,
                          signed_at=signed_at, image=image)

def record_from_form(form) -> InspectionRecord:
    """Build the day's record from the submitted form (saved or not)."""
    plate = normalize_plate(form.get('placa'))
    rec = InspectionRecord(
        plate=plate,
        date=_form_date(form.get('fecha')),
        driver_name=_text(form, 'conductor'),
        city=_text(form, 'ciudad') or DEFAULT_CITY,
        vehicle_type=_text(form, 'tipoVehiculo'),
        brand=_text(form, 'marca'),
        model=_text(form, 'modelo'),
        odometer_start=_text(form, 'kmInicio'),
        fuel_type=_text(form, 'combustible'),
        license_categories=frozenset(
            c.upper() for c in form.getlist('categoriasLicencia') if c.upper() in LICENSE_CATEGORIES
        ),
        license_expiry=(form.get('vencimientoLicencia') or '').strip(),
        sota_expiry=(form.get('vencimientoSoat') or '').strip(),
        rtm_expiry=(form.get('vencimientoRtm') or '').strip(),
        policy_expiry=(form.get('vencimientoPoliza') or '').strip(),
        responses=parse_responses({
            k.split('_', 1)[1]: v for k, v in form.items() if k.startswith('item_')
        }),
    )
    sigs = {}
    for role, prefix, default_role in (('driver', 'firma_conductor', 'CONDUCTOR'),
                                       ('safety_officer', 'firma_sst', 'RESPONSABLE SST')):
        sig = _signature(form, prefix, default_role)
        if sig is not None:
            sigs[role] = sig
    rec.signatures = sigs
    autofill(rec)
    return rec

def autofill(rec: InspectionRecord) -> None:
    vehicle = vehicle_catalog().find(rec.plate)
    if vehicle is None:
        return
    rec.vehicle_type = rec.vehicle_type or vehicle.family.upper()
    rec.brand = rec.brand or vehicle.brand.upper()
    rec.model = rec.model or vehicle.description.upper()

def _download(result):
    return send_file(io.BytesIO(result.content), mimetype=result.mimetype,
                     as_attachment=True, download_name=secure_filename(result.filename))

def run_export(kind: str, plate: str, current_date, fallback=None):
    """Returns a download response, or None after flashing why not."""
    records = get_records()
    client = renderer() if kind == 'pdf' else None
    try:
        if kind == 'summary':
            result = export_summary_pdf(records, plate, current_date)
        elif kind == 'pdf' and client is None:
            result = export_summary_pdf(records, plate, current_date,
                                        filename=pdf_filename(plate, current_date))
        elif kind == 'pdf':
            result = export_pdf(get_template(), records, plate, current_date, client)
        else:
            result = export_workbook(get_template(), records, plate, current_date,
                                     consolidated=(kind == 'week'), fallback=fallback)
    except (ExportError, TemplateError) as e:
        app.logger.warning('Export %s for %s failed: %s', kind, plate, e)
        flash(str(e))
        return None
    return _download(result)

def _week_view(plate: str, current_date):
    week = week_id(current_date)
    done = completed_blocks(get_records().values(), plate, week) if plate else set()
    return [{
        'date': d.isoformat(),
        'short': NATIVE_DAY_SHORT[from_block(DayBlock(i))],
        'done': DayBlock(i) in done,
        'current': d == current_date,
    } for i, d in enumerate(week_dates(current_date))]

def _render_form(rec: InspectionRecord):
    return render_template_string(
        TPL_FORM, rec=rec, SECTIONS=SECTIONS, Status=Status,
        FUEL_TYPES=FUEL_TYPES, LICENSE_CATEGORIES=LICENSE_CATEGORIES,
        week=_week_view(rec.plate, rec.date), week_id=rec.week_id,
    )

# --------------------------- Routes --------------------------------
@app.route('/')
def home():
    row = db.session.get(StoredTemplate, 1)
    return render_template_string(
        TPL_HOME,
        has_template=get_template() is not None,
        template_name=row.filename if row else '',
        today=today().isoformat(),
    )

@app.route('/template', methods=['POST'])
def upload_template():
    f = request.files.get('plantilla')
    if not f or not f.filename:
        flash('Seleccione un archivo .xlsx')
        return redirect(url_for('home'))
    data = f.read()
    try:
        load_template(data)
    except TemplateError as e:
        flash(str(e))
        return redirect(url_for('home'))
    if save_template(data, f.filename):
        flash('✅ Plantilla cargada correctamente')
    else:
        flash('Plantilla cargada (solo esta sesión)')
    return redirect(url_for('home'))

@app.route('/template/clear', methods=['POST'])
def delete_template():
    clear_template()
    return redirect(url_for('home'))

@app.route('/inspection', methods=['GET', 'POST'])
def inspection():
    if request.method == 'POST':
        return submit_inspection()

    plate = normalize_plate(request.args.get('placa'))
    current = _form_date(request.args.get('fecha'))
    records = get_records() if plate else {}
    rec = records.get(f'{plate}_{current.isoformat()}')
    if rec is None:
        rec = carry_over(records, plate, current)
    return _render_form(rec)

def carry_over(records: dict, plate: str, current) -> InspectionRecord:
    """New day form: header and signatures from the latest day of the week."""
    week = week_group(records.values(), plate, week_id(current)) if plate else []
    if week:
        rec = replace(week[-1], date=current, odometer_start='', responses={}, saved_at='')
    else:
        rec = InspectionRecord(plate=plate, date=current, city=DEFAULT_CITY)
    if plate:
        autofill(rec)
    return rec

def submit_inspection():
    action = request.form.get('action', 'save')
    rec = record_from_form(request.form)

    if action == 'save':
        if not rec.plate:
            flash('Por favor ingrese la placa del vehículo')
            return _render_form(rec)
        if save_record(rec.stamped()):
            flash('✅ Día guardado correctamente')
        else:
            flash('Error guardando datos (disponible solo en esta sesión)')
            return _render_form(rec)
        return redirect(url_for('inspection', placa=rec.plate, fecha=rec.date.isoformat()))

    kind = {'export_day': 'day', 'export_week': 'week',
            'export_pdf': 'pdf', 'export_summary': 'summary'}.get(action)
    if kind is None:
        flash('Acción desconocida')
        return _render_form(rec)
    resp = run_export(kind, rec.plate, rec.date, fallback=rec)
    return resp if resp is not None else _render_form(rec)

@app.route('/export/<kind>', methods=['POST'])
def quick_export(kind):
    if kind not in ('day', 'week', 'pdf', 'summary'):
        flash('Acción desconocida')
        return redirect(url_for('home'))
    plate = normalize_plate(request.form.get('placa'))
    resp = run_export(kind, plate, _form_date(request.form.get('fecha')))
    return resp if resp is not None else redirect(url_for('home'))

@app.route('/vehicles/lookup')
def vehicle_lookup():
    v = vehicle_catalog().find(request.args.get('placa', ''))
    if v is None:
        return jsonify(found=False)
    return jsonify(found=True, vehicle=v._asdict())

@app.route('/vehicles/suggest')
def vehicle_suggest():
    return jsonify([v._asdict() for v in vehicle_catalog().suggest(request.args.get('q', ''))])

@app.route('/api/health')
def health():
    client = renderer()
    return {
        'status': 'ok',
        'records': StoredInspection.query.count(),
        'renderer': client.health() if client else None,
    }

# --------------------------- CLI -------------------------------------
@app.cli.command('init-db')
def init_db():
    db.create_all()
    print('DB initialised ✅')

@app.cli.command('check-config')
def check_config():
    missing, orphans = unmapped_items(), unmapped_rows()
    if missing:
        print(f'Items without a row: {missing}')
    if orphans:
        print(f'Rows without an item: {orphans}')
    if not (missing or orphans):
        print('Coordinate table matches the checklist ✅')

@app.cli.command('import-vehicles')
@click.argument('path')
def import_vehicles(path):
    catalog = load_catalog(path)
    app.extensions['vehicle_catalog'] = catalog
    print(f'{len(catalog)} vehicles loaded from {path}')

# --------------------------- Templates ------------------------------
TPL_BASE = r"""
<!doctype html>
<html lang="es">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title or 'Preoperacional' }}</title>
  <style>
    body{font-family: system-ui, -apple-system, Segoe UI, Roboto, Ubuntu, Cantarell, 'Helvetica Neue', Arial, sans-serif; margin:0; background:#f1f5f9; color:#0f172a}
    .wrap{max-width:900px;margin:0 auto;padding:16px}
    .card{background:#fff;border-radius:12px;margin:12px 0;padding:16px;box-shadow:0 2px 4px rgba(0,0,0,.1)}
    .hero{background:#1e40af;color:#fff;text-align:center}
    input,select{width:100%;padding:10px;border-radius:8px;border:1px solid #cbd5e1;box-sizing:border-box}
    label{display:block;margin:6px 0 4px;color:#475569;font-size:13px}
    .row{display:flex;gap:12px;flex-wrap:wrap}
    .col{flex:1 1 200px}
    .btn{background:#1e40af;color:white;border:0;border-radius:10px;padding:10px 14px;cursor:pointer;font-weight:600}
    .btn.green{background:#059669}
    .btn.alt{background:#e2e8f0;color:#0f172a}
    .btn.red{background:#fee2e2;color:#dc2626}
    .pill{display:inline-block;width:34px;text-align:center;padding:6px 0;border-radius:999px;border:1px solid #cbd5e1;text-decoration:none;color:#0f172a}
    .pill.done{background:#dcfce7;border-color:#16a34a}
    .pill.current{outline:2px solid #1e40af}
    .item{display:grid;grid-template-columns:1fr repeat(3,52px);gap:6px;align-items:center;padding:4px 0;border-bottom:1px solid #e2e8f0}
    .item label{margin:0}
    h1,h2,h3,h4{margin:0 0 8px}
    small{color:#64748b}
    canvas.sig{border:1px dashed #94a3b8; width:100%; height:140px; background:#fff}
    .flash{border-left:4px solid #dc2626}
  </style>
</head>
<body>
<div class="wrap">
  {% with msgs = get_flashed_messages() %}
  {% if msgs %}<div class="card flash">
    {% for m in msgs %}<div>{{ m }}</div>{% endfor %}
  </div>{% endif %}{% endwith %}
  {{ content|safe }}
</div>
</body></html>
"""

TPL_HOME = """
{% set title='Preoperacional' %}
{% set content %}
<div class="card hero">
  <h2>🚛 PREOPERACIONAL</h2>
  <small style="color:#dbeafe">Inspección vehicular semanal</small>
</div>
<div class="card">
  <h4>📄 PLANTILLA EXCEL</h4>
  {% if has_template %}
    <form method="post" action="{{ url_for('delete_template') }}" class="row">
      <div class="col">✅ Plantilla cargada <small>{{ template_name }}</small></div>
      <button class="btn red">🗑️ Quitar</button>
    </form>
  {% else %}
    <form method="post" action="{{ url_for('upload_template') }}" enctype="multipart/form-data">
      <input type="file" name="plantilla" accept=".xlsx" required>
      <div style="margin-top:8px"><button class="btn">📤 Cargar plantilla</button></div>
    </form>
  {% endif %}
</div>
<a class="btn" style="display:block;text-align:center;text-decoration:none" href="{{ url_for('inspection') }}">▶️ INICIAR INSPECCIÓN</a>
<div class="card">
  <h4>🔍 CONSULTA RÁPIDA</h4>
  <form method="post">
    <div class="row">
      <div class="col"><label>Placa</label><input name="placa" placeholder="PLACA DEL VEHÍCULO" required></div>
      <div class="col"><label>Fecha de la semana</label><input name="fecha" type="date" value="{{ today }}"></div>
    </div>
    <div class="row" style="margin-top:10px">
      <button class="btn green" formaction="{{ url_for('quick_export', kind='week') }}" {% if not has_template %}disabled{% endif %}>Excel semana</button>
      <button class="btn" formaction="{{ url_for('quick_export', kind='pdf') }}" {% if not has_template %}disabled{% endif %}>PDF</button>
      <button class="btn alt" formaction="{{ url_for('quick_export', kind='summary') }}">Resumen PDF</button>
    </div>
  </form>
</div>
{% endset %}
""" + TPL_BASE

TPL_FORM = """
{% set title='Inspección ' ~ rec.plate %}
{% set content %}
<form method="post" action="{{ url_for('inspection') }}">
<div class="card">
  <h3>Vehículo y conductor</h3>
  <div class="row">
    <div class="col">
      <label>Placa</label>
      <input name="placa" id="placa" value="{{ rec.plate }}" list="placas" autocomplete="off">
      <datalist id="placas"></datalist>
    </div>
    <div class="col"><label>Fecha</label><input name="fecha" type="date" value="{{ rec.date.isoformat() }}"></div>
    <div class="col"><label>Conductor</label><input name="conductor" value="{{ rec.driver_name }}"></div>
    <div class="col"><label>Ciudad</label><input name="ciudad" value="{{ rec.city }}"></div>
  </div>
  <div class="row">
    <div class="col"><label>Tipo de vehículo</label><input name="tipoVehiculo" id="tipoVehiculo" value="{{ rec.vehicle_type }}"></div>
    <div class="col"><label>Marca</label><input name="marca" id="marca" value="{{ rec.brand }}"></div>
    <div class="col"><label>Modelo</label><input name="modelo" id="modelo" value="{{ rec.model }}"></div>
    <div class="col"><label>Km inicio</label><input name="kmInicio" inputmode="numeric" value="{{ rec.odometer_start }}"></div>
  </div>
  <div class="row">
    <div class="col">
      <label>Combustible</label>
      <select name="combustible">
        <option value=""></option>
        {% for f in FUEL_TYPES %}<option {% if f == rec.fuel_type %}selected{% endif %}>{{ f }}</option>{% endfor %}
      </select>
    </div>
    <div class="col">
      <label>Categorías de licencia</label>
      {% for c in LICENSE_CATEGORIES %}
        <label style="display:inline-block;margin-right:8px"><input type="checkbox" style="width:auto" name="categoriasLicencia" value="{{ c }}" {% if c in rec.license_categories %}checked{% endif %}> {{ c }}</label>
      {% endfor %}
    </div>
  </div>
  <div class="row">
    <div class="col"><label>Vence licencia</label><input name="vencimientoLicencia" type="date" value="{{ rec.license_expiry }}"></div>
    <div class="col"><label>Vence SOAT</label><input name="vencimientoSoat" type="date" value="{{ rec.sota_expiry }}"></div>
    <div class="col"><label>Vence RTM</label><input name="vencimientoRtm" type="date" value="{{ rec.rtm_expiry }}"></div>
    <div class="col"><label>Vence póliza</label><input name="vencimientoPoliza" type="date" value="{{ rec.policy_expiry }}"></div>
  </div>
</div>

<div class="card">
  <h4>Semana {{ week_id }}</h4>
  {% for d in week %}
    <a class="pill {% if d.done %}done{% endif %} {% if d.current %}current{% endif %}"
       href="{{ url_for('inspection', placa=rec.plate, fecha=d.date) }}">{{ d.short }}</a>
  {% endfor %}
</div>

<div class="card">
  <div class="item" style="font-weight:600"><div>Ítem</div><div>C</div><div>NC</div><div>NA</div></div>
  {% for section in SECTIONS %}
    <h4 style="margin-top:12px">{{ section.title }}</h4>
    {% for item in section.items %}
    <div class="item">
      <div>{{ item.label }}</div>
      {% for s in Status %}
      <label><input type="radio" style="width:auto" name="item_{{ item.id }}" value="{{ s.value }}" {% if rec.responses.get(item.id) == s %}checked{% endif %}></label>
      {% endfor %}
    </div>
    {% endfor %}
  {% endfor %}
</div>

{% for prefix, role, title in [('firma_conductor', 'driver', 'Firma del conductor'), ('firma_sst', 'safety_officer', 'Firma responsable SST')] %}
{% set sig = rec.signatures.get(role) %}
<div class="card">
  <h4>{{ title }}</h4>
  <div class="row">
    <div class="col"><label>Nombre</label><input name="{{ prefix }}_nombre" value="{{ sig.full_name if sig else '' }}"></div>
    <div class="col"><label>Cédula</label><input name="{{ prefix }}_cedula" value="{{ sig.id_number if sig else '' }}"></div>
    <div class="col"><label>Cargo</label><input name="{{ prefix }}_cargo" value="{{ sig.role if sig else '' }}"></div>
  </div>
  <input type="hidden" name="{{ prefix }}_fecha" id="{{ prefix }}_fecha" value="{{ sig.signed_at if sig else '' }}">
  <input type="hidden" name="{{ prefix }}_imagen" id="{{ prefix }}_imagen" value="{{ sig.image if sig and sig.image else '' }}">
  <canvas class="sig" data-target="{{ prefix }}_imagen" data-stamp="{{ prefix }}_fecha"></canvas>
  <button type="button" class="btn alt" onclick="sigClear('{{ prefix }}_imagen')">Borrar</button>
</div>
{% endfor %}

<div class="card row">
  <button class="btn" name="action" value="save">💾 Guardar día</button>
  <button class="btn green" name="action" value="export_day">Excel día</button>
  <button class="btn green" name="action" value="export_week">Excel semana</button>
  <button class="btn" name="action" value="export_pdf">PDF</button>
  <button class="btn alt" name="action" value="export_summary">Resumen PDF</button>
  <a class="btn alt" style="text-decoration:none" href="{{ url_for('home') }}">Inicio</a>
</div>
</form>

<script>
  // plate autofill / suggestions
  const placa = document.getElementById('placa');
  placa.addEventListener('input', async () => {
    const q = placa.value.replace(/\\s/g, '').toUpperCase();
    const list = document.getElementById('placas');
    const sug = await (await fetch('{{ url_for('vehicle_suggest') }}?q=' + encodeURIComponent(q))).json();
    list.innerHTML = sug.map(v => `<option value="${v.plate}">${v.brand} ${v.description}</option>`).join('');
    if (q.length < 5) return;
    const r = await (await fetch('{{ url_for('vehicle_lookup') }}?placa=' + encodeURIComponent(q))).json();
    if (!r.found) return;
    document.getElementById('tipoVehiculo').value = r.vehicle.family.toUpperCase();
    document.getElementById('marca').value = r.vehicle.brand.toUpperCase();
    document.getElementById('modelo').value = r.vehicle.description.toUpperCase();
  });

  // very small signature pads
  const pads = {};
  document.querySelectorAll('canvas.sig').forEach(canvas => {
    const ctx = canvas.getContext('2d');
    const r = canvas.getBoundingClientRect();
    canvas.width = r.width; canvas.height = r.height;
    ctx.lineWidth = 2; ctx.lineJoin = 'round'; ctx.strokeStyle = '#111';
    const pad = pads[canvas.dataset.target] = {canvas, ctx, dirty: false};
    let drawing = false; let last = {x: 0, y: 0};
    function pos(ev){ const rect = canvas.getBoundingClientRect();
      const e = ev.touches ? ev.touches[0] : ev; return {x: e.clientX - rect.left, y: e.clientY - rect.top}; }
    function draw(e){ if (!drawing) return; const p = pos(e); ctx.beginPath(); ctx.moveTo(last.x, last.y);
      ctx.lineTo(p.x, p.y); ctx.stroke(); last = p; e.preventDefault();
      if (!pad.dirty) { pad.dirty = true; document.getElementById(canvas.dataset.stamp).value = ''; } }
    canvas.addEventListener('mousedown', e => { drawing = true; last = pos(e); });
    canvas.addEventListener('touchstart', e => { drawing = true; last = pos(e); });
    canvas.addEventListener('mousemove', draw); canvas.addEventListener('touchmove', draw, {passive: false});
    window.addEventListener('mouseup', () => drawing = false); window.addEventListener('touchend', () => drawing = false);
  });
  function sigClear(target){ const pad = pads[target]; pad.ctx.clearRect(0, 0, pad.canvas.width, pad.canvas.height);
    pad.dirty = false; document.getElementById(target).value = '';
    document.getElementById(pad.canvas.dataset.stamp).value = ''; }
  window.sigClear = sigClear;

  document.querySelector('form').addEventListener('submit', () => {
    Object.entries(pads).forEach(([target, pad]) => {
      if (pad.dirty) document.getElementById(target).value = pad.canvas.toDataURL('image/png');
    });
  });
</script>
{% endset %}
""" + TPL_BASE

# --------------------------- Main -----------------------------------
if __name__ == '__main__':
    port = int(os.getenv('PORT', '5001'))
    app.run(host='0.0.0.0', port=port, debug=True)
