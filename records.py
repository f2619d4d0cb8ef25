# records.py
import datetime as dt
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional

from checklist import DayBlock, Status, block_for, parse_date, week_id

logger = logging.getLogger(__name__)

DEFAULT_CITY = 'BARRANCABERMEJA'
FUEL_TYPES = ('GASOLINA', 'DIESEL', 'GAS', 'ELECTRICO')
LICENSE_CATEGORIES = ('A1', 'A2', 'B1', 'B2', 'B3', 'C1', 'C2', 'C3')

# record attribute -> JSON key in the stored blob
_TEXT_FIELDS = {
    'plate': 'placa',
    'driver_name': 'conductor',
    'city': 'ciudad',
    'vehicle_type': 'tipoVehiculo',
    'brand': 'marca',
    'model': 'modelo',
    'odometer_start': 'kmInicio',
    'fuel_type': 'combustible',
    'license_expiry': 'vencimientoLicencia',
    'sota_expiry': 'vencimientoSoat',
    'rtm_expiry': 'vencimientoRtm',
    'policy_expiry': 'vencimientoPoliza',
}


class RecordError(ValueError):
    pass


@dataclass(frozen=True)
class SignatureBlock:
    full_name: str = ''
    id_number: str = ''
    role: str = ''
    signed_at: str = ''
    image: Optional[str] = None  # PNG data URL from the signature pad

    def is_empty(self) -> bool:
        return not (self.full_name or self.id_number or self.image)

    def to_dict(self) -> dict:
        d = {'nombre': self.full_name, 'cedula': self.id_number,
             'cargo': self.role, 'fecha': self.signed_at}
        if self.image:
            d['imagen'] = self.image
        return d

    @classmethod
    def from_dict(cls, data) -> 'SignatureBlock':
        if not isinstance(data, Mapping):
            raise RecordError('signature block is not an object')
        return cls(
            full_name=str(data.get('nombre') or ''),
            id_number=str(data.get('cedula') or ''),
            role=str(data.get('cargo') or ''),
            signed_at=str(data.get('fecha') or ''),
            image=data.get('imagen') or None,
        )


@dataclass
class InspectionRecord:
    plate: str
    date: dt.date
    driver_name: str = ''
    city: str = DEFAULT_CITY
    vehicle_type: str = ''
    brand: str = ''
    model: str = ''
    odometer_start: str = ''
    fuel_type: str = ''
    license_categories: frozenset = frozenset()
    license_expiry: str = ''
    sota_expiry: str = ''
    rtm_expiry: str = ''
    policy_expiry: str = ''
    responses: dict = field(default_factory=dict)    # item id -> Status
    signatures: dict = field(default_factory=dict)   # role -> SignatureBlock
    saved_at: str = ''

    @property
    def week_id(self) -> str:
        return week_id(self.date)

    @property
    def block(self) -> DayBlock:
        return block_for(self.date)

    @property
    def key(self) -> str:
        return record_key(self.plate, self.date)

    def stamped(self, when: Optional[dt.datetime] = None) -> 'InspectionRecord':
        when = when or dt.datetime.utcnow()
        return replace(self, saved_at=when.isoformat(timespec='seconds'))

    def to_dict(self) -> dict:
        d = {json_key: getattr(self, attr) for attr, json_key in _TEXT_FIELDS.items()}
        d.update({
            'fecha': self.date.isoformat(),
            'weekId': self.week_id,
            'categoriasLicencia': sorted(self.license_categories),
            'respuestas': {str(k): Status(v).value for k, v in sorted(self.responses.items())},
            'firmas': {role: sig.to_dict() for role, sig in self.signatures.items()},
            'timestamp': self.saved_at,
        })
        return d

    @classmethod
    def from_dict(cls, data) -> 'InspectionRecord':
        if not isinstance(data, Mapping):
            raise RecordError('record is not an object')
        plate = str(data.get('placa') or '').strip()
        if not plate:
            raise RecordError('record has no plate')
        try:
            date = parse_date(data.get('fecha'))
        except ValueError as e:
            raise RecordError(f'bad record date: {e}') from None

        kwargs = {attr: str(data.get(json_key) or '') for attr, json_key in _TEXT_FIELDS.items()}
        kwargs['plate'] = plate
        kwargs['city'] = kwargs['city'] or DEFAULT_CITY

        categories = data.get('categoriasLicencia') or []
        if isinstance(categories, str):
            categories = [categories]
        kwargs['license_categories'] = frozenset(str(c).upper() for c in categories)

        kwargs['responses'] = parse_responses(data.get('respuestas') or {})

        signatures = {}
        raw_sigs = data.get('firmas') or {}
        if isinstance(raw_sigs, Mapping):
            for role, raw in raw_sigs.items():
                try:
                    signatures[str(role)] = SignatureBlock.from_dict(raw)
                except RecordError:
                    logger.warning('Dropping malformed %s signature for %s', role, plate)
        kwargs['signatures'] = signatures
        kwargs['saved_at'] = str(data.get('timestamp') or '')
        return cls(date=date, **kwargs)


def parse_responses(raw) -> dict:
    """item id -> Status; entries with a bad id or unknown status are dropped."""
    responses = {}
    if not isinstance(raw, Mapping):
        return responses
    for item_id, status in raw.items():
        try:
            responses[int(item_id)] = Status(status)
        except (TypeError, ValueError):
            continue
    return responses


def record_key(plate: str, date) -> str:
    return f'{plate}_{parse_date(date).isoformat()}'


def load_records(blobs: Mapping) -> dict:
    """Decode stored blobs, discarding anything malformed."""
    records = {}
    for key, blob in blobs.items():
        try:
            rec = InspectionRecord.from_dict(blob)
        except RecordError as e:
            logger.warning('Discarding stored record %s: %s', key, e)
            continue
        if rec.key != key:
            logger.warning('Discarding stored record %s: key does not match %s', key, rec.key)
            continue
        records[key] = rec
    return records


def week_group(records: Iterable[InspectionRecord], plate: str, week: str) -> list:
    """All records for ``plate`` in week ``week``, oldest first."""
    group = [r for r in records if r.plate == plate and r.week_id == week]
    return sorted(group, key=lambda r: r.date)


def completed_blocks(records: Iterable[InspectionRecord], plate: str, week: str) -> set:
    return {r.block for r in week_group(records, plate, week)}
