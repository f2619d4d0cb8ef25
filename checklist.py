# checklist.py
import datetime as dt
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import NamedTuple


# --------------------------- Status / Days --------------------------
class Status(str, Enum):
    COMPLIANT = 'C'
    NON_COMPLIANT = 'NC'
    NOT_APPLICABLE = 'NA'


class DayBlock(IntEnum):
    """Monday-first day slot used for every coordinate lookup."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        return DAY_LABELS[self]


DAY_LABELS = ('LUNES', 'MARTES', 'MIERCOLES', 'JUEVES', 'VIERNES', 'SABADO', 'DOMINGO')

# native weekday numbering is Sunday-first (0=Sunday .. 6=Saturday)
NATIVE_TO_BLOCK = {1: DayBlock.MONDAY, 2: DayBlock.TUESDAY, 3: DayBlock.WEDNESDAY,
                   4: DayBlock.THURSDAY, 5: DayBlock.FRIDAY, 6: DayBlock.SATURDAY,
                   0: DayBlock.SUNDAY}
BLOCK_TO_NATIVE = {block: native for native, block in NATIVE_TO_BLOCK.items()}

NATIVE_DAY_NAMES = ('Domingo', 'Lunes', 'Martes', 'Miércoles', 'Jueves', 'Viernes', 'Sábado')
NATIVE_DAY_SHORT = ('D', 'L', 'M', 'X', 'J', 'V', 'S')

MONTHS = ('ENERO', 'FEBRERO', 'MARZO', 'ABRIL', 'MAYO', 'JUNIO', 'JULIO',
          'AGOSTO', 'SEPTIEMBRE', 'OCTUBRE', 'NOVIEMBRE', 'DICIEMBRE')


def to_block(native_weekday: int) -> DayBlock:
    """Sunday-first weekday number -> Monday-first DayBlock."""
    try:
        return NATIVE_TO_BLOCK[native_weekday]
    except KeyError:
        raise ValueError(f'weekday out of range: {native_weekday!r}') from None


def from_block(block: DayBlock) -> int:
    return BLOCK_TO_NATIVE[DayBlock(block)]


def parse_date(value) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip()[:10])
    raise ValueError(f'not a date: {value!r}')


def native_weekday(value) -> int:
    return parse_date(value).isoweekday() % 7


def block_for(value) -> DayBlock:
    return to_block(native_weekday(value))


def week_id(value) -> str:
    """ISO date of the Monday on or before ``value``.

    Datetimes are reduced to their calendar date before any arithmetic, so the
    time of day (midnight, noon, ...) cannot move the result to another week.
    """
    day = parse_date(value)
    monday = day - dt.timedelta(days=int(block_for(day)))
    return monday.isoformat()


def week_dates(value) -> list[dt.date]:
    monday = parse_date(week_id(value))
    return [monday + dt.timedelta(days=i) for i in range(7)]


def format_cell_date(value) -> str:
    day = parse_date(value)
    return f'{day.day}/{day.month}/{day.year}'


def month_year_label(value) -> str:
    day = parse_date(value)
    return f'{MONTHS[day.month - 1]} {day.year}'


# --------------------------- Catalog --------------------------------
class ChecklistItem(NamedTuple):
    id: int
    label: str
    section_id: str


class Section(NamedTuple):
    id: str
    title: str
    items: tuple


def _section(sid: str, title: str, items: list[tuple]) -> Section:
    return Section(sid, title, tuple(ChecklistItem(i, label, sid) for i, label in items))


SECTIONS = (
    _section('A', 'A. DOCUMENTACIÓN', [
        (1, 'TARJETA DE PROPIEDAD'), (2, 'LICENCIA DE CONDUCCIÓN'),
        (3, 'SEGURO OBLIGATORIO'), (4, 'SEGURO TODO RIESGO'), (5, 'CERTIFICADO DE GASES'),
    ]),
    _section('B', 'B. ESTADO GENERAL', [
        (6, 'LLANTAS'), (7, 'DELANTERA IZQUIERDA'), (8, 'TRASERA DERECHA'),
        (9, 'TRASERA IZQUIERDA'), (10, 'REPUESTO'),
    ]),
    _section('C', 'C. ESTADO GENERAL DE LUCES', [
        (11, 'PRINCIPAL CARRETERA'), (12, 'PRINCIPAL DE CRUCE'), (13, 'ESTACIONARIAS'),
        (14, 'DIRECCIONALES'), (15, 'FRENO'), (16, 'REVERSA'),
    ]),
    _section('D', 'D. SISTEMA DE MOTOR', [
        (17, 'NIVEL ACEITE MOTOR'), (18, 'REFRIGERANTE'), (19, 'ACEITE HIDRAUICO'),
        (20, 'LIQUIDO DE FRENOS'),
    ]),
    _section('E', 'E. OTROS Y EQUIPO CARRETERAS', [
        (21, 'LIMPIABRISAS'), (22, 'ESPEJOS'), (23, 'PITO O BOCINA'), (24, 'ALARMA DE REVERSA'),
        (25, 'APOYA CABEZAS'), (26, 'CINTURONES DE SEGURIDAD'), (27, 'JIRO FARO'),
        (28, 'CRUCETA'), (29, 'TACOS'), (30, 'HERRAMIENTA'), (31, 'GATO'), (32, 'LINTERNA'),
        (33, 'CONOS'), (34, 'CHALECO'), (35, 'EXTINTOR'), (36, 'BOTIQUÍN'), (37, 'LOGOTIPOS'),
    ]),
    _section('F', 'F. ELEMENTOS DE SEGURIDAD INDUSTRIAL', [
        (38, 'CASCO DE PROTECCIÓN'), (39, 'CHALECO'), (40, 'CALZADO INDUSTRIAL'), (41, 'GUANTES'),
    ]),
    _section('G', 'G. SISTEMA SUSPENSIÓN', [
        (42, 'RÓTULAS'), (43, 'MUELLES'), (44, 'AMORTIGUADORES'), (45, 'RODAMIENTOS'),
        (46, 'TERMINALES DIREC'), (47, 'BARRA ESTABILIZ'),
    ]),
    _section('H', 'H. SISTEMA DE FRENOS', [
        (48, 'EMERGENCIA'), (49, 'PEDAL DE FRENO'), (50, 'PASTILLA Y DISCO'), (51, 'BANDAS'),
        (52, 'DE PARQUEO'), (53, 'BOMBA DE FRENO'), (54, 'BOSTER'),
    ]),
    _section('I', 'I. SISTEMA DE TRANSMISION', [
        (55, 'CRUCETAS'), (56, 'RODAMIENTOS'), (57, 'PEDAL DE EMBRAGUE'),
        (58, 'ACEITE TRANSMISIÓN'), (59, 'CADENA DE CARDAN'),
    ]),
    _section('J', 'J. SISTEMA DE CARGA', [
        (60, 'VOLCO'), (61, 'COMPUERTA'), (62, 'COBERTURA DE MATERIAL'),
    ]),
)

ITEMS_BY_ID = MappingProxyType({item.id: item for section in SECTIONS for item in section.items})
