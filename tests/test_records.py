from __future__ import annotations

import datetime as dt

import pytest

from checklist import DayBlock, Status
from records import (
    InspectionRecord,
    RecordError,
    completed_blocks,
    load_records,
    record_key,
    week_group,
)


def test_record_key_uses_iso_date() -> None:
    assert record_key('ABC123', dt.date(2024, 3, 4)) == 'ABC123_2024-03-04'
    assert record_key('ABC123', '2024-03-04') == 'ABC123_2024-03-04'


def test_derived_week_and_block(make_record) -> None:
    rec = make_record(date='2024-03-14')
    assert rec.week_id == '2024-03-11'
    assert rec.block == DayBlock.THURSDAY
    assert rec.key == 'ABC123_2024-03-14'


def test_stored_blob_survives_a_round_trip(make_record, driver_signature) -> None:
    rec = make_record(
        fuel_type='DIESEL',
        license_categories=frozenset({'B1', 'C2'}),
        responses={1: Status.COMPLIANT, 7: Status.NON_COMPLIANT, 30: Status.NOT_APPLICABLE},
        signatures={'driver': driver_signature},
    ).stamped(dt.datetime(2024, 3, 11, 6, 45))
    blob = rec.to_dict()
    assert blob['placa'] == 'ABC123'
    assert blob['weekId'] == '2024-03-11'
    assert blob['respuestas'] == {'1': 'C', '7': 'NC', '30': 'NA'}
    assert InspectionRecord.from_dict(blob) == rec


def test_from_dict_drops_bad_responses() -> None:
    rec = InspectionRecord.from_dict({
        'placa': 'ABC123', 'fecha': '2024-03-11',
        'respuestas': {'1': 'C', 'x': 'NC', '3': 'ZZ', '4': None},
    })
    assert rec.responses == {1: Status.COMPLIANT}


def test_from_dict_defaults() -> None:
    rec = InspectionRecord.from_dict({'placa': 'ABC123', 'fecha': '2024-03-11'})
    assert rec.city == 'BARRANCABERMEJA'
    assert rec.signatures == {}
    assert rec.license_categories == frozenset()


@pytest.mark.parametrize('blob', [
    {'fecha': '2024-03-11'},
    {'placa': 'ABC123'},
    {'placa': 'ABC123', 'fecha': 'mañana'},
    ['not', 'a', 'record'],
])
def test_from_dict_rejects_unusable_blobs(blob) -> None:
    with pytest.raises(RecordError):
        InspectionRecord.from_dict(blob)


def test_malformed_signature_is_dropped() -> None:
    rec = InspectionRecord.from_dict({
        'placa': 'ABC123', 'fecha': '2024-03-11',
        'firmas': {'driver': 'garbage', 'safety_officer': {'nombre': 'ANA'}},
    })
    assert set(rec.signatures) == {'safety_officer'}
    assert rec.signatures['safety_officer'].full_name == 'ANA'


def test_load_records_discards_bad_entries(make_record) -> None:
    good = make_record()
    blobs = {
        good.key: good.to_dict(),
        'ABC123_2024-03-12': {'placa': 'ABC123'},
        'ABC123_2024-03-13': good.to_dict(),  # key disagrees with content
        'junk': 42,
    }
    assert list(load_records(blobs)) == [good.key]


def test_week_group_filters_and_sorts(make_record) -> None:
    wed = make_record(date='2024-03-13')
    mon = make_record(date='2024-03-11')
    other_plate = make_record(plate='XYZ987', date='2024-03-12')
    next_week = make_record(date='2024-03-18')
    group = week_group([wed, next_week, mon, other_plate], 'ABC123', '2024-03-11')
    assert group == [mon, wed]


def test_completed_blocks(make_record) -> None:
    records = [make_record(date='2024-03-11'), make_record(date='2024-03-17')]
    assert completed_blocks(records, 'ABC123', '2024-03-11') == {DayBlock.MONDAY, DayBlock.SUNDAY}
    assert completed_blocks(records, 'XYZ987', '2024-03-11') == set()
