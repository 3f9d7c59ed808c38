import pytest

from services.errors import InputError
from services.job_data import MeasurementData, make_measurement
from services.measurements import (
    area_sqft, measurement_area, format_measurement, resolve_measurements, import_measurements,
)


def test_zero_measurement_has_zero_area():
    assert area_sqft(0, 0, 0, 0, 1) == 0
    assert measurement_area(MeasurementData(width_feet=5, quantity=3)) == 0


def test_feet_and_inches_to_area():
    assert area_sqft(2, 6, 3, 0, 2) == 15.0
    assert area_sqft(1, 0, 1, 0, 4) == 4.0
    # 4'4" x 3'3" = 14.0833 -> rounded per entry
    assert area_sqft(4, 4, 3, 3, 1) == 14.08


def test_two_measurements_sum_to_nineteen():
    summary = resolve_measurements([
        MeasurementData(width_feet=2, width_inches=6, height_feet=3, quantity=2),
        MeasurementData(width_feet=1, height_feet=1, quantity=4),
    ])
    assert [entry.area_sqft for entry in summary.entries] == [15.0, 4.0]
    assert summary.total_area_sqft == 19.0
    assert summary.breakdown == '2\'6" x 3\'0" (2 pcs) = 15.00 sft, 1\'0" x 1\'0" (4 pcs) = 4.00 sft'
    assert summary.breakdown == '2\'6" x 3\'0" (2 pcs) = 15.00 sft, 1\'0" x 1\'0" (4 pcs) = 4.00 sft'


def test_import_sets_quantity_to_total_area():
    measurements = [
        MeasurementData(width_feet=2, width_inches=6, height_feet=3, quantity=2),
        MeasurementData(width_feet=1, height_feet=1, quantity=4),
    ]
    assert import_measurements(measurements) == 19.0
    assert import_measurements([]) == 0


def test_breakdown_line_format():
    line = format_measurement(MeasurementData(width_feet=2, width_inches=6, height_feet=3, quantity=2))
    assert line == '2\'6" x 3\'0" (2 pcs) = 15.00 sft'

    labelled = format_measurement(MeasurementData(width_feet=1, height_feet=1, quantity=1, description='Vent'))
    assert labelled == 'Vent: 1\'0" x 1\'0" (1 pcs) = 1.00 sft'


def test_last_non_empty_description_wins():
    summary = resolve_measurements([
        MeasurementData(width_feet=1, height_feet=1, description='Window'),
        MeasurementData(width_feet=1, height_feet=1, description='Door'),
        MeasurementData(width_feet=1, height_feet=1, description='  '),
        MeasurementData(width_feet=1, height_feet=1),
    ])
    assert summary.description == 'Door'


def test_no_description_gives_none():
    assert resolve_measurements([MeasurementData(width_feet=1, height_feet=1)]).description is None


@pytest.mark.parametrize('kwargs', [
    {'width_feet': -1},
    {'height_feet': -2},
    {'width_inches': 12},
    {'height_inches': -1},
    {'quantity': 0},
    {'width_feet': 'ten'},
    {'width_inches': 2.5},
])
def test_invalid_measurements_rejected_at_input(kwargs):
    with pytest.raises(InputError):
        make_measurement(**kwargs)


def test_measurement_area_refreshed_on_save(db_job):
    glass = db_job.items[0]
    assert [m.calculated_sqft for m in glass.measurements] == [15.0, 4.0]
