# backend/services/measurements.py
"""
Feet/inch measurement arithmetic.

A measurement is one physical panel or opening: width and height in feet and
inches plus a piece count. Areas are in square feet, rounded to 2 decimals per
entry.
"""
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

ResolvedMeasurement = namedtuple(
    'ResolvedMeasurement',
    ['width_feet', 'width_inches', 'height_feet', 'height_inches', 'quantity', 'description', 'area_sqft']
)

MeasurementSummary = namedtuple(
    'MeasurementSummary',
    ['entries', 'total_area_sqft', 'breakdown', 'description']
)


def area_sqft(width_feet, width_inches, height_feet, height_inches, quantity=1):
    """Area of one measurement entry in square feet, rounded to 2 decimals"""
    width = (width_feet or 0) + (width_inches or 0) / 12
    height = (height_feet or 0) + (height_inches or 0) / 12
    return round(width * height * (quantity or 0), 2)


def measurement_area(measurement):
    return area_sqft(
        measurement.width_feet,
        measurement.width_inches,
        measurement.height_feet,
        measurement.height_inches,
        measurement.quantity,
    )


def format_dimensions(measurement):
    return (
        f"{measurement.width_feet or 0}'{measurement.width_inches or 0}\" x "
        f"{measurement.height_feet or 0}'{measurement.height_inches or 0}\""
    )


def format_measurement(measurement, area=None):
    """Single breakdown line, e.g. 2'6" x 3'0" (2 pcs) = 15.00 sft"""
    if area is None:
        area = measurement_area(measurement)
    text = f"{format_dimensions(measurement)} ({measurement.quantity} pcs) = {area:.2f} sft"
    description = (measurement.description or '').strip()
    if description:
        text = f"{description}: {text}"
    return text


def resolve_measurements(measurements):
    """
    Annotate each measurement with its area and roll them up.

    The representative description is the last non-empty description among
    the entries. Callers that need per-row labels must use ``entries``.
    """
    entries = []
    lines = []
    description = None

    for measurement in measurements or []:
        area = measurement_area(measurement)
        entries.append(ResolvedMeasurement(
            width_feet=measurement.width_feet or 0,
            width_inches=measurement.width_inches or 0,
            height_feet=measurement.height_feet or 0,
            height_inches=measurement.height_inches or 0,
            quantity=measurement.quantity,
            description=measurement.description,
            area_sqft=area,
        ))
        lines.append(format_measurement(measurement, area))
        if (measurement.description or '').strip():
            description = measurement.description.strip()

    total = round(sum(entry.area_sqft for entry in entries), 2)
    logger.debug(f"Resolved {len(entries)} measurements to {total} sqft")

    return MeasurementSummary(
        entries=entries,
        total_area_sqft=total,
        breakdown=', '.join(lines),
        description=description,
    )


def import_measurements(measurements):
    """Quantity an explicit measurement import sets on its line item"""
    return resolve_measurements(measurements).total_area_sqft
