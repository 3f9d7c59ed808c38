# backend/services/job_data.py
"""
Immutable job snapshots.

Document generation never works on live ORM objects. A job is loaded once
per request and converted into these frozen records, either from the
database models or from a JSON payload.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple
import datetime

from services.errors import InputError
from services.date_utils import parse_job_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerData:
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    location: Optional[str] = None
    vat_number: Optional[str] = None


@dataclass(frozen=True)
class MeasurementData:
    width_feet: int = 0
    width_inches: int = 0
    height_feet: int = 0
    height_inches: int = 0
    quantity: int = 1
    description: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class JobItemData:
    work_description: str
    serial_number: int = 1
    details: Optional[str] = None
    unit: str = 'pcs'
    quantity: float = 0
    unit_price: float = 0
    buy_price: float = 0
    discount_percent: float = 0
    vat_rate: float = 0
    auto_calculate_sqft: bool = False
    calculated_sqft: Optional[float] = None
    measurements: Tuple[MeasurementData, ...] = ()
    id: Optional[int] = None


@dataclass(frozen=True)
class JobData:
    ref_number: str
    customer: CustomerData
    id: Optional[int] = None
    date: Optional[datetime.date] = None
    subject: Optional[str] = None
    job_detail: Optional[str] = None
    work_location: Optional[str] = None
    discount_percent: float = 0
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    quotation_date: Optional[datetime.date] = None
    challan_date: Optional[datetime.date] = None
    bill_date: Optional[datetime.date] = None
    items: Tuple[JobItemData, ...] = field(default_factory=tuple)


def _int(value, name, default=0):
    if value is None or value == '':
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputError(f"{name} must be a number")
    if number != int(number):
        raise InputError(f"{name} must be a whole number")
    return int(number)


def _number(value, name, default=0):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise InputError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InputError(f"{name} must be a number")


def _date(value, name):
    try:
        return parse_job_date(value)
    except ValueError:
        raise InputError(f"{name} is not a valid date")


def make_measurement(width_feet=0, width_inches=0, height_feet=0, height_inches=0,
                     quantity=1, description=None, sort_order=0):
    """Validated MeasurementData; negative sizes, inches outside 0-11 and counts below 1 are rejected"""
    measurement = MeasurementData(
        width_feet=_int(width_feet, 'widthFeet'),
        width_inches=_int(width_inches, 'widthInches'),
        height_feet=_int(height_feet, 'heightFeet'),
        height_inches=_int(height_inches, 'heightInches'),
        quantity=_int(quantity, 'quantity', default=1),
        description=description or None,
        sort_order=_int(sort_order, 'sortOrder'),
    )

    if measurement.width_feet < 0 or measurement.height_feet < 0:
        raise InputError("Measurement feet cannot be negative")
    for inches in (measurement.width_inches, measurement.height_inches):
        if not 0 <= inches <= 11:
            raise InputError(f"Measurement inches must be between 0 and 11, got {inches}")
    if measurement.quantity < 1:
        raise InputError("Measurement quantity must be at least 1")

    return measurement


# --- From database models -------------------------------------------------

def customer_data_from_model(customer):
    return CustomerData(
        name=customer.name,
        contact_person=customer.contact_person,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        address_line1=customer.address_line1,
        address_line2=customer.address_line2,
        location=customer.location,
        vat_number=customer.vat_number,
    )


def item_data_from_model(item):
    measurements = tuple(
        make_measurement(
            width_feet=m.width_feet,
            width_inches=m.width_inches,
            height_feet=m.height_feet,
            height_inches=m.height_inches,
            quantity=m.quantity,
            description=m.description,
            sort_order=m.sort_order,
        )
        for m in sorted(item.measurements, key=lambda m: (m.sort_order or 0, m.id or 0))
    )
    return JobItemData(
        id=item.id,
        serial_number=item.serial_number,
        work_description=item.work_description or '',
        details=item.details,
        unit=item.unit or 'pcs',
        quantity=item.quantity or 0,
        unit_price=item.unit_price or 0,
        buy_price=item.buy_price or 0,
        discount_percent=item.discount_percent or 0,
        vat_rate=item.vat_rate or 0,
        auto_calculate_sqft=bool(item.auto_calculate_sqft),
        calculated_sqft=item.calculated_sqft,
        measurements=measurements,
    )


def job_data_from_model(job):
    if job.customer is None:
        raise InputError(f"Customer for job {job.id} not found", status_code=404)

    items = sorted(job.items, key=lambda i: (i.serial_number or 0, i.id or 0))
    return JobData(
        id=job.id,
        ref_number=job.ref_number,
        date=job.date,
        subject=job.subject,
        job_detail=job.job_detail,
        customer=customer_data_from_model(job.customer),
        work_location=job.work_location,
        discount_percent=job.discount_percent or 0,
        notes=job.notes,
        terms_conditions=job.terms_conditions,
        quotation_date=job.quotation_date,
        challan_date=job.challan_date,
        bill_date=job.bill_date,
        items=tuple(item_data_from_model(item) for item in items),
    )


# --- From JSON payloads ---------------------------------------------------

def job_data_from_dict(payload):
    """Build a JobData from a camelCase JSON payload"""
    if not isinstance(payload, dict):
        raise InputError("Job payload must be an object")

    customer = payload.get('customer')
    if not isinstance(customer, dict) or not customer.get('name'):
        raise InputError("Job payload requires a customer with a name")

    items = []
    for index, item in enumerate(payload.get('items') or [], start=1):
        if not isinstance(item, dict):
            raise InputError(f"Item {index} must be an object")
        measurements = tuple(
            make_measurement(
                width_feet=m.get('widthFeet'),
                width_inches=m.get('widthInches'),
                height_feet=m.get('heightFeet'),
                height_inches=m.get('heightInches'),
                quantity=m.get('quantity'),
                description=m.get('description'),
                sort_order=m.get('sortOrder', position),
            )
            for position, m in enumerate(item.get('measurements') or [])
        )
        calculated = item.get('calculatedSqft')
        items.append(JobItemData(
            id=item.get('id'),
            serial_number=_int(item.get('serialNumber'), 'serialNumber', default=index),
            work_description=item.get('workDescription') or '',
            details=item.get('details'),
            unit=item.get('unit') or 'pcs',
            quantity=_number(item.get('quantity'), 'quantity'),
            unit_price=_number(item.get('unitPrice'), 'unitPrice'),
            buy_price=_number(item.get('buyPrice'), 'buyPrice'),
            discount_percent=_number(item.get('discountPercent'), 'discountPercent'),
            vat_rate=_number(item.get('vatRate'), 'vatRate'),
            auto_calculate_sqft=bool(item.get('autoCalculateSqft')),
            calculated_sqft=_number(calculated, 'calculatedSqft') if calculated is not None else None,
            measurements=measurements,
        ))

    return JobData(
        id=payload.get('id'),
        ref_number=payload.get('refNumber') or '',
        date=_date(payload.get('date'), 'date'),
        subject=payload.get('subject'),
        job_detail=payload.get('jobDetail'),
        customer=CustomerData(
            name=customer['name'],
            contact_person=customer.get('contactPerson'),
            email=customer.get('email'),
            phone=customer.get('phone'),
            address=customer.get('address'),
            address_line1=customer.get('addressLine1'),
            address_line2=customer.get('addressLine2'),
            location=customer.get('location'),
            vat_number=customer.get('vatNumber'),
        ),
        work_location=payload.get('workLocation'),
        discount_percent=_number(payload.get('discountPercent'), 'discountPercent'),
        notes=payload.get('notes'),
        terms_conditions=payload.get('termsConditions'),
        quotation_date=_date(payload.get('quotationDate'), 'quotationDate'),
        challan_date=_date(payload.get('challanDate'), 'challanDate'),
        bill_date=_date(payload.get('billDate'), 'billDate'),
        items=tuple(items),
    )
