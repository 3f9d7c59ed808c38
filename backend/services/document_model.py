# backend/services/document_model.py
"""
Renderer-agnostic document model.

``build_document`` turns a job snapshot, a document type and resolved
settings into a DocumentIR. All text that appears on a generated document is
decided here; the DOCX, PDF and print renderers only lay it out.
"""
import os
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple

from services.errors import InputError
from services.measurements import resolve_measurements, format_measurement
from services.calculations import (
    calculate_item, aggregate_job, format_money, format_currency, format_percent, finite,
)
from services.date_utils import format_document_date, generate_document_number, generation_date

logger = logging.getLogger(__name__)

AREA_UNITS = {'sft', 'sqft', 'sq ft', 'sq.ft', 'sq. ft', 'sqm', 'sq m', 'sq.m'}

PRICED_COLUMNS = ('Sl.', 'Work Details', 'Quantity', 'Unit Price', 'Total')
DELIVERY_COLUMNS = ('Sl.', 'Work Details', 'Quantity')


class DocumentType(Enum):
    QUOTATION = 'quotation'
    CHALLAN = 'challan'
    BILL = 'bill'

    @property
    def title(self):
        return {
            DocumentType.QUOTATION: 'QUOTATION',
            DocumentType.CHALLAN: 'DELIVERY CHALLAN',
            DocumentType.BILL: 'TAX INVOICE',
        }[self]

    @property
    def prefix(self):
        return {
            DocumentType.QUOTATION: 'QT',
            DocumentType.CHALLAN: 'CH',
            DocumentType.BILL: 'INV',
        }[self]

    @property
    def date_field(self):
        return f"{self.value}_date"

    @property
    def shows_pricing(self):
        # A challan is a delivery note, not a priced document
        return self is not DocumentType.CHALLAN

    @classmethod
    def from_value(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InputError(f"Unknown document type: {value}")


@dataclass(frozen=True)
class CompanyBlock:
    name: str
    tagline: str
    contact_line: str
    email: str


@dataclass(frozen=True)
class CustomerBlock:
    name: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class ItemRow:
    serial: str
    description: str
    quantity: str
    unit_price: Optional[str] = None
    total: Optional[str] = None
    # One line per measurement, drawn under the description in the measurement colour
    measurement_lines: Tuple[str, ...] = ()

    def cells(self, show_pricing):
        if show_pricing:
            return (self.serial, self.description, self.quantity, self.unit_price, self.total)
        return (self.serial, self.description, self.quantity)


@dataclass(frozen=True)
class TotalLine:
    label: str
    value: str
    emphasis: bool = False


@dataclass(frozen=True)
class TotalsBlock:
    lines: Tuple[TotalLine, ...]
    amount_in_words: str

    @property
    def grand_total(self):
        return self.lines[-1].value


@dataclass(frozen=True)
class SignatureBlock:
    left_label: str = 'Received By'
    right_label: str = 'Authorized Signatory'
    image_path: Optional[str] = None
    image_width: float = 120
    image_height: float = 60


@dataclass(frozen=True)
class PadBlock:
    image_path: str
    opacity: float


@dataclass(frozen=True)
class DocumentIR:
    doc_type: DocumentType
    title: str
    number: str
    date_text: str
    ref_text: str
    company: CompanyBlock
    customer: CustomerBlock
    subject: Optional[str]
    subject_label: Optional[str]
    show_pricing: bool
    columns: Tuple[str, ...]
    rows: Tuple[ItemRow, ...]
    totals: Optional[TotalsBlock]
    notes: Optional[str]
    terms: Optional[str]
    signature: SignatureBlock
    pad: Optional[PadBlock]
    footer_lines: Tuple[str, ...]
    file_stem: str

    @property
    def header_lines(self):
        return (f"Doc No: {self.number}", self.date_text, self.ref_text)


# --- Formatting helpers ---------------------------------------------------

def is_area_unit(unit):
    return (unit or '').strip().lower() in AREA_UNITS


def format_quantity(quantity, unit):
    """19.00 sft for area units, 10 pcs for count units"""
    quantity = finite(quantity)
    unit = (unit or '').strip()
    if is_area_unit(unit):
        text = f"{quantity:.2f}"
    elif quantity == int(quantity):
        text = str(int(quantity))
    else:
        text = f"{quantity:.2f}".rstrip('0').rstrip('.')
    return f"{text} {unit}".strip()


def format_item_description(item):
    """Work description with its details"""
    text = (item.work_description or '').strip()
    details = (item.details or '').strip()
    if details:
        text += f" - {details}"
    return text


def measurement_lines(item):
    """Breakdown lines shown under an item: one per measurement, or the auto-calculated area"""
    if item.measurements:
        summary = resolve_measurements(item.measurements)
        return tuple(format_measurement(entry, entry.area_sqft) for entry in summary.entries)
    if item.auto_calculate_sqft and item.calculated_sqft:
        return (f"{finite(item.calculated_sqft):.2f} sqft",)
    return ()


def customer_lines(customer, work_location):
    lines = []
    first_line = (customer.address_line1 or '').strip() or (customer.address or '').strip()
    if first_line:
        lines.append(first_line)
    if (customer.address_line2 or '').strip():
        lines.append(customer.address_line2.strip())
    if (work_location or '').strip():
        lines.append(work_location.strip())
    return tuple(lines)


def subject_line(doc_type, job):
    """
    Subject text for the document.

    A challan shows only the work, with the work location on its own line;
    priced documents use a full "Quotation for ... at ..." sentence.
    """
    topic = (job.job_detail or '').strip() or (job.subject or '').strip()
    if not topic:
        return None
    location = (job.work_location or '').strip()
    if not doc_type.shows_pricing:
        return f"{topic}\n{location}" if location else topic

    text = f"{doc_type.title.title()} for {topic} at {job.customer.name}"
    if location:
        text += f", {location}"
    return text


def resolve_asset_path(image, assets_folder=None):
    """Absolute path of a settings image, or None when it cannot be found"""
    if not image:
        return None
    candidates = []
    if assets_folder:
        candidates.append(os.path.join(assets_folder, image.lstrip('/\\')))
        candidates.append(os.path.join(assets_folder, os.path.basename(image)))
    candidates.append(image)
    for path in candidates:
        if os.path.isfile(path):
            return os.path.abspath(path)
    logger.warning(f"Document image not found: {image}")
    return None


def document_date(job, doc_type):
    """Workflow date of the document type, falling back to the job date"""
    return getattr(job, doc_type.date_field, None) or job.date


def available_documents(job):
    """Which document types exist for a job, read from its workflow dates"""
    return {doc_type.value: bool(getattr(job, doc_type.date_field, None)) for doc_type in DocumentType}


# --- Builder --------------------------------------------------------------

def build_rows(items, show_pricing):
    rows = []
    for position, item in enumerate(items, start=1):
        line = calculate_item(item)
        rows.append(ItemRow(
            serial=str(item.serial_number or position),
            description=format_item_description(item),
            quantity=format_quantity(item.quantity, item.unit),
            unit_price=format_money(item.unit_price) if show_pricing else None,
            total=format_money(line.subtotal) if show_pricing else None,
            measurement_lines=measurement_lines(item),
        ))
    return tuple(rows)


def build_totals(job, settings):
    totals = aggregate_job(job.items, job.discount_percent)
    symbol = settings.currency_symbol

    lines = [TotalLine('Subtotal:', format_currency(totals.subtotal, symbol))]
    if totals.discount_amount:
        lines.append(TotalLine(
            f"Discount ({format_percent(totals.discount_percent)}%):",
            f"- {format_currency(totals.discount_amount, symbol)}",
        ))
    if totals.total_vat:
        lines.append(TotalLine('VAT:', format_currency(totals.total_vat, symbol)))
    lines.append(TotalLine('Grand Total:', format_currency(totals.grand_total, symbol), emphasis=True))

    return TotalsBlock(lines=tuple(lines), amount_in_words=totals.amount_in_words)


def build_document(job, doc_type, settings, today=None, include_pad=False,
                   include_signature=False, sequence=None, assets_folder=None):
    """
    Assemble the DocumentIR for one job.

    Args:
        job (JobData): snapshot of the job with items and customer
        doc_type (DocumentType or str): quotation, challan or bill
        settings (DocumentSettings): resolved style and content settings
        today (date): generation date, defaults to today in the server timezone
        include_pad, include_signature (bool): per-request toggles, applied
            only when the matching setting is enabled
        sequence (int): 1-based position of the job in a bulk batch
        assets_folder (str): folder where pad and signature images live

    Returns:
        DocumentIR
    """
    doc_type = DocumentType.from_value(doc_type)
    today = today or generation_date()
    show_pricing = doc_type.shows_pricing
    title = doc_type.title

    number = generate_document_number(doc_type.prefix, today, sequence)

    company = CompanyBlock(
        name=settings.company_name,
        tagline=settings.company_tagline,
        contact_line=f"Contact: {settings.company_phone} | Email: {settings.company_email}",
        email=settings.company_email,
    )

    signature_image = None
    if include_signature and settings.signature_enabled:
        signature_image = resolve_asset_path(settings.signature_image, assets_folder)

    pad = None
    if include_pad and settings.pad_enabled:
        pad_path = resolve_asset_path(settings.pad_image, assets_folder)
        if pad_path:
            pad = PadBlock(image_path=pad_path, opacity=settings.pad_opacity)

    ir = DocumentIR(
        doc_type=doc_type,
        title=title,
        number=number,
        date_text=format_document_date(document_date(job, doc_type), settings),
        ref_text=f"Ref: {job.ref_number or 'N/A'}",
        company=company,
        customer=CustomerBlock(name=job.customer.name, lines=customer_lines(job.customer, job.work_location)),
        subject=subject_line(doc_type, job),
        subject_label='Subject:' if show_pricing else None,
        show_pricing=show_pricing,
        columns=PRICED_COLUMNS if show_pricing else DELIVERY_COLUMNS,
        rows=build_rows(job.items, show_pricing),
        totals=build_totals(job, settings) if show_pricing else None,
        notes=(job.notes or '').strip() or None,
        terms=(job.terms_conditions or '').strip() or None,
        signature=SignatureBlock(
            image_path=signature_image,
            image_width=settings.signature_width,
            image_height=settings.signature_height,
        ),
        pad=pad,
        footer_lines=(
            f"Doc No: {number}",
            f"This is a computer generated document. For any queries, please contact us at {settings.company_email}",
        ),
        file_stem=f"{doc_type.value}_{job.ref_number or job.id or 'job'}",
    )

    logger.info(f"Built {doc_type.value} model {number} for job {job.ref_number or job.id} with {len(ir.rows)} rows")
    return ir
