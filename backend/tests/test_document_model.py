from dataclasses import replace
from datetime import date

import pytest

from conftest import TODAY
from services.errors import InputError
from services.job_data import JobItemData
from services.document_model import (
    DocumentType, build_document, format_quantity, available_documents,
    PRICED_COLUMNS, DELIVERY_COLUMNS,
)

GLASS_DESCRIPTION = 'Glass Partition - 10mm tempered'
GLASS_MEASUREMENTS = (
    '2\'6" x 3\'0" (2 pcs) = 15.00 sft',
    '1\'0" x 1\'0" (4 pcs) = 4.00 sft',
)


@pytest.mark.parametrize('doc_type,title,number', [
    ('quotation', 'QUOTATION', 'QT-2024-0315'),
    ('challan', 'DELIVERY CHALLAN', 'CH-2024-0315'),
    ('bill', 'TAX INVOICE', 'INV-2024-0315'),
])
def test_titles_and_numbers(job, settings, doc_type, title, number):
    ir = build_document(job, doc_type, settings, today=TODAY)
    assert ir.title == title
    assert ir.number == number
    assert ir.header_lines[0] == f"Doc No: {number}"
    assert ir.footer_lines[0] == f"Doc No: {number}"


def test_number_comes_from_generation_date_not_job_date(job, settings):
    ir = build_document(job, 'bill', settings, today=date(2025, 1, 9))
    assert ir.number == 'INV-2025-0109'
    assert ir.date_text == 'Date: 10/03/2024'


def test_unknown_document_type(job, settings):
    with pytest.raises(InputError):
        build_document(job, 'receipt', settings, today=TODAY)


def test_quotation_content(job, settings):
    ir = build_document(job, DocumentType.QUOTATION, settings, today=TODAY)

    assert ir.date_text == 'Date: 02/03/2024'
    assert ir.ref_text == 'Ref: JB-202403-001'
    assert ir.customer.name == 'Rahim Traders'
    assert ir.customer.lines == ('House 12, Road 5, Dhanmondi', 'Dhaka 1205', 'Gulshan Office')
    assert ir.subject == 'Quotation for Glass partition work at Rahim Traders, Gulshan Office'
    assert ir.subject_label == 'Subject:'
    assert ir.columns == PRICED_COLUMNS
    assert ir.company.contact_line == 'Contact: +880 2 222 111 333 | Email: info@amkenterprise.com'
    assert ir.file_stem == 'quotation_JB-202403-001'

    glass, lock = ir.rows
    assert glass.cells(True) == ('1', GLASS_DESCRIPTION, '19.00 sft', '100.00', '1,900.00')
    assert glass.measurement_lines == GLASS_MEASUREMENTS
    assert lock.cells(True) == ('2', 'Door Lock', '2 pcs', '450.00', '900.00')
    assert lock.measurement_lines == ()

    assert [(line.label, line.value) for line in ir.totals.lines] == [
        ('Subtotal:', 'Tk 2,800.00'),
        ('Discount (5%):', '- Tk 140.00'),
        ('VAT:', 'Tk 95.00'),
        ('Grand Total:', 'Tk 2,755.00'),
    ]
    assert ir.totals.grand_total == 'Tk 2,755.00'
    assert ir.totals.amount_in_words == 'Two Thousand Seven Hundred Fifty Five Taka Only'
    assert ir.notes == 'Delivery within 7 days'
    assert ir.terms == '50% advance with work order'


def test_simple_job_totals_without_vat_line(simple_job, settings):
    ir = build_document(simple_job, 'quotation', settings, today=TODAY)
    assert [line.label for line in ir.totals.lines] == ['Subtotal:', 'Discount (5%):', 'Grand Total:']
    assert ir.totals.grand_total == 'Tk 950.00'
    assert ir.totals.amount_in_words == 'Nine Hundred Fifty Taka Only'


def test_challan_hides_pricing(job, settings):
    ir = build_document(job, 'challan', settings, today=TODAY)
    assert ir.columns == DELIVERY_COLUMNS
    assert ir.totals is None
    assert all(row.unit_price is None and row.total is None for row in ir.rows)
    assert ir.rows[0].cells(False) == ('1', GLASS_DESCRIPTION, '19.00 sft')
    assert ir.rows[0].measurement_lines == GLASS_MEASUREMENTS
    # no challan date on the job
    assert ir.date_text == 'Date: 01/03/2024'


def test_challan_subject_has_location_on_its_own_line(job, settings):
    ir = build_document(job, 'challan', settings, today=TODAY)
    assert ir.subject == 'Glass partition work\nGulshan Office'
    assert ir.subject_label is None


def test_challan_subject_without_location(job, settings):
    ir = build_document(replace(job, work_location=None), 'challan', settings, today=TODAY)
    assert ir.subject == 'Glass partition work'


def test_legacy_address_and_missing_subject(simple_job, settings):
    job = replace(simple_job, customer=replace(simple_job.customer, address_line1=None, address='Old Town'))
    ir = build_document(job, 'quotation', settings, today=TODAY)
    assert ir.customer.lines == ('Old Town', 'Dhaka 1205')
    assert ir.subject is None


def test_subject_falls_back_to_job_subject(simple_job, settings):
    job = replace(simple_job, subject='Floor tiling')
    assert build_document(job, 'bill', settings, today=TODAY).subject == 'Tax Invoice for Floor tiling at Rahim Traders'


def test_auto_calculated_area_shown_when_no_measurements(simple_job, settings):
    item = JobItemData(work_description='Glass Top', unit='sft', quantity=6.5, unit_price=80,
                       auto_calculate_sqft=True, calculated_sqft=6.5)
    ir = build_document(replace(simple_job, items=(item,)), 'quotation', settings, today=TODAY)
    assert ir.rows[0].description == 'Glass Top'
    assert ir.rows[0].measurement_lines == ('6.50 sqft',)


def test_manual_quantity_is_kept_even_with_measurements(simple_job, settings, job):
    item = replace(job.items[0], quantity=25)
    ir = build_document(replace(simple_job, items=(item,)), 'quotation', settings, today=TODAY)
    assert ir.rows[0].quantity == '25.00 sft'
    assert ir.rows[0].total == '2,500.00'


@pytest.mark.parametrize('quantity,unit,text', [
    (19, 'sft', '19.00 sft'),
    (3.333, 'Sq Ft', '3.33 Sq Ft'),
    (2, 'pcs', '2 pcs'),
    (2.5, 'pcs', '2.5 pcs'),
    (1, '', '1'),
])
def test_quantity_formatting(quantity, unit, text):
    assert format_quantity(quantity, unit) == text


def test_us_dates_without_prefix(job, settings):
    settings = replace(settings, date_format='US', date_show_prefix=False)
    assert build_document(job, 'quotation', settings, today=TODAY).date_text == '03/02/2024'


def test_settings_flow_into_company_block_and_currency(job, settings):
    settings = replace(settings, company_name='Nabil Glass House', currency_symbol='BDT')
    ir = build_document(job, 'bill', settings, today=TODAY)
    assert ir.company.name == 'Nabil Glass House'
    assert ir.totals.grand_total == 'BDT 2,755.00'


def test_signature_needs_request_toggle_and_setting(job, settings, image_file):
    folder = str(image_file.parent.parent)
    enabled = replace(settings, signature_enabled=True)

    ir = build_document(job, 'bill', enabled, today=TODAY, include_signature=True, assets_folder=folder)
    assert ir.signature.image_path == str(image_file)
    assert ir.signature.image_width == 120

    assert build_document(job, 'bill', enabled, today=TODAY, assets_folder=folder).signature.image_path is None
    assert build_document(job, 'bill', settings, today=TODAY, include_signature=True,
                          assets_folder=folder).signature.image_path is None


def test_missing_images_are_skipped(job, settings, tmp_path):
    enabled = replace(settings, signature_enabled=True, pad_enabled=True)
    ir = build_document(job, 'bill', enabled, today=TODAY, include_pad=True,
                        include_signature=True, assets_folder=str(tmp_path))
    assert ir.pad is None
    assert ir.signature.image_path is None


def test_pad_uses_opacity_setting(job, settings, image_file):
    enabled = replace(settings, pad_enabled=True, pad_image='/images/Sig_Seal.png', pad_opacity=0.3)
    ir = build_document(job, 'quotation', enabled, today=TODAY, include_pad=True,
                        assets_folder=str(image_file.parent.parent))
    assert ir.pad.opacity == 0.3


def test_building_is_deterministic(job, settings):
    first = build_document(job, 'quotation', settings, today=TODAY)
    assert build_document(job, 'quotation', settings, today=TODAY) == first

    later = build_document(job, 'quotation', settings, today=date(2024, 4, 1))
    assert replace(later, number=first.number, footer_lines=first.footer_lines) == first


def test_bulk_sequence_suffix(job, settings):
    assert build_document(job, 'quotation', settings, today=TODAY, sequence=3).number == 'QT-2024-0315-3'


def test_available_documents(job):
    assert available_documents(job) == {'quotation': True, 'challan': False, 'bill': True}
