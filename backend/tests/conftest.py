import re
from datetime import date
from io import BytesIO

import pytest
from docx import Document
from PyPDF2 import PdfReader
from PIL import Image

from app import create_app
from models import db, Customer, Job, JobItem, Measurement
from services.job_data import JobData, CustomerData, JobItemData, MeasurementData
from services.document_settings import DocumentSettings

TODAY = date(2024, 3, 15)


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def settings():
    return DocumentSettings()


@pytest.fixture
def customer():
    return CustomerData(
        name='Rahim Traders',
        address_line1='House 12, Road 5, Dhanmondi',
        address_line2='Dhaka 1205',
        phone='01711000000',
    )


@pytest.fixture
def job(customer):
    """Two items: a measured glass partition with VAT and a discounted lock"""
    return JobData(
        id=7,
        ref_number='JB-202403-001',
        date=date(2024, 3, 1),
        subject='Office fit-out',
        job_detail='Glass partition work',
        customer=customer,
        work_location='Gulshan Office',
        discount_percent=5,
        notes='Delivery within 7 days',
        terms_conditions='50% advance with work order',
        quotation_date=date(2024, 3, 2),
        bill_date=date(2024, 3, 10),
        items=(
            JobItemData(
                serial_number=1,
                work_description='Glass Partition',
                details='10mm tempered',
                unit='sft',
                quantity=19,
                unit_price=100,
                vat_rate=5,
                measurements=(
                    MeasurementData(width_feet=2, width_inches=6, height_feet=3, height_inches=0, quantity=2),
                    MeasurementData(width_feet=1, width_inches=0, height_feet=1, height_inches=0, quantity=4),
                ),
            ),
            JobItemData(
                serial_number=2,
                work_description='Door Lock',
                unit='pcs',
                quantity=2,
                unit_price=450,
                discount_percent=10,
            ),
        ),
    )


@pytest.fixture
def simple_job(customer):
    """One item of 10 sft at 100 with a 5% job discount"""
    return JobData(
        id=1,
        ref_number='JB-1',
        date=date(2024, 3, 1),
        customer=customer,
        discount_percent=5,
        items=(JobItemData(work_description='Tiles', unit='sft', quantity=10, unit_price=100),),
    )


@pytest.fixture
def db_job(app):
    customer = Customer(
        name='Karim Builders',
        address='Plot 4, Tejgaon I/A',
        phone='01819000000',
    )
    job = Job(
        ref_number='JOB-001',
        subject='Window glazing',
        date=date(2024, 3, 1),
        customer=customer,
        work_location='Banani',
        discount_percent=5,
        quotation_date=date(2024, 3, 2),
        notes='Prices valid for 30 days',
    )
    glass = JobItem(
        serial_number=1,
        work_description='Window Glass',
        unit='sft',
        quantity=0,
        unit_price=100,
    )
    glass.measurements = [
        Measurement(width_feet=2, width_inches=6, height_feet=3, height_inches=0, quantity=2, sort_order=0),
        Measurement(width_feet=1, width_inches=0, height_feet=1, height_inches=0, quantity=4, sort_order=1),
    ]
    job.items = [
        glass,
        JobItem(serial_number=2, work_description='Aluminium Frame', unit='rft', quantity=12, unit_price=250),
        JobItem(serial_number=3, work_description='Fitting Charge', unit='job', quantity=1, unit_price=1500),
    ]
    db.session.add(job)
    db.session.commit()
    return job


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / 'images' / 'Sig_Seal.png'
    path.parent.mkdir()
    Image.new('RGB', (120, 60), (20, 40, 160)).save(path)
    return path


# --- Text extraction helpers ----------------------------------------------

def normalize(value):
    return ' '.join(value.split())


def docx_text(content):
    document = Document(BytesIO(content))
    parts = [p.text for p in document.paragraphs]

    def walk(tables):
        for table in tables:
            for row in table.rows:
                for cell in row.cells:
                    parts.extend(p.text for p in cell.paragraphs)
                    walk(cell.tables)

    walk(document.tables)
    for section in document.sections:
        parts.extend(p.text for p in section.footer.paragraphs)
    return normalize('\n'.join(parts))


def pdf_text(content):
    reader = PdfReader(BytesIO(content))
    return normalize('\n'.join(page.extract_text() for page in reader.pages))


def html_text(content):
    from html import unescape
    markup = content.decode('utf-8')
    markup = re.sub(r'<style.*?</style>|<script.*?</script>', ' ', markup, flags=re.S)
    return normalize(unescape(re.sub(r'<[^>]+>', ' ', markup)))
