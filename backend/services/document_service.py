# backend/services/document_service.py
"""Load a job, resolve settings, build the document model and hand it to a renderer."""
import logging

from flask import current_app
from sqlalchemy.orm import selectinload

from models import db, Job, JobItem
from services.errors import InputError
from services.job_data import job_data_from_model, job_data_from_dict
from services.document_model import DocumentType, build_document
from services.document_settings import settings_for_request
from services.date_utils import generation_date
from services.docx_renderer import render_docx
from services.pdf_renderer import render_pdf, render_bulk_pdf
from services.print_renderer import render_print_html
from services.file_utils import bulk_filename

logger = logging.getLogger(__name__)

RENDERERS = {
    'docx': render_docx,
    'pdf': render_pdf,
    'print': render_print_html,
}


def parse_job_id(value):
    if value is None or value == '':
        raise InputError('Missing jobId or docType')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InputError(f"Invalid jobId: {value}")


def load_job(job_id):
    """Snapshot of a job with its customer, items and measurements"""
    job = db.session.execute(
        db.select(Job)
        .options(selectinload(Job.items).selectinload(JobItem.measurements))
        .filter_by(id=job_id)
    ).scalar_one_or_none()

    if job is None:
        raise InputError('Job not found', status_code=404)
    return job_data_from_model(job)


def _toggles(payload):
    return {
        'include_pad': bool(payload.get('includePad', False)),
        'include_signature': bool(payload.get('includeSignature', False)),
        'assets_folder': current_app.config.get('DOCUMENT_ASSETS_FOLDER'),
    }


def generate_document(payload, output_format):
    """
    Render one job document from a request payload.

    Args:
        payload (dict): {jobId or job, docType, includePad, includeSignature, ...style overrides}.
            An inline camelCase ``job`` object is rendered as given, without a
            database lookup.
        output_format (str): docx, pdf or print

    Returns:
        RenderedDocument
    """
    payload = payload or {}
    inline = payload.get('job')
    if (not payload.get('jobId') and inline is None) or not payload.get('docType'):
        raise InputError('Missing jobId or docType')

    doc_type = DocumentType.from_value(payload['docType'])
    renderer = RENDERERS[output_format]

    if inline is not None:
        job = job_data_from_dict(inline)
        job_id = job.ref_number or 'inline'
    else:
        job_id = parse_job_id(payload.get('jobId'))
        job = load_job(job_id)
    settings = settings_for_request(payload)
    ir = build_document(job, doc_type, settings, **_toggles(payload))

    logger.info(f"Generating {output_format} {doc_type.value} for job {job_id}")
    return renderer(ir, settings)


def generate_bulk_pdf(payload):
    """One merged PDF for several jobs, in the order the caller listed them"""
    payload = payload or {}
    job_ids = payload.get('jobIds')
    if not isinstance(job_ids, list) or not job_ids or not payload.get('docType'):
        raise InputError('Missing jobIds or docType')

    doc_type = DocumentType.from_value(payload['docType'])
    settings = settings_for_request(payload)
    today = generation_date()
    toggles = _toggles(payload)

    irs = []
    for position, raw_id in enumerate(job_ids, start=1):
        job = load_job(parse_job_id(raw_id))
        irs.append(build_document(job, doc_type, settings, today=today, sequence=position, **toggles))

    logger.info(f"Generating bulk {doc_type.value} PDF for {len(irs)} jobs")
    return render_bulk_pdf(irs, settings, bulk_filename(doc_type, len(irs), today))
