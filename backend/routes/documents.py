# backend/routes/documents.py
from flask import Blueprint, request, jsonify
from services.errors import DocumentError
from services.document_service import generate_document, generate_bulk_pdf
from services.file_utils import document_response
import logging

documents_bp = Blueprint('documents', __name__)
logger = logging.getLogger(__name__)


def _error_response(error):
    if error.status_code >= 500:
        logger.error(f"Document generation failed: {error.message}")
    else:
        logger.warning(f"Rejected document request: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@documents_bp.route('/docx', methods=['POST'])
def generate_docx():
    """Download a job document as an editable Word file"""
    try:
        document = generate_document(request.get_json(silent=True), 'docx')
        return document_response(document)
    except DocumentError as e:
        return _error_response(e)
    except Exception as e:
        logger.error(f"Error generating DOCX: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to generate document'}), 500


@documents_bp.route('/pdf', methods=['POST'])
def generate_pdf():
    """Download a job document as a paginated PDF"""
    try:
        document = generate_document(request.get_json(silent=True), 'pdf')
        return document_response(document)
    except DocumentError as e:
        return _error_response(e)
    except Exception as e:
        logger.error(f"Error generating PDF: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to generate PDF'}), 500


@documents_bp.route('/print', methods=['POST'])
def generate_print():
    """Print-ready HTML that opens the browser print dialog on load"""
    try:
        document = generate_document(request.get_json(silent=True), 'print')
        return document_response(document, disposition='inline')
    except DocumentError as e:
        return _error_response(e)
    except Exception as e:
        logger.error(f"Error generating print document: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to generate print document'}), 500


@documents_bp.route('/bulk-pdf', methods=['POST'])
def generate_bulk():
    """Several jobs combined into one PDF, in the requested order"""
    try:
        document = generate_bulk_pdf(request.get_json(silent=True))
        return document_response(document)
    except DocumentError as e:
        return _error_response(e)
    except Exception as e:
        logger.error(f"Error generating bulk PDF: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to generate PDF'}), 500
