# backend/services/file_utils.py
from collections import namedtuple
from urllib.parse import quote
from flask import make_response
from werkzeug.utils import secure_filename
import logging

logger = logging.getLogger(__name__)

PDF_MIMETYPE = 'application/pdf'
DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
HTML_MIMETYPE = 'text/html; charset=utf-8'

RenderedDocument = namedtuple('RenderedDocument', ['content', 'filename', 'mimetype'])


def bulk_filename(doc_type, count, today):
    return f"{doc_type.value}_bulk_{count}_{today.strftime('%Y%m%d')}.pdf"


def content_disposition(filename, disposition='attachment'):
    """
    Content-Disposition value safe for any filename.

    The plain ``filename`` is reduced to ASCII; when that changes the name,
    the original is also sent UTF-8 encoded in ``filename*``.
    """
    ascii_name = secure_filename(filename) or 'document'
    value = f'{disposition}; filename="{ascii_name}"'
    if ascii_name != filename:
        value += f"; filename*=UTF-8''{quote(filename)}"
    return value


def document_response(document, disposition='attachment'):
    """Wrap a rendered document in a download response"""
    response = make_response(document.content)
    response.headers['Content-Type'] = document.mimetype
    response.headers['Content-Disposition'] = content_disposition(document.filename, disposition)
    response.headers['Content-Length'] = str(len(document.content))
    logger.info(f"Sending {document.filename} ({len(document.content)} bytes)")
    return response
