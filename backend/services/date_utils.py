# backend/services/date_utils.py
import os
import pytz
import logging
from datetime import datetime, date

logger = logging.getLogger(__name__)

# Configure server timezone
SERVER_TIMEZONE = pytz.timezone(os.environ.get('SERVER_TIMEZONE', 'Asia/Dhaka'))


def generation_date():
    """Today's date in the server timezone, used to stamp document numbers"""
    return datetime.now(SERVER_TIMEZONE).date()


def format_date_for_response(date_obj):
    """
    Format a date object for consistent API responses.

    Args:
        date_obj (date or datetime): The date to format

    Returns:
        str: ISO date string (YYYY-MM-DD) or None
    """
    if not date_obj:
        return None

    if isinstance(date_obj, datetime):
        if date_obj.tzinfo is None:
            date_obj = SERVER_TIMEZONE.localize(date_obj)
        return date_obj.date().isoformat()
    elif isinstance(date_obj, date):
        return date_obj.isoformat()

    return str(date_obj)


def parse_job_date(date_str):
    """
    Parse a date string from a job payload, returning a date object
    without time component to prevent timezone issues.

    Args:
        date_str (str): Date string to parse

    Returns:
        date: Parsed date object (without time)
    """
    if not date_str:
        return None

    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    try:
        # ISO format with timezone
        if 'T' in date_str and (date_str.endswith('Z') or '+' in date_str or '-' in date_str.split('T')[1]):
            dt = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            return dt.astimezone(SERVER_TIMEZONE).date()

        # ISO format without timezone (2023-05-21T10:00:00)
        elif 'T' in date_str:
            year, month, day = map(int, date_str.split('T')[0].split('-'))
            return date(year, month, day)

        # Simple date format (2023-05-21)
        elif date_str.count('-') == 2:
            year, month, day = map(int, date_str.split('-'))
            return date(year, month, day)

        else:
            return datetime.fromisoformat(date_str).date()

    except (ValueError, IndexError) as e:
        logger.error(f"Error parsing job date '{date_str}': {str(e)}")
        raise ValueError(f"Invalid date format: {str(e)}")


def format_document_date(value, settings, include_prefix=None):
    """
    Format a document date according to the date settings.

    BD renders DD/MM/YYYY, US renders MM/DD/YYYY. A missing date renders
    as N/A.
    """
    if not value:
        return 'N/A'

    show_prefix = settings.date_show_prefix if include_prefix is None else include_prefix
    prefix = settings.date_prefix_text if show_prefix else ''

    if isinstance(value, datetime):
        value = value.date()

    if settings.date_format == 'US':
        formatted = value.strftime('%m/%d/%Y')
    else:
        formatted = value.strftime('%d/%m/%Y')

    return f"{prefix}{formatted}"


def generate_document_number(prefix, today=None, sequence=None):
    """
    Document number stamped with the generation date, e.g. INV-2024-0315.

    Bulk generation appends the 1-based position of the job in the batch.
    """
    today = today or generation_date()
    number = f"{prefix}-{today.year}-{today.month:02d}{today.day:02d}"
    if sequence is not None:
        number = f"{number}-{sequence}"
    return number
