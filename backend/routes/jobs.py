# backend/routes/jobs.py
from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError
from models import db, Job, JobItem
from services.errors import DocumentError
from services.document_service import load_job
from services.document_model import available_documents
from services.calculations import aggregate_job, calculate_item, round_money
from services.measurements import import_measurements, resolve_measurements
from services.job_data import item_data_from_model
from services.date_utils import format_date_for_response
import logging

jobs_bp = Blueprint('jobs', __name__)
logger = logging.getLogger(__name__)


def _item_or_404(job_id, item_id):
    item = db.session.get(JobItem, item_id)
    if item is None or item.job_id != job_id:
        return None
    return item


@jobs_bp.route('/<int:job_id>/totals', methods=['GET'])
def get_job_totals(job_id):
    """Totals recomputed from the raw line items"""
    try:
        job = load_job(job_id)
        totals = aggregate_job(job.items, job.discount_percent)

        items = []
        for item in job.items:
            line = calculate_item(item)
            items.append({
                'id': item.id,
                'serial_number': item.serial_number,
                'subtotal': round_money(line.subtotal),
                'discount_amount': round_money(line.discount_amount),
                'vat_amount': round_money(line.vat_amount),
                'total': round_money(line.total),
            })

        return jsonify({
            'success': True,
            'data': {
                'job_id': job.id,
                'ref_number': job.ref_number,
                'items': items,
                'subtotal': round_money(totals.subtotal),
                'discount_percent': totals.discount_percent,
                'discount_amount': round_money(totals.discount_amount),
                'total_vat': round_money(totals.total_vat),
                'grand_total': round_money(totals.grand_total),
                'amount_in_words': totals.amount_in_words,
            }
        })

    except DocumentError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error computing totals for job {job_id}: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to compute totals: {str(e)}'}), 500


@jobs_bp.route('/<int:job_id>/documents', methods=['GET'])
def get_job_documents(job_id):
    """Which document types have been created for a job"""
    try:
        job = db.session.get(Job, job_id)
        if job is None:
            return jsonify({'success': False, 'error': 'Job not found'}), 404

        return jsonify({
            'success': True,
            'data': {
                'available': available_documents(job),
                'quotation_date': format_date_for_response(job.quotation_date),
                'challan_date': format_date_for_response(job.challan_date),
                'bill_date': format_date_for_response(job.bill_date),
            }
        })

    except Exception as e:
        logger.error(f"Error reading document status for job {job_id}: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to read document status: {str(e)}'}), 500


@jobs_bp.route('/<int:job_id>/items/<int:item_id>/import-measurements', methods=['POST'])
def import_item_measurements(job_id, item_id):
    """Set an item's quantity to the summed area of its measurements"""
    try:
        item = _item_or_404(job_id, item_id)
        if item is None:
            return jsonify({'success': False, 'error': 'Item not found'}), 404

        snapshot = item_data_from_model(item)
        if not snapshot.measurements:
            return jsonify({'success': False, 'error': 'Item has no measurements to import'}), 400

        previous = item.quantity
        item.quantity = import_measurements(snapshot.measurements)
        db.session.commit()
        logger.info(f"Imported measurements into item {item_id}: quantity {previous} -> {item.quantity}")

        line = calculate_item(item)
        return jsonify({
            'success': True,
            'data': {
                'id': item.id,
                'quantity': item.quantity,
                'unit': item.unit,
                'subtotal': round_money(line.subtotal),
                'total': round_money(line.total),
                'breakdown': resolve_measurements(snapshot.measurements).breakdown,
            }
        })

    except DocumentError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error importing measurements for item {item_id}: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to import measurements: {str(e)}'}), 500


@jobs_bp.route('/<int:job_id>/items/<int:item_id>', methods=['DELETE'])
def delete_job_item(job_id, item_id):
    """Remove a line item and re-sequence the remaining serial numbers"""
    try:
        item = _item_or_404(job_id, item_id)
        if item is None:
            return jsonify({'success': False, 'error': 'Item not found'}), 404

        job = item.job
        job.items.remove(item)
        for serial, remaining in enumerate(sorted(job.items, key=lambda i: (i.serial_number, i.id)), start=1):
            remaining.serial_number = serial

        db.session.commit()
        logger.info(f"Deleted item {item_id} from job {job_id}, {len(job.items)} items remain")

        return jsonify({
            'success': True,
            'data': [{'id': i.id, 'serial_number': i.serial_number} for i in job.items]
        })

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting item {item_id}: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to delete item: {str(e)}'}), 500
