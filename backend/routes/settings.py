# backend/routes/settings.py
from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError
from models import db, AppSetting
from services.document_settings import APP_SETTINGS_KEY, resolve_document_settings, load_persisted_settings
import logging

settings_bp = Blueprint('settings', __name__)
logger = logging.getLogger(__name__)


@settings_bp.route('', methods=['GET'])
def get_settings():
    """Get one setting by ?key= or all settings as a key/value map"""
    try:
        key = request.args.get('key')
        if key:
            setting = AppSetting.query.filter_by(key=key).first()
            return jsonify({'success': True, 'data': setting.get_value() if setting else None})

        settings = AppSetting.query.all()
        return jsonify({'success': True, 'data': {s.key: s.get_value() for s in settings}})

    except Exception as e:
        logger.error(f"Error retrieving settings: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to retrieve settings: {str(e)}'}), 500


@settings_bp.route('/document', methods=['GET'])
def get_document_settings():
    """Effective document settings after applying persisted values over defaults"""
    try:
        settings = resolve_document_settings(None, load_persisted_settings())
        return jsonify({'success': True, 'data': settings.to_dict()})
    except Exception as e:
        logger.error(f"Error resolving document settings: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to resolve settings: {str(e)}'}), 500


@settings_bp.route('', methods=['POST'])
def save_setting():
    """Create or update a setting"""
    try:
        data = request.get_json(silent=True) or {}
        key = data.get('key')
        if not key or 'value' not in data:
            return jsonify({'success': False, 'error': 'Key and value are required'}), 400

        if key == APP_SETTINGS_KEY and not isinstance(data['value'], dict):
            return jsonify({'success': False, 'error': f'{APP_SETTINGS_KEY} must be an object'}), 400

        setting = AppSetting.query.filter_by(key=key).first()
        if setting is None:
            setting = AppSetting(key=key)
            db.session.add(setting)
        setting.set_value(data['value'])
        db.session.commit()

        logger.info(f"Saved setting '{key}'")
        return jsonify({'success': True, 'data': {'key': setting.key, 'value': setting.get_value()}})

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error saving setting: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to save setting: {str(e)}'}), 500


@settings_bp.route('', methods=['DELETE'])
def delete_setting():
    """Delete a setting by ?key="""
    try:
        key = request.args.get('key')
        if not key:
            return jsonify({'success': False, 'error': 'Key is required'}), 400

        setting = AppSetting.query.filter_by(key=key).first()
        if setting is None:
            return jsonify({'success': False, 'error': 'Setting not found'}), 404

        db.session.delete(setting)
        db.session.commit()
        logger.info(f"Deleted setting '{key}'")
        return jsonify({'success': True, 'message': f"Setting '{key}' deleted"})

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting setting: {str(e)}")
        return jsonify({'success': False, 'error': f'Failed to delete setting: {str(e)}'}), 500
