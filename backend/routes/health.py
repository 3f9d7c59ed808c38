from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from datetime import datetime
from models import db
import os

health_bp = Blueprint('health', __name__)

@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint to verify service status
    Tests database connectivity, document assets and registered blueprints
    """
    health_status = {
        'status': 'healthy',
        'app': 'Job Documents API',
        'version': '1.0.0',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': {}
    }

    overall_healthy = True

    # Test 1: Database Connection
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()

        db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if 'sqlite' in db_url.lower():
            db_type = 'SQLite'
        elif 'postgres' in db_url.lower():
            db_type = 'PostgreSQL'
        else:
            db_type = 'Unknown'

        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': db_type,
            'connected': True
        }

    except Exception as db_error:
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        overall_healthy = False

    # Test 2: Document assets (pad and signature images)
    assets_folder = current_app.config.get('DOCUMENT_ASSETS_FOLDER')
    assets_present = bool(assets_folder) and os.path.isdir(assets_folder)
    health_status['checks']['document_assets'] = {
        'status': 'healthy' if assets_present else 'warning',
        'folder': assets_folder,
        'present': assets_present
    }
    if not assets_present:
        current_app.logger.warning(f"Document assets folder missing: {assets_folder}")

    # Test 3: Application State
    registered_blueprints = [bp.name for bp in current_app.blueprints.values()]
    critical_blueprints = ['documents', 'jobs', 'settings']
    missing_blueprints = [bp for bp in critical_blueprints if bp not in registered_blueprints]

    health_status['checks']['application'] = {
        'status': 'healthy' if not missing_blueprints else 'warning',
        'blueprints': {
            'registered': registered_blueprints,
            'missing_critical': missing_blueprints
        },
        'routes': len(list(current_app.url_map.iter_rules()))
    }

    if not overall_healthy:
        health_status['status'] = 'unhealthy'
        return jsonify(health_status), 503

    return jsonify(health_status), 200


@health_bp.route('/health/simple', methods=['GET'])
def simple_health():
    """Lightweight liveness check"""
    return jsonify({'status': 'ok'}), 200
