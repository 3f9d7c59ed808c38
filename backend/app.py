import os
import logging
from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import text

from config import config, get_config_name
from models import db
from routes import BLUEPRINTS


def configure_logging(app, config_name):
    if not app.debug and config_name == 'production':
        logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))
        app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
        app.logger.info("✓ Production logging configured")
    elif app.debug:
        logging.basicConfig(level=logging.DEBUG)
        app.logger.setLevel(logging.DEBUG)
        app.logger.info("✓ Debug logging enabled")


def register_blueprints(app):
    registered, failed = [], []

    for module_name, blueprint_name, url_prefix in BLUEPRINTS:
        try:
            module = __import__(module_name, fromlist=[blueprint_name])
            blueprint = getattr(module, blueprint_name)
            app.register_blueprint(blueprint, url_prefix=url_prefix)
            registered.append(blueprint_name)
            app.logger.info(f"✓ Registered {blueprint_name} blueprint at {url_prefix}")
        except (ImportError, AttributeError) as e:
            app.logger.error(f"❌ Failed to register {blueprint_name} from {module_name}: {e}")
            failed.append(blueprint_name)

    app.logger.info(f"Blueprint registration complete: {len(registered)} successful, {len(failed)} failed")
    if failed:
        raise RuntimeError(f"Failed blueprints: {failed}")
    return registered


def create_app(config_name=None):
    """
    Application factory
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    try:
        app.config.from_object(config[config_name]())
        app.logger.info(f"✓ Configuration loaded successfully for {config_name} environment")
    except Exception as config_error:
        app.logger.error(f"❌ Configuration loading failed: {config_error}")
        raise

    configure_logging(app, config_name)

    db.init_app(app)
    app.logger.info("✓ Database initialized successfully")

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization', 'Accept', 'Origin'],
         expose_headers=['Content-Type', 'Content-Disposition'],
         max_age=86400)
    app.logger.info(f"✓ CORS configured with {len(app.config.get('CORS_ORIGINS', []))} allowed origins")

    registered_blueprints = register_blueprints(app)

    @app.route('/')
    def index():
        """Root endpoint with API summary"""
        return jsonify({
            'message': 'Job Documents API',
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'documents': '/api/documents',
                'jobs': '/api/jobs',
                'settings': '/api/settings'
            },
            'blueprints': registered_blueprints
        })

    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith('/api/'):
            return jsonify({
                'success': False,
                'error': f'The requested endpoint {request.path} does not exist'
            }), 404
        return jsonify({'success': False, 'error': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': f'The method {request.method} is not allowed for endpoint {request.path}'
        }), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'success': False, 'error': 'Request body too large'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({'success': False, 'error': 'An unexpected error occurred. Please try again later.'}), 500

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            app.logger.info("✓ Database connection test successful")
            db.create_all()
            app.logger.info("✓ Database tables created/verified successfully")
        except Exception as db_error:
            app.logger.error(f"❌ Database initialization error: {db_error}")
            if config_name != 'production':
                raise

    app.logger.info(f"✓ Job Documents API created ({len(list(app.url_map.iter_rules()))} routes)")
    return app


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(host='0.0.0.0', port=port, debug=local_app.config.get('DEBUG', False))
