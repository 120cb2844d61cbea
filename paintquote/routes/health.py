# paintquote/routes/health.py
from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from datetime import datetime

from paintquote.config import validate_config
from paintquote.models import db

health_bp = Blueprint('health', __name__)

CRITICAL_BLUEPRINTS = ('auth', 'pricing_schemes', 'quotes')


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Service health: database connectivity, configuration and registered blueprints.
    Returns 503 when the database is unreachable.
    """
    health_status = {
        'status': 'healthy',
        'app': 'PaintQuote API',
        'version': '1.0.0',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': {}
    }
    status_code = 200

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
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        health_status['status'] = 'unhealthy'
        status_code = 503

    config_valid, config_message = validate_config()
    health_status['checks']['configuration'] = {
        'status': 'healthy' if config_valid else 'unhealthy',
        'message': config_message,
        'testing': bool(current_app.config.get('TESTING')),
        'debug': bool(current_app.config.get('DEBUG')),
        'cors_configured': bool(current_app.config.get('CORS_ORIGINS')),
        'default_tier': current_app.config.get('DEFAULT_TIER'),
    }

    registered_blueprints = list(current_app.blueprints.keys())
    missing_blueprints = [name for name in CRITICAL_BLUEPRINTS if name not in registered_blueprints]
    health_status['checks']['application'] = {
        'status': 'healthy' if not missing_blueprints else 'warning',
        'blueprints': {
            'registered': registered_blueprints,
            'missing_critical': missing_blueprints,
        },
        'routes': {
            'total': len(list(current_app.url_map.iter_rules())),
            'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                               if rule.rule.startswith('/api/')])
        }
    }

    if missing_blueprints:
        current_app.logger.warning(f"Missing critical blueprints: {missing_blueprints}")
        if health_status['status'] == 'healthy':
            health_status['status'] = 'degraded'

    return jsonify(health_status), status_code
