import os
import importlib
import logging

import click
from flask import Flask, request, jsonify
from flask_login import LoginManager
from flask_cors import CORS
from sqlalchemy import text

from paintquote.config import config, get_config_name
from paintquote.models import db, Tenant, User
from paintquote.seeds import create_default_pricing_schemes
from paintquote.services.events import EXTENSION_KEY, CalculationCompleted, EventBus, log_calculation

BLUEPRINT_IMPORTS = [
    ('paintquote.routes.auth', 'auth_bp', '/api/auth'),
    ('paintquote.routes.pricing_schemes', 'pricing_schemes_bp', '/api/pricing-schemes'),
    ('paintquote.routes.quotes', 'quotes_bp', '/api/quotes'),
    ('paintquote.routes.health', 'health_bp', '/api'),
]


def create_app(config_name=None):
    """
    Application factory
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    try:
        config_instance = config[config_name]()
        app.config.from_object(config_instance)
        app.logger.info(f"✓ Configuration loaded successfully for {config_name} environment")

        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if 'sqlite' in db_uri.lower():
            app.logger.info("✓ Using SQLite database")
        elif 'postgresql' in db_uri.lower():
            app.logger.info("✓ Using PostgreSQL database")
    except Exception as config_error:
        app.logger.error(f"❌ Configuration loading failed: {config_error}")
        raise

    # Relative SQLite paths live in the instance folder
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError as e:
        app.logger.warning(f"Could not create instance folder: {e}")

    configure_logging(app, config_name)

    db.init_app(app)
    app.logger.info("✓ Database initialized successfully")

    cors_origins = app.config.get('CORS_ORIGINS', [])
    CORS(app,
         origins=cors_origins,
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
         allow_headers=[
             'Content-Type',
             'Authorization',
             'X-Requested-With',
             'X-Magic-Link-Token',
             'Accept',
             'Origin',
         ],
         expose_headers=['Content-Type', 'Content-Disposition'],
         max_age=86400
    )
    app.logger.info(f"✓ CORS configured with {len(cors_origins)} allowed origins")

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'strong'

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """JSON 401 for every unauthenticated request; the API never redirects"""
        app.logger.warning(f"Unauthorized access attempt to {request.path} from {request.remote_addr}")
        return jsonify({
            'error': 'Authentication required',
            'message': 'You must be logged in to access this endpoint',
            'code': 'UNAUTHORIZED'
        }), 401

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError) as e:
            app.logger.warning(f"Invalid user_id provided to user_loader: {user_id} - {e}")
            return None

    # Calculation notifications
    event_bus = EventBus()
    event_bus.subscribe(CalculationCompleted, log_calculation)
    app.extensions[EXTENSION_KEY] = event_bus

    registered_blueprints, failed_blueprints = register_blueprints(app)

    @app.route('/')
    def index():
        return jsonify({
            'message': 'PaintQuote API',
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'auth': '/api/auth',
                'pricing_schemes': '/api/pricing-schemes',
                'quotes': '/api/quotes',
            },
            'blueprint_status': {
                'registered': registered_blueprints,
                'failed': failed_blueprints,
                'total_routes': len(list(app.url_map.iter_rules()))
            }
        })

    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            app.logger.info("✓ Database connection test successful")

            db.create_all()
            app.logger.info("✓ Database tables created/verified successfully")
        except Exception as db_error:
            app.logger.error(f"❌ Database initialization error: {db_error}")
            if config_name == 'production':
                app.logger.error("Production database error - app will start but may not function properly")
            else:
                raise

    app.logger.info(f"✓ PaintQuote API created successfully ({config_name})")
    app.logger.info(f"✓ Registered blueprints: {len(registered_blueprints)}")
    return app


def configure_logging(app, config_name):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    if config_name == 'production':
        logging.basicConfig(level=level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
        app.logger.setLevel(level)
        app.logger.info("✓ Production logging configured")
    elif app.debug:
        logging.basicConfig(level=logging.DEBUG)
        app.logger.setLevel(logging.DEBUG)
        app.logger.info("✓ Debug logging enabled")
    else:
        app.logger.setLevel(level)


def register_blueprints(app):
    """Import and register each blueprint on its own so one broken module does not take down the rest"""
    blueprints_to_register = []
    for module_name, blueprint_name, url_prefix in BLUEPRINT_IMPORTS:
        try:
            module = importlib.import_module(module_name)
            blueprint = getattr(module, blueprint_name)
            blueprints_to_register.append((blueprint, url_prefix, blueprint_name))
        except ImportError as e:
            app.logger.error(f"❌ Failed to import {blueprint_name} from {module_name}: {e}")
        except AttributeError as e:
            app.logger.error(f"❌ Blueprint {blueprint_name} not found in {module_name}: {e}")

    registered_blueprints = []
    failed_blueprints = []
    for blueprint, url_prefix, name in blueprints_to_register:
        try:
            app.register_blueprint(blueprint, url_prefix=url_prefix)
            registered_blueprints.append(name)
            app.logger.info(f"✓ Registered {name} blueprint at {url_prefix}")
        except Exception as e:
            app.logger.error(f"❌ Failed to register {name} blueprint: {e}")
            failed_blueprints.append(name)

    app.logger.info(
        f"Blueprint registration complete: {len(registered_blueprints)} successful, "
        f"{len(failed_blueprints)} failed"
    )
    return registered_blueprints, failed_blueprints


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': f'The requested resource {request.path} does not exist',
            'code': 'NOT_FOUND'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED',
            'allowed_methods': list(error.valid_methods) if getattr(error, 'valid_methods', None) else None
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR'
        }), 500


def register_commands(app):
    @app.cli.command('create-user')
    @click.option('--email', required=True)
    @click.option('--password', required=True)
    @click.option('--tenant', 'tenant_name', required=True, help='Tenant name; created when missing.')
    @click.option('--role', type=click.Choice(['admin', 'estimator']), default='admin')
    def create_user_command(email, password, tenant_name, role):
        """Create a user (and its tenant)."""
        tenant = Tenant.query.filter_by(name=tenant_name).first()
        if tenant is None:
            tenant = Tenant(name=tenant_name)
            db.session.add(tenant)
            db.session.flush()

        if User.query.filter_by(email=email.lower()).first():
            raise click.ClickException(f"User {email} already exists")

        user = User(tenant_id=tenant.id, email=email.lower(), role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created {role} {email} in tenant {tenant.name} (id {tenant.id})")

    @app.cli.command('seed-pricing-schemes')
    @click.option('--tenant-id', type=int, required=True)
    def seed_pricing_schemes_command(tenant_id):
        """Create the default pricing schemes for a tenant."""
        if db.session.get(Tenant, tenant_id) is None:
            raise click.ClickException(f"Tenant {tenant_id} not found")

        created = create_default_pricing_schemes(tenant_id)
        click.echo(f"Created {len(created)} pricing scheme(s) for tenant {tenant_id}")


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
