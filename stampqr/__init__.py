import logging
import time

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.middleware.proxy_fix import ProxyFix

# .env must be loaded before Config reads the environment
load_dotenv()

from .config import Config
from .errors import StampError
from .models import db
from .services import init_services

logger = logging.getLogger(__name__)


def create_app(overrides: dict | None = None, clock=None):
    app = Flask(__name__)
    app.config.from_object(Config())
    if overrides:
        app.config.update(overrides)

    logging.getLogger('stampqr').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    Migrate(app, db)
    # Trust reverse proxy headers (Render/Heroku)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    with app.app_context():
        db.create_all()

    init_services(app, clock=clock or time.time)
    if not app.config.get('JWT_SECRET'):
        logger.error('JWT_SECRET is not set; token issuance and redemption will fail')

    from .routes_api import bp as api_bp
    from .routes_admin import bp as admin_bp
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.errorhandler(StampError)
    def handle_stamp_error(exc: StampError):
        if exc.status_code >= 500:
            logger.error('%s: %s', exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.get('/health')
    def health():
        return {'ok': True}

    return app
