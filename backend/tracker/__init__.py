from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from dotenv import load_dotenv
from typing import Optional, Dict, Any

from .config.settings import load_settings
from .logging_config import configure_logging
from .store import EXTENSION_KEY, build_store

load_dotenv()

jwt = JWTManager()


def _error(status: int, title: str, detail: str):
    return {'error': {'status': status, 'title': title, 'detail': detail}}, status


@jwt.token_in_blocklist_loader
def _token_revoked(_jwt_header, jwt_payload) -> bool:
    from .services.auth import is_token_revoked
    return is_token_revoked(jwt_payload['jti'])


@jwt.unauthorized_loader
def _missing_token(reason: str):
    return _error(401, 'Unauthorized', reason)


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return _error(401, 'Unauthorized', reason)


@jwt.expired_token_loader
def _expired_token(_jwt_header, _jwt_payload):
    return _error(401, 'Unauthorized', 'Token has expired')


@jwt.revoked_token_loader
def _revoked_token(_jwt_header, _jwt_payload):
    return _error(401, 'Unauthorized', 'Token has been revoked')


def create_app(config: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)

    app.config.update(load_settings())
    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logger = configure_logging(app.config.get('LOG_LEVEL'))

    # Callers may hand in a ready store (tests); otherwise build one from config
    store = app.config.pop('STORE', None) or build_store(app.config)
    app.extensions[EXTENSION_KEY] = store
    logger.info('store backend: %s', type(store).__name__)

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.orders import orders_bp
    from .routes.part_requests import preq_bp
    from .routes.spareparts import parts_bp
    from .routes.purchase_orders import po_bp
    from .routes.reports import rpt_bp
    from .routes.portal import portal_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(orders_bp, url_prefix='/orders')
    app.register_blueprint(preq_bp, url_prefix='/part-requests')
    app.register_blueprint(parts_bp, url_prefix='/spareparts')
    app.register_blueprint(po_bp, url_prefix='/purchase-orders')
    app.register_blueprint(rpt_bp, url_prefix='/reports')
    app.register_blueprint(portal_bp, url_prefix='/portal')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            if e.code is not None and e.code >= 500:
                logger.error('%s: %s', e.name, e.description)
            return _error(e.code, e.name, e.description)
        # Unhandled exception
        logger.exception('Unhandled exception')
        return _error(500, 'Internal Server Error', 'Unexpected error')

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    return app
