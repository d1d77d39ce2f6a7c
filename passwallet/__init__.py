import os
import logging
from flask import Flask

from passwallet.extensions import init_extensions
from passwallet.errors import register_error_handlers
from passwallet.security import init_security
from passwallet.services.container import init_container
from passwallet.utils.logging_config import configure_logging

log = logging.getLogger(__name__)

def create_app(test_config=None):
    """Application factory function."""
    app = Flask(__name__, instance_relative_config=True)
    
    # Load configuration
    from passwallet.config import get_config
    if test_config is None:
        config_name = os.environ.get('FLASK_ENV', 'default')
        app.config.from_object(get_config(config_name))
    else:
        # Test configs layer over the testing defaults
        app.config.from_object(get_config('testing'))
        app.config.from_mapping(test_config)
    
    _derive_webauthn_settings(app, test_config or {})
    
    configure_logging(app)
    init_extensions(app)
    init_security(app)
    register_error_handlers(app)
    register_blueprints(app)
    
    service_container = init_container(app)
    if app.config.get('SEED_DEMO_USER'):
        service_container.get('account_service').seed_demo_user()
    
    log.info(f"{app.config.get('APP_NAME')} ready at {app.config.get('WALLET_URL')} (rp_id={app.config.get('WEBAUTHN_RP_ID')})")
    return app

def _derive_webauthn_settings(app, overrides):
    """Keep the relying party in step with the wallet URL."""
    from urllib.parse import urlparse
    if "WEBAUTHN_RP_ID" not in overrides and not os.environ.get("WEBAUTHN_RP_ID"):
        app.config['WEBAUTHN_RP_ID'] = urlparse(app.config['WALLET_URL']).hostname
    origins = app.config.get('WEBAUTHN_ALLOWED_ORIGINS') or []
    if app.config['WALLET_URL'] not in origins:
        app.config['WEBAUTHN_ALLOWED_ORIGINS'] = [app.config['WALLET_URL']] + list(origins)

def register_blueprints(app):
    """Register all blueprints with the application."""
    from passwallet.web.api import api_bp
    from passwallet.web.health import health_bp
    
    app.register_blueprint(api_bp)
    app.register_blueprint(health_bp)
