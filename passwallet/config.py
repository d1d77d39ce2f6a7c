import os
from urllib.parse import urlparse


def _split_origins(value):
    """Split a comma-separated origin list, dropping blanks."""
    return [origin.strip().rstrip('/') for origin in (value or '').split(',') if origin.strip()]


def _dedupe(origins):
    seen = []
    for origin in origins:
        if origin and origin not in seen:
            seen.append(origin)
    return seen


class Config:
    """Base configuration for the wallet service."""
    
    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change-in-production'
    DEBUG = False
    TESTING = False
    JSON_SORT_KEYS = False
    
    # Application settings
    APP_NAME = 'PassWallet'
    VERSION = '1.0.0'
    PORT = int(os.environ.get('PORT', 3001))
    
    # Wallet surface identity
    WALLET_URL = os.environ.get('WALLET_URL', f"http://wallet.localhost:{PORT}").rstrip('/')
    MERCHANT_URL = os.environ.get('MERCHANT_URL', 'http://store.localhost:3000').rstrip('/')
    
    # WebAuthn relying party
    WEBAUTHN_RP_ID = os.environ.get('WEBAUTHN_RP_ID') or urlparse(WALLET_URL).hostname
    WEBAUTHN_RP_NAME = os.environ.get('WEBAUTHN_RP_NAME', 'PassWallet')
    WEBAUTHN_ALLOWED_ORIGINS = _dedupe([
        WALLET_URL,
        f"http://localhost:{PORT}",
        f"http://127.0.0.1:{PORT}",
        'http://wallet.localhost:3001',
    ] + _split_origins(os.environ.get('WEBAUTHN_EXTRA_ORIGINS')))
    
    # Origins allowed to call the API from the browser
    ALLOWED_MERCHANT_ORIGINS = _dedupe([
        MERCHANT_URL,
        'http://localhost:3000',
        'http://127.0.0.1:3000',
        'http://store.localhost:3000',
    ] + _split_origins(os.environ.get('MERCHANT_EXTRA_ORIGINS')))
    
    # One-time codes
    OTP_DELIVERY = os.environ.get('OTP_DELIVERY', 'log')
    OTP_SEND_RATE_LIMIT = os.environ.get('OTP_SEND_RATE_LIMIT', '5 per minute')
    OTP_VERIFY_RATE_LIMIT = os.environ.get('OTP_VERIFY_RATE_LIMIT', '10 per minute')
    
    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    
    # Mail settings
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 25))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'false').lower() == 'true'
    MAIL_USE_SSL = os.environ.get('MAIL_USE_SSL', 'false').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@example.com')
    
    # Demo data
    SEED_DEMO_USER = os.environ.get('SEED_DEMO_USER', 'true').lower() == 'true'
    
    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'standard')


class DevelopmentConfig(Config):
    """Development configuration."""
    
    DEBUG = True
    
    # Print emails to console instead of sending
    MAIL_DEBUG = True


class TestingConfig(Config):
    """Testing configuration."""
    
    TESTING = True
    DEBUG = True
    
    RATELIMIT_ENABLED = False
    
    # Disable emails
    MAIL_SUPPRESS_SEND = True
    
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    """Production configuration."""
    
    # Ensure proper secret key is set
    SECRET_KEY = os.environ.get('SECRET_KEY')
    
    SEED_DEMO_USER = os.environ.get('SEED_DEMO_USER', 'false').lower() == 'true'
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')


# Configuration dictionary
config_dict = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}

def get_config(config_name=None):
    """Get configuration class based on environment."""
    if not config_name:
        config_name = os.environ.get('FLASK_ENV', 'default')
    return config_dict.get(config_name, config_dict['default'])
