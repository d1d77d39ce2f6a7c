"""Security headers and cross-origin access for the wallet API"""

from flask import request

PERMISSIONS_POLICY = 'publickey-credentials-get=(*), publickey-credentials-create=(*)'

def allowed_cors_origins(config):
    """Wallet origins plus the merchant origins allowed to call the API."""
    return set(config.get('WEBAUTHN_ALLOWED_ORIGINS', [])) | set(config.get('ALLOWED_MERCHANT_ORIGINS', []))

def init_security(app):
    """Initialize security features for Flask app"""
    cors_origins = allowed_cors_origins(app.config)
    
    @app.before_request
    def answer_preflight():
        if request.method == 'OPTIONS' and request.headers.get('Origin') in cors_origins:
            return app.make_default_options_response()
        return None
    
    @app.after_request
    def add_security_headers(response):
        # Ceremonies run inside a cross-origin iframe
        response.headers['Permissions-Policy'] = PERMISSIONS_POLICY
        response.headers['X-Content-Type-Options'] = 'nosniff'
        
        origin = request.headers.get('Origin')
        if origin and origin in cors_origins:
            response.headers['Access-Control-Allow-Origin'] = origin
            response.headers['Access-Control-Allow-Credentials'] = 'true'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
            response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
            response.vary.add('Origin')
        return response
