"""
Initialize Flask extensions for the application.

These extensions are instantiated here and initialized in the application factory.
"""

from flask_mail import Mail
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Flask-Mail for delivering one-time codes
mail = Mail()

# Rate limiting for the one-time-code endpoints
limiter = Limiter(key_func=get_remote_address)

def init_extensions(app):
    """Initialize all Flask extensions."""
    mail.init_app(app)
    limiter.init_app(app)
