"""JSON endpoints used by the embedded checkout surface."""

import logging

from flask import Blueprint, jsonify, request, current_app

from passwallet.errors import ValidationError
from passwallet.extensions import limiter
from passwallet.services.container import container

api_bp = Blueprint("api", __name__, url_prefix="/api")
log = logging.getLogger(__name__)

def _json_body():
    """Return the request's JSON object, or raise ValidationError."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object body required")
    return data

def _otp_send_limit():
    return current_app.config.get('OTP_SEND_RATE_LIMIT', '5 per minute')

def _otp_verify_limit():
    return current_app.config.get('OTP_VERIFY_RATE_LIMIT', '10 per minute')

@api_bp.route("/config", methods=["GET"])
def wallet_config():
    """Tell the host page where the wallet surface lives."""
    return jsonify({"WALLET_ORIGIN": current_app.config.get("WALLET_URL", "")})

@api_bp.route("/lookup", methods=["POST"])
def lookup():
    """Check whether an email is known and has a passkey."""
    data = _json_body()
    return jsonify(container().get('account_service').lookup(data.get('email')))

@api_bp.route("/otp/send", methods=["POST"])
@limiter.limit(_otp_send_limit)
def send_otp():
    data = _json_body()
    container().get('otp_service').send_code(data.get('email'))
    return jsonify({"success": True, "message": "OTP sent"})

@api_bp.route("/otp/verify", methods=["POST"])
@limiter.limit(_otp_verify_limit)
def verify_otp():
    data = _json_body()
    user = container().get('otp_service').verify_code(data.get('email'), data.get('otp'))
    return jsonify({"verified": True, "user": user})

@api_bp.route("/register/options", methods=["POST"])
def registration_options():
    """Start a passkey registration ceremony."""
    data = _json_body()
    options = container().get('passkey_service').begin_registration(
        data.get('email'), data.get('displayName')
    )
    return jsonify(options)

@api_bp.route("/register/verify", methods=["POST"])
def registration_verify():
    """Finish a passkey registration ceremony."""
    data = _json_body()
    user = container().get('passkey_service').complete_registration(
        data.get('email'), data.get('response')
    )
    return jsonify({"verified": True, "user": user})

@api_bp.route("/login/options", methods=["POST"])
def login_options():
    """Start a passkey login; without an email this is the silent/autofill attempt."""
    data = _json_body()
    return jsonify(container().get('passkey_service').begin_login(data.get('email')))

@api_bp.route("/login/verify", methods=["POST"])
def login_verify():
    data = _json_body()
    user = container().get('passkey_service').complete_login(
        data.get('response'),
        email=data.get('email'),
        session_id=data.get('sessionId'),
    )
    return jsonify({"verified": True, "user": user})

@api_bp.route("/pay", methods=["POST"])
def pay():
    """Run the mock payment for the selected card."""
    data = _json_body()
    result = container().get('payment_service').pay(
        data.get('email'), data.get('cardId'), data.get('amount')
    )
    return jsonify(result)
