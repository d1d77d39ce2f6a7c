from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

health_bp = Blueprint('health', __name__)

@health_bp.route('/health', methods=['GET'])
def health_check():
    """Simple health check endpoint."""
    return jsonify({
        "status": "ok",
        "version": current_app.config.get("VERSION", "1.0.0"),
        "timestamp": datetime.now(timezone.utc).isoformat()
    })
