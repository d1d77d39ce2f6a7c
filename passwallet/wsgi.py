"""
WSGI entry point for the application.

This file is used by Gunicorn to run the application in production.
"""

import os
import logging
from passwallet import create_app

logger = logging.getLogger(__name__)

# Create the Flask application instance
app = create_app()

if __name__ == "__main__":
    # Run the application when executed directly (not through Gunicorn)
    port = int(os.environ.get("PORT", 3001))
    
    logger.info(f"Starting wallet service on port {port}")
    app.run(host="0.0.0.0", port=port)
