"""
WSGI entry point for MetaPoker application.
Used for production deployment with Gunicorn.
"""

from app import app, socketio, cleanup_on_exit
from src.error_handler import install_process_error_handlers

# Fatal errors in the worker stop the timer cadence before the process exits
install_process_error_handlers(cleanup_on_exit)

if __name__ == "__main__":
    # For development without Gunicorn
    socketio.run(app, host='0.0.0.0', port=8000, debug=True)
else:
    # For production WSGI servers
    application = app
