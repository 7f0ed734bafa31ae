"""
MetaPoker - A real-time planning poker room with a shared 3D scene.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

from flask import Flask
from flask_socketio import SocketIO
import logging
import atexit
import sys

from container import configure_container
from config_factory import load_config, ConfigurationFactory, ConfigError
from src.error_handler import install_process_error_handlers, install_signal_handlers
from src.services.rate_limit_service import EventQueueManager, set_event_queue_manager
from src.services.metrics_service import set_metrics_service
from src.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Load and apply configuration; invalid settings abort startup
try:
    app_config = load_config()
except ConfigError as e:
    logging.basicConfig(level=logging.INFO)
    logger.critical(f"FATAL: Invalid configuration, server shutting down. Error: {e}")
    sys.exit(1)

configure_logging(app_config)
config_factory = ConfigurationFactory()
app.config.update(config_factory.get_flask_config())

# Initialize Socket.IO with CORS from configuration
socketio = SocketIO(app, cors_allowed_origins=app_config.cors_allowed_origins, async_mode='eventlet')

# Configure service container with dependencies
container = configure_container(socketio=socketio, app_config=app_config)

services = {
    'game_room': container.get('GameRoom'),
    'session_service': container.get('SessionService'),
    'broadcast_service': container.get('BroadcastService'),
    'timer_service': container.get('TimerService'),
    'validation_service': container.get('ValidationService'),
    'metrics_service': container.get('MetricsService')
}
game_room = services['game_room']
session_service = services['session_service']
timer_service = services['timer_service']
metrics_service = services['metrics_service']

# Performance monitoring
set_metrics_service(metrics_service)
metrics_service.start_collection()

# Initialize rate limiting
event_queue_manager = EventQueueManager(
    max_events_per_window=app_config.rate_limit_max,
    window_seconds=app_config.rate_limit_window_seconds,
    max_events_per_second=app_config.rate_limit_per_second,
    max_throttled_events_per_second=app_config.move_rate_limit_per_second
)
set_event_queue_manager(event_queue_manager)

# Register REST endpoints
from src.routes.api import create_api_blueprint
api_blueprint = create_api_blueprint({'game_room': game_room, 'metrics_service': metrics_service})
app.register_blueprint(api_blueprint)

# Register Socket.IO handlers
from src.handlers.socket_handlers import register_socket_handlers
register_socket_handlers(socketio)


def cleanup_on_exit():
    """Clean up resources on application exit."""
    logger.info("Shutting down MetaPoker server...")
    timer_service.stop()
    metrics_service.generate_report()
    metrics_service.shutdown()


atexit.register(cleanup_on_exit)

if __name__ == '__main__':
    install_process_error_handlers(cleanup_on_exit)
    install_signal_handlers(cleanup_on_exit)

    logger.info(f"Starting MetaPoker server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        cleanup_on_exit()
