"""
Gunicorn configuration for MetaPoker application.
Optimized for Socket.IO with eventlet workers.
"""

import sys
import logging

from config_factory import load_config, ConfigError


def on_starting(server):
    """
    Server hook that runs when the master process is starting.
    We use this to validate the environment configuration before workers are forked.
    If validation fails, we exit, preventing the server from starting.
    """
    logger = logging.getLogger(__name__)
    logger.info("Validating configuration before starting workers...")
    try:
        validated = load_config()
        logger.info(f"Configuration valid for environment: {validated.environment.value}")
    except ConfigError as e:
        logger.critical(f"FATAL: Configuration validation failed. Server shutting down. Error: {e}")
        sys.exit(1)


# Load configuration (renamed to avoid conflicts with gunicorn's internal 'config')
try:
    app_config = load_config()
except ConfigError as e:
    sys.stderr.write(f"FATAL: Configuration validation failed: {e}\n")
    sys.exit(1)

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1  # Must be 1: the game room lives in process memory
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "metapoker"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
pidfile = None
user = None
group = None
tmp_upload_dir = None

# SSL (for production)
keyfile = None
certfile = None
