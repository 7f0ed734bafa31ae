"""
Logging configuration for MetaPoker.

Configures the root logger once at startup from the application config.
"""

import logging
import os

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
LOG_FILE_NAME = 'metapoker.log'


def configure_logging(app_config) -> None:
    """
    Configure root logging from the application config.

    Args:
        app_config: AppConfig providing log_level, log_to_console, log_to_file and log_path
    """
    handlers = []

    if app_config.log_to_console:
        handlers.append(logging.StreamHandler())

    if app_config.log_to_file:
        os.makedirs(app_config.log_path, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(app_config.log_path, LOG_FILE_NAME)))

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, app_config.log_level.upper()),
        format=LOG_FORMAT,
        handlers=handlers
    )
    logging.getLogger(__name__).debug(f"Logging configured at level {app_config.log_level}")
