"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import pytest
import os
from unittest.mock import Mock

# Ensure testing environment before the app module is imported
os.environ['TESTING'] = '1'
os.environ['FLASK_ENV'] = 'testing'


@pytest.fixture(scope="session")
def app():
    """Create Flask app for testing."""
    from app import app as flask_app
    return flask_app


@pytest.fixture(scope="session")
def socketio():
    """Create SocketIO instance for testing."""
    from app import socketio as socketio_instance
    return socketio_instance


@pytest.fixture(scope="function")
def app_config():
    """A default testing configuration, independent of the process environment."""
    from config_factory import AppConfig, Environment
    return AppConfig(environment=Environment.TESTING)


@pytest.fixture(scope="function")
def mock_socketio():
    """A stand-in SocketIO server recording emit calls."""
    return Mock()


@pytest.fixture(scope="function")
def container(app_config, mock_socketio):
    """Create an isolated service container wired like the application's."""
    from container import ServiceContainer

    test_container = ServiceContainer()
    test_container.set_external_dependency('socketio', mock_socketio)
    test_container.set_external_dependency('AppConfig', app_config)
    test_container.configure_services()

    yield test_container

    if 'TimerService' in test_container._instances:
        test_container.get('TimerService').stop()


@pytest.fixture(scope="function")
def game_settings(container):
    """Provide GameSettings through dependency injection."""
    return container.get('GameSettings')


@pytest.fixture(scope="function")
def game_room(container):
    """Provide the GameRoom through dependency injection."""
    return container.get('GameRoom')


@pytest.fixture(scope="function")
def session_service(container):
    """Provide SessionService through dependency injection."""
    return container.get('SessionService')


@pytest.fixture(scope="function")
def broadcast_service(container):
    """Provide BroadcastService through dependency injection."""
    return container.get('BroadcastService')


@pytest.fixture(scope="function")
def room_state_presenter(container):
    """Provide RoomStatePresenter through dependency injection."""
    return container.get('RoomStatePresenter')


@pytest.fixture(scope="function")
def timer_service(container):
    """Provide TimerService through dependency injection."""
    return container.get('TimerService')


@pytest.fixture(scope="function")
def validation_service(container):
    """Provide ValidationService through dependency injection."""
    return container.get('ValidationService')


@pytest.fixture(scope="function")
def error_response_factory(container):
    """Provide ErrorResponseFactory through dependency injection."""
    return container.get('ErrorResponseFactory')


@pytest.fixture(scope="function")
def request_context(app):
    """Push a Flask request context so ``flask.request`` can be patched."""
    with app.test_request_context():
        yield
