"""
Socket.IO event handlers for MetaPoker.

This module provides the main registration function and the
connection/disconnection handlers. Room and game events are routed through
the SocketEventRouter to the handler classes.
"""

import logging
from flask import request
from flask_socketio import emit

from container import get_container
from src.core.events import ClientEvents, ServerEvents
from src.services.rate_limit_service import get_event_queue_manager
from .socket_event_router import setup_router
from .room_connection_handler import RoomConnectionHandler
from .game_action_handler import GameActionHandler
from .player_movement_handler import PlayerMovementHandler

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio_instance):
    """Register all socket handlers with the SocketIO instance."""

    router = setup_router(socketio_instance)

    room_handler = RoomConnectionHandler()
    game_handler = GameActionHandler()
    movement_handler = PlayerMovementHandler()

    # Connection lifecycle events bypass the router
    socketio_instance.on_event('connect', handle_connect)
    socketio_instance.on_event('disconnect', handle_disconnect)

    router.register_route(ClientEvents.JOIN_ROOM, room_handler.handle_join_room)
    router.register_route(ClientEvents.LEAVE_ROOM, room_handler.handle_leave_room)
    router.register_route(ClientEvents.REQUEST_GAME_STATE, room_handler.handle_request_game_state)

    router.register_route(ClientEvents.CAST_VOTE, game_handler.handle_cast_vote)
    router.register_route(ClientEvents.ADMIN_REVEAL_VOTES, game_handler.handle_admin_reveal_votes)
    router.register_route(ClientEvents.RESET_GAME, game_handler.handle_reset_game)
    router.register_route(ClientEvents.UPDATE_STORY, game_handler.handle_update_story)
    router.register_route(ClientEvents.START_TIMER, game_handler.handle_start_timer)

    router.register_route(ClientEvents.PLAYER_MOVE, movement_handler.handle_player_move)

    router.register_with_socketio()

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router


def handle_connect(auth=None):
    """Handle client connection, enforcing the Origin allowlist in production."""
    container = get_container()
    app_config = container.get('AppConfig')

    origin = request.headers.get('Origin')
    allowed_origins = app_config.cors_allowed_origins
    if app_config.is_production and allowed_origins != '*':
        if origin and origin not in allowed_origins:
            logger.warning(f'Rejecting connection from disallowed Origin: {origin}')
            return False

    container.get('MetricsService').record_connection()
    logger.info(f'Client connected: {request.sid} from Origin: {origin}')
    emit(ServerEvents.CONNECTED, {'socketId': request.sid, 'message': 'Connected to MetaPoker server'})


def handle_disconnect(reason=None):
    """Handle client disconnection: remove the player once and notify the room."""
    logger.info(f'Client disconnected: {request.sid}')

    get_container().get('MetricsService').record_disconnection()

    event_queue_manager = get_event_queue_manager()
    if event_queue_manager is not None:
        event_queue_manager.forget_client(request.sid)

    # A second disconnect for the same socket finds no session
    RoomConnectionHandler().remove_connection(request.sid)
