"""
REST API endpoints for the MetaPoker application.
"""

import logging
from flask import Blueprint, jsonify, render_template

from src.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)


def create_api_blueprint(services):
    """Create and configure the API Blueprint with service dependencies."""
    game_room = services['game_room']
    metrics_service = services['metrics_service']

    api = Blueprint('api', __name__)

    @api.route('/')
    def index():
        """Serve the main game interface."""
        return render_template('index.html')

    @api.route('/health')
    def health():
        """Report liveness with the current player count and phase."""
        with game_room.operation():
            players = game_room.player_count
            game_state = game_room.phase.value

        return jsonify({
            'status': 'OK',
            'players': players,
            'gameState': game_state,
            'timestamp': utc_timestamp()
        })

    @api.route('/metrics')
    def metrics():
        """Performance report: uptime, counters, memory, error rate and votes per round."""
        return jsonify(metrics_service.generate_report())

    return api
