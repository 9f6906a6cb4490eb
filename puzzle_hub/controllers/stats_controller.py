"""
Stats Controller

Handles leaderboard and personal statistics endpoints. Records are read from
storage on every request and aggregated in memory.
"""

from flask import Blueprint, request, jsonify
from ..context import get_context
from ..models.game import Variant
from ..services.stats_service import DEFAULT_VIEW, LEADERBOARD_VIEWS, StatsAggregator
from ..utils.game_logger import game_logger
from .responses import error_response

stats_bp = Blueprint('stats', __name__)


def _flag(value):
    return (value or '').lower() in ('1', 'true', 'yes')


@stats_bp.route('/<variant>/leaderboard', methods=['GET'])
def leaderboard(variant):
    """Ranked rows for one leaderboard view."""
    try:
        view = request.args.get('view')
        show_all = _flag(request.args.get('show_all'))
        game_logger.log_user_action(request, 'leaderboard', variant=variant, view=view, show_all=show_all)

        game = Variant.parse(variant)
        view = view or DEFAULT_VIEW[game]

        results = get_context().results.query_all(game)
        aggregator = StatsAggregator(game, results, show_all=show_all)
        rows = aggregator.leaderboard(view)

        response_data = {
            'success': True,
            'variant': game.value,
            'view': view,
            'views': list(LEADERBOARD_VIEWS[game]),
            'total_results': len(results),
            'rows': rows
        }
        game_logger.log_server_response(request, 'leaderboard', True, response_data, rows=len(rows))
        return jsonify(response_data)

    except Exception as e:
        return error_response('leaderboard', e)


@stats_bp.route('/<variant>/stats/<user_id>', methods=['GET'])
def personal_stats(variant, user_id):
    """A player's own statistics and recent games."""
    try:
        game_logger.log_user_action(request, 'personal_stats', variant=variant, user_id=user_id)

        game = Variant.parse(variant)
        results = get_context().results.query_by_user(game, user_id)
        stats = StatsAggregator(game, results).personal_stats(user_id)

        response_data = {
            'success': True,
            'variant': game.value,
            'stats': stats
        }
        game_logger.log_server_response(request, 'personal_stats', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        return error_response('personal_stats', e)
