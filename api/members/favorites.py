from flask import g, jsonify

from services import get_services
from utils.decorators import login_required, log_action, handle_errors

from . import members_bp


@members_bp.route('/favorites', methods=['GET'])
@login_required
@handle_errors
def get_favorites():
    favorites = get_services().members.favorites(g.current_user.id)
    return jsonify({'success': True, 'data': favorites, 'count': len(favorites)})


@members_bp.route('/favorites/<event_id>', methods=['POST'])
@login_required
@log_action('お気に入り登録')
@handle_errors
def add_favorite(event_id):
    record = get_services().members.add_favorite(g.current_user, event_id)
    return jsonify({'success': True, 'message': 'お気に入りに登録しました', 'data': record})


@members_bp.route('/favorites/<event_id>', methods=['DELETE'])
@login_required
@handle_errors
def remove_favorite(event_id):
    removed = get_services().members.remove_favorite(g.current_user, event_id)
    return jsonify({
        'success': True,
        'message': 'お気に入りから削除しました' if removed else 'お気に入りに登録されていません',
    })


@members_bp.route('/favorites/<event_id>/toggle', methods=['POST'])
@login_required
@handle_errors
def toggle_favorite(event_id):
    favorited = get_services().members.toggle_favorite(g.current_user, event_id)
    return jsonify({'success': True, 'data': {'favorited': favorited}})
