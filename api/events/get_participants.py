from flask import g, jsonify

from services import get_services
from utils.decorators import handle_errors

from . import events_bp


@events_bp.route('/<event_id>/participants', methods=['GET'])
@handle_errors
def get_participants(event_id):
    """参加者一覧（非表示設定の参加者は主催者と管理者にのみ表示）"""
    result = get_services().members.visible_participants(event_id, viewer=g.current_user)
    return jsonify({
        'success': True,
        'data': result['participants'],
        'hidden_count': result['hidden_count'],
    })
