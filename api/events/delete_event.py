from flask import g, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, log_action, handle_errors

from . import events_bp


@events_bp.route('/<event_id>', methods=['DELETE'])
@capability_required(Capability.MANAGE_OWN_EVENTS)
@log_action('イベント削除')
@handle_errors
def delete_event(event_id):
    """イベント削除（論理削除）"""
    get_services().events.delete(event_id, g.current_user)
    return jsonify({
        'success': True,
        'message': 'イベントを削除しました'
    })
