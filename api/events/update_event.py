from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import events_bp


@events_bp.route('/<event_id>', methods=['PUT'])
@capability_required(Capability.MANAGE_OWN_EVENTS)
@validate_json()
@log_action('イベント更新')
@handle_errors
def update_event(event_id):
    """イベント更新（作成者または管理者）"""
    event = get_services().events.update(event_id, request.get_json(), g.current_user)
    return jsonify({
        'success': True,
        'message': 'イベントを更新しました',
        'data': event,
    })
