from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import events_bp, logger


@events_bp.route('', methods=['POST'])
@capability_required(Capability.CREATE_PRACTICE)
@validate_json(['name', 'type', 'event_date', 'start_time', 'venue', 'prefecture'])
@log_action('イベント作成')
@handle_errors
def create_event():
    """イベント作成（大会は管理者のみ）"""
    event = get_services().events.create(request.get_json(), g.current_user)

    logger.info(f"ユーザー {g.current_user.id} がイベントを作成: {event['name']}")

    return jsonify({
        'success': True,
        'message': 'イベントを作成しました',
        'data': event,
    }), 201
