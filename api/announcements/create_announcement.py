from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import announcements_bp


@announcements_bp.route('', methods=['POST'])
@capability_required(Capability.MANAGE_ANNOUNCEMENTS)
@validate_json(['title', 'content'])
@log_action('お知らせ作成')
@handle_errors
def create_announcement():
    """お知らせ作成（上限を超えると古いものから削除）"""
    announcement = get_services().announcements.create(request.get_json(), g.current_user)
    return jsonify({
        'success': True,
        'message': 'お知らせを作成しました',
        'data': announcement,
    }), 201
