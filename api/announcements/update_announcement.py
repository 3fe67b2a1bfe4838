from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import announcements_bp


@announcements_bp.route('/<announcement_id>', methods=['PUT'])
@capability_required(Capability.MANAGE_ANNOUNCEMENTS)
@validate_json()
@log_action('お知らせ更新')
@handle_errors
def update_announcement(announcement_id):
    announcement = get_services().announcements.update(announcement_id, request.get_json(), g.current_user)
    return jsonify({'success': True, 'message': 'お知らせを更新しました', 'data': announcement})


@announcements_bp.route('/<announcement_id>/toggle', methods=['POST'])
@capability_required(Capability.MANAGE_ANNOUNCEMENTS)
@log_action('お知らせ公開切替')
@handle_errors
def toggle_announcement(announcement_id):
    """公開・非公開の切り替え"""
    announcement = get_services().announcements.toggle_active(announcement_id, g.current_user)
    return jsonify({'success': True, 'data': announcement})
