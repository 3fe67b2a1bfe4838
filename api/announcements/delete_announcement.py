from flask import g, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, log_action, handle_errors

from . import announcements_bp


@announcements_bp.route('/<announcement_id>', methods=['DELETE'])
@capability_required(Capability.MANAGE_ANNOUNCEMENTS)
@log_action('お知らせ削除')
@handle_errors
def delete_announcement(announcement_id):
    get_services().announcements.delete(announcement_id, g.current_user)
    return jsonify({'success': True, 'message': 'お知らせを削除しました'})
