from flask import jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, handle_errors

from . import announcements_bp


@announcements_bp.route('', methods=['GET'])
@handle_errors
def get_announcements():
    """公開中のお知らせ（新しい順）"""
    announcements = get_services().announcements.list(active_only=True)
    return jsonify({'success': True, 'data': announcements, 'count': len(announcements)})


@announcements_bp.route('/all', methods=['GET'])
@capability_required(Capability.MANAGE_ANNOUNCEMENTS)
@handle_errors
def get_all_announcements():
    """管理画面用: 非公開を含むすべてのお知らせ"""
    announcements = get_services().announcements.list(active_only=False)
    return jsonify({'success': True, 'data': announcements, 'count': len(announcements)})
