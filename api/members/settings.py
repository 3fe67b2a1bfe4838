from flask import g, request, jsonify

from services import get_services
from utils.decorators import login_required, validate_json, handle_errors

from . import members_bp


@members_bp.route('/settings/notifications', methods=['GET'])
@login_required
@handle_errors
def get_notification_settings():
    settings = get_services().members.notification_settings(g.current_user.id)
    return jsonify({'success': True, 'data': settings})


@members_bp.route('/settings/notifications', methods=['PUT'])
@login_required
@validate_json()
@handle_errors
def update_notification_settings():
    settings = get_services().members.update_notification_settings(g.current_user.id, request.get_json())
    return jsonify({'success': True, 'message': '通知設定を保存しました', 'data': settings})


@members_bp.route('/settings/privacy', methods=['GET'])
@login_required
@handle_errors
def get_privacy_settings():
    settings = get_services().members.privacy_settings(g.current_user.id)
    return jsonify({'success': True, 'data': settings})


@members_bp.route('/settings/privacy', methods=['PUT'])
@login_required
@validate_json()
@handle_errors
def update_privacy_settings():
    settings = get_services().members.update_privacy_settings(g.current_user.id, request.get_json())
    return jsonify({'success': True, 'message': 'プライバシー設定を保存しました', 'data': settings})
