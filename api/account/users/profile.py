from flask import g, request, jsonify

from services import get_services
from utils.decorators import login_required, validate_json, log_action, handle_errors

from . import users_bp


@users_bp.route('/me', methods=['GET'])
@login_required
def get_profile():
    """ログイン中ユーザーのプロフィール"""
    services = get_services()
    user = g.current_user
    data = user.to_dict()
    data['pending_organizer_application'] = any(
        a['status'] == 'pending' for a in services.applications.for_user(user.id)
    )
    return jsonify({'success': True, 'data': data})


@users_bp.route('/me', methods=['PUT'])
@login_required
@validate_json()
@log_action('プロフィール更新')
@handle_errors
def update_profile():
    """プロフィール更新"""
    user = get_services().users.update_profile(g.current_user, request.get_json())
    return jsonify({
        'success': True,
        'message': 'プロフィールを更新しました',
        'data': user.to_dict(),
    })
