from flask import g, request, jsonify

from services import get_services
from utils.decorators import login_required, validate_json, log_action, handle_errors

from . import auth_bp


@auth_bp.route('/password', methods=['PUT'])
@login_required
@validate_json(['old_password', 'new_password'])
@log_action('パスワード変更')
@handle_errors
def change_password():
    """パスワード変更"""
    data = request.get_json()
    get_services().users.change_password(g.current_user, data['old_password'], data['new_password'])
    return jsonify({
        'success': True,
        'message': 'パスワードを変更しました'
    })
