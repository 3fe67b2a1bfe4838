from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import users_bp


@users_bp.route('/<user_id>/role', methods=['PUT'])
@capability_required(Capability.MANAGE_ORGANIZERS)
@validate_json(['role'])
@log_action('ユーザー権限変更')
@handle_errors
def update_user_role(user_id):
    """ユーザー権限の変更"""
    data = request.get_json()
    user = get_services().users.update_user_role(user_id, data['role'], g.current_user)
    return jsonify({
        'success': True,
        'message': f'{user.name} の権限を変更しました',
        'data': user.to_dict(),
    })
