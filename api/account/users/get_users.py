from flask import request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, log_action, handle_errors

from . import users_bp


@users_bp.route('', methods=['GET'])
@capability_required(Capability.MANAGE_ORGANIZERS)
@log_action('ユーザー一覧取得')
@handle_errors
def get_users():
    """ユーザー一覧

    クエリパラメータ:
    - role: participant / organizer / admin / super_admin
    - keyword: 名前またはメールアドレスの部分一致
    """
    role = request.args.get('role', '').strip() or None
    keyword = request.args.get('keyword', '').strip() or None

    try:
        users = get_services().users.list_users(role=role, keyword=keyword)
    except ValueError:
        return jsonify({'success': False, 'message': f'不正な権限です: {role}'}), 400

    return jsonify({
        'success': True,
        'data': [u.to_dict() for u in users],
        'count': len(users),
    })
