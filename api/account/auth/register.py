from flask import request, jsonify, session

from services import get_services
from utils.decorators import validate_json, log_action, handle_errors

from . import auth_bp


@auth_bp.route('/register', methods=['POST'])
@validate_json(['email', 'password', 'name'])
@log_action('ユーザー登録')
@handle_errors
def register():
    """新規登録（登録後はそのままログイン状態にする）"""
    data = request.get_json()
    user = get_services().users.register(
        data['email'],
        data['password'],
        data['name'],
        prefecture=data.get('prefecture'),
    )

    session.clear()
    session['user_id'] = user.id
    session.permanent = True

    return jsonify({
        'success': True,
        'message': '登録が完了しました',
        'data': user.to_dict(),
    }), 201
