from flask import request, jsonify, session

from services import get_services
from utils.decorators import validate_json, log_action, handle_errors

from . import auth_bp, logger


@auth_bp.route('/login', methods=['POST'])
@validate_json(['email', 'password'])
@log_action('ログイン')
@handle_errors
def login():
    """ログイン"""
    data = request.get_json()
    user = get_services().users.authenticate(data['email'].strip(), data['password'])

    session.clear()
    session['user_id'] = user.id
    session.permanent = True

    logger.info(f"ユーザー {user.email} がログインしました")

    return jsonify({
        'success': True,
        'message': 'ログインしました',
        'data': user.to_dict(),
    })
