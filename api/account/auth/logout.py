from flask import g, jsonify, session

from utils.decorators import log_action

from . import auth_bp, logger


@auth_bp.route('/logout', methods=['POST'])
@log_action('ログアウト')
def logout():
    """ログアウト"""
    user = g.current_user
    session.clear()

    if user is not None:
        logger.info(f"ユーザー {user.email} がログアウトしました")

    return jsonify({
        'success': True,
        'message': 'ログアウトしました'
    })
