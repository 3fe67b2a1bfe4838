from flask import g, jsonify

from . import auth_bp


@auth_bp.route('/session', methods=['GET'])
def check_session():
    """セッション状態"""
    user = g.current_user
    return jsonify({
        'success': True,
        'data': {
            'logged_in': user is not None,
            'user': user.to_dict() if user else None,
        },
    })
