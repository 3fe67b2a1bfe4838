from flask import g, request, jsonify

from services import get_services
from utils.decorators import login_required, validate_json, log_action, handle_errors

from . import inquiries_bp


@inquiries_bp.route('', methods=['POST'])
@validate_json(['subject', 'message'])
@log_action('お問い合わせ送信')
@handle_errors
def submit_inquiry():
    """お問い合わせ送信（未ログインの場合は name / email が必須）"""
    inquiry = get_services().inquiries.submit(request.get_json(), user=g.current_user)
    return jsonify({
        'success': True,
        'message': 'お問い合わせを送信しました',
        'data': inquiry,
    }), 201


@inquiries_bp.route('/mine', methods=['GET'])
@login_required
@handle_errors
def get_my_inquiries():
    inquiries = get_services().inquiries.for_user(g.current_user.id)
    return jsonify({'success': True, 'data': inquiries, 'count': len(inquiries)})
