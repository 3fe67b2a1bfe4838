from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, login_required, validate_json, log_action, handle_errors

from . import events_bp


@events_bp.route('/<event_id>/comments', methods=['GET'])
@handle_errors
def get_comments(event_id):
    """コメント一覧（新しい順）"""
    services = get_services()
    services.events.get(event_id)
    comments = services.members.comments(event_id)
    user = g.current_user
    for comment in comments:
        comment['liked'] = user is not None and user.id in comment.get('liked_by', [])
    return jsonify({'success': True, 'data': comments, 'count': len(comments)})


@events_bp.route('/<event_id>/comments', methods=['POST'])
@capability_required(Capability.COMMENT)
@validate_json(['content'])
@log_action('コメント投稿')
@handle_errors
def add_comment(event_id):
    comment = get_services().members.add_comment(g.current_user, event_id, request.get_json()['content'])
    return jsonify({'success': True, 'message': 'コメントを投稿しました', 'data': comment}), 201


@events_bp.route('/comments/<comment_id>/like', methods=['POST'])
@capability_required(Capability.COMMENT)
@handle_errors
def toggle_comment_like(comment_id):
    liked = get_services().members.toggle_like(g.current_user, comment_id)
    return jsonify({'success': True, 'data': {'liked': liked}})


@events_bp.route('/comments/<comment_id>', methods=['DELETE'])
@login_required
@log_action('コメント削除')
@handle_errors
def delete_comment(comment_id):
    get_services().members.delete_comment(g.current_user, comment_id)
    return jsonify({'success': True, 'message': 'コメントを削除しました'})
