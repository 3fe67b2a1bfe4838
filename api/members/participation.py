from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, login_required, log_action, handle_errors

from . import members_bp


@members_bp.route('/events', methods=['GET'])
@login_required
@handle_errors
def get_participating_events():
    """参加イベント（?scope=upcoming|past、省略時は全件）"""
    members = get_services().members
    user_id = g.current_user.id
    scope = request.args.get('scope')

    if scope == 'upcoming':
        events = members.upcoming_events(user_id)
    elif scope == 'past':
        events = members.past_events(user_id)
    elif scope:
        return jsonify({'success': False, 'message': 'scope は upcoming か past を指定してください'}), 400
    else:
        events = members.participating(user_id)

    return jsonify({'success': True, 'data': events, 'count': len(events)})


@members_bp.route('/events/<event_id>', methods=['POST'])
@capability_required(Capability.JOIN_EVENTS)
@log_action('イベント参加')
@handle_errors
def join_event(event_id):
    record = get_services().members.join(g.current_user, event_id)
    return jsonify({'success': True, 'message': 'イベントに参加登録しました', 'data': record})


@members_bp.route('/events/<event_id>', methods=['DELETE'])
@login_required
@log_action('イベント参加取消')
@handle_errors
def leave_event(event_id):
    removed = get_services().members.leave(g.current_user, event_id)
    return jsonify({
        'success': True,
        'message': '参加を取り消しました' if removed else '参加登録されていません',
    })
