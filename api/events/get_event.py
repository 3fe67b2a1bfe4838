from flask import g, jsonify

from services import get_services
from utils.decorators import handle_errors

from . import events_bp, event_payload


@events_bp.route('/<event_id>', methods=['GET'])
@handle_errors
def get_event(event_id):
    """イベント詳細"""
    services = get_services()
    event = services.events.get(event_id)
    data = event_payload(event, services)
    data['comment_count'] = services.members.comment_count(event_id)

    user = g.current_user
    if user is not None:
        request_status = services.participation.status_for(event_id, user.id)
        data['viewer'] = {
            'can_manage': services.events.can_manage(event, user),
            'is_favorite': services.members.is_favorite(user.id, event_id),
            'is_participating': services.members.is_participating(user.id, event_id),
            'request_status': request_status['status'] if request_status else None,
        }

    return jsonify({'success': True, 'data': data})
