from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, handle_errors

from . import events_bp, event_payload


@events_bp.route('/mine', methods=['GET'])
@capability_required(Capability.MANAGE_OWN_EVENTS)
@handle_errors
def get_my_events():
    """自分が主催するイベント（過去分を含む）と承認待ちの件数"""
    services = get_services()
    user = g.current_user
    event_type = request.args.get('type', '').strip() or None
    events = services.events.organizer_events(user.id, event_type, user=user)

    return jsonify({
        'success': True,
        'data': [event_payload(e, services) for e in events],
        'count': len(events),
        'pending_requests': services.participation.pending_count(organizer_id=user.id),
    })
