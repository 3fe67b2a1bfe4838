from flask import request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, handle_errors

from . import venues_bp


@venues_bp.route('', methods=['GET'])
@handle_errors
def get_venues():
    """有効な会場の一覧（?prefecture= で絞り込み）"""
    venues = get_services().venues.list(prefecture=request.args.get('prefecture') or None)
    return jsonify({'success': True, 'data': venues, 'count': len(venues)})


@venues_bp.route('/admin', methods=['GET'])
@capability_required(Capability.MANAGE_VENUES)
@handle_errors
def get_all_venues():
    """無効化した会場も含む一覧"""
    venues = get_services().venues.list(
        prefecture=request.args.get('prefecture') or None,
        include_inactive=True,
    )
    return jsonify({'success': True, 'data': venues, 'count': len(venues)})


@venues_bp.route('/<venue_id>', methods=['GET'])
@handle_errors
def get_venue(venue_id):
    venue = get_services().venues.get(venue_id)
    return jsonify({'success': True, 'data': venue})
