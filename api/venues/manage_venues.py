from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import venues_bp, logger


@venues_bp.route('', methods=['POST'])
@capability_required(Capability.MANAGE_VENUES)
@validate_json(['name', 'address', 'prefecture'])
@log_action('会場登録')
@handle_errors
def create_venue():
    venue = get_services().venues.create(request.get_json(), g.current_user)
    return jsonify({'success': True, 'message': '会場を登録しました', 'data': venue}), 201


@venues_bp.route('/<venue_id>', methods=['PUT'])
@capability_required(Capability.MANAGE_VENUES)
@validate_json()
@log_action('会場更新')
@handle_errors
def update_venue(venue_id):
    venue = get_services().venues.update(venue_id, request.get_json(), g.current_user)
    return jsonify({'success': True, 'message': '会場を更新しました', 'data': venue})


@venues_bp.route('/<venue_id>', methods=['DELETE'])
@capability_required(Capability.MANAGE_VENUES)
@log_action('会場無効化')
@handle_errors
def deactivate_venue(venue_id):
    """会場は削除せず無効化する"""
    get_services().venues.deactivate(venue_id, g.current_user)
    return jsonify({'success': True, 'message': '会場を無効化しました'})


@venues_bp.route('/<venue_id>/restore', methods=['POST'])
@capability_required(Capability.MANAGE_VENUES)
@log_action('会場復元')
@handle_errors
def restore_venue(venue_id):
    venue = get_services().venues.restore(venue_id, g.current_user)
    logger.info(f"会場を復元しました: {venue_id}")
    return jsonify({'success': True, 'message': '会場を復元しました', 'data': venue})
