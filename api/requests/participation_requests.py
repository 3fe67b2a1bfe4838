from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, login_required, validate_json, log_action, handle_errors
from utils.errors import PermissionDeniedError

from . import requests_bp


@requests_bp.route('/events/<event_id>/requests', methods=['POST'])
@capability_required(Capability.REQUEST_PARTICIPATION)
@log_action('参加申請')
@handle_errors
def create_participation_request(event_id):
    """練習会への参加申請"""
    data = request.get_json(silent=True) or {}
    participation = get_services().participation.create(event_id, g.current_user, data.get('message'))
    return jsonify({
        'success': True,
        'message': '参加申請を送信しました',
        'data': participation,
    }), 201


@requests_bp.route('/events/<event_id>/requests', methods=['GET'])
@capability_required(Capability.PROCESS_PARTICIPATION_REQUESTS)
@handle_errors
def get_event_requests(event_id):
    """イベントごとの参加申請（主催者・管理者）"""
    services = get_services()
    event = services.events.get(event_id)
    if not services.events.can_manage(event, g.current_user):
        raise PermissionDeniedError('このイベントの申請を閲覧する権限がありません')
    requests = services.participation.for_event(event_id)
    return jsonify({'success': True, 'data': requests, 'count': len(requests)})


@requests_bp.route('/participation-requests/mine', methods=['GET'])
@login_required
@handle_errors
def get_my_requests():
    """自分が送った参加申請"""
    requests = get_services().participation.for_user(g.current_user.id)
    return jsonify({'success': True, 'data': requests, 'count': len(requests)})


@requests_bp.route('/participation-requests/organizer', methods=['GET'])
@capability_required(Capability.PROCESS_PARTICIPATION_REQUESTS)
@handle_errors
def get_organizer_requests():
    """自分のイベントに届いた参加申請（status で絞り込み可）"""
    status = request.args.get('status', '').strip() or None
    requests = get_services().participation.for_organizer(g.current_user.id, status=status)
    return jsonify({'success': True, 'data': requests, 'count': len(requests)})


@requests_bp.route('/participation-requests/<request_id>', methods=['PUT'])
@capability_required(Capability.PROCESS_PARTICIPATION_REQUESTS)
@validate_json(['status'])
@log_action('参加申請処理')
@handle_errors
def process_participation_request(request_id):
    """参加申請の承認・却下"""
    status = request.get_json()['status']
    participation = get_services().participation.process(request_id, status, g.current_user)
    message = '参加申請を承認しました' if participation['status'] == 'approved' else '参加申請を却下しました'
    return jsonify({'success': True, 'message': message, 'data': participation})


@requests_bp.route('/participation-requests/<request_id>', methods=['DELETE'])
@login_required
@log_action('参加申請削除')
@handle_errors
def delete_participation_request(request_id):
    get_services().participation.remove(request_id, g.current_user)
    return jsonify({'success': True, 'message': '参加申請を削除しました'})
