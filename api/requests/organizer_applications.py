from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, login_required, validate_json, log_action, handle_errors

from . import requests_bp


@requests_bp.route('/organizer-applications', methods=['POST'])
@capability_required(Capability.APPLY_ORGANIZER)
@validate_json(['reason'])
@log_action('主催者申請')
@handle_errors
def submit_organizer_application():
    """主催者権限の申請"""
    application = get_services().applications.submit(g.current_user, request.get_json())
    return jsonify({
        'success': True,
        'message': '主催者申請を送信しました',
        'data': application,
    }), 201


@requests_bp.route('/organizer-applications/mine', methods=['GET'])
@login_required
@handle_errors
def get_my_applications():
    applications = get_services().applications.for_user(g.current_user.id)
    return jsonify({'success': True, 'data': applications, 'count': len(applications)})


@requests_bp.route('/organizer-applications', methods=['GET'])
@capability_required(Capability.APPROVE_ORGANIZER_APPLICATIONS)
@handle_errors
def get_organizer_applications():
    """主催者申請一覧（管理者）"""
    services = get_services()
    status = request.args.get('status', '').strip() or None
    applications = services.applications.list(status=status)
    return jsonify({
        'success': True,
        'data': applications,
        'count': len(applications),
        'pending_count': services.applications.pending_count(),
    })


@requests_bp.route('/organizer-applications/<application_id>/approve', methods=['POST'])
@capability_required(Capability.APPROVE_ORGANIZER_APPLICATIONS)
@log_action('主催者申請承認')
@handle_errors
def approve_organizer_application(application_id):
    application = get_services().applications.approve(application_id, g.current_user)
    return jsonify({'success': True, 'message': '主催者申請を承認しました', 'data': application})


@requests_bp.route('/organizer-applications/<application_id>/reject', methods=['POST'])
@capability_required(Capability.APPROVE_ORGANIZER_APPLICATIONS)
@log_action('主催者申請却下')
@handle_errors
def reject_organizer_application(application_id):
    application = get_services().applications.reject(application_id, g.current_user)
    return jsonify({'success': True, 'message': '主催者申請を却下しました', 'data': application})
