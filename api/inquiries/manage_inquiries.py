from io import BytesIO

from flask import g, request, jsonify, send_file

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors
from utils.excel_handler import ExcelHandler

from . import inquiries_bp

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@inquiries_bp.route('', methods=['GET'])
@capability_required(Capability.MANAGE_INQUIRIES)
@handle_errors
def get_inquiries():
    """お問い合わせ一覧
    クエリパラメータ：
    - status: unread / read / replied
    - keyword: 件名・内容・名前・メールアドレスの部分一致（大文字小文字を区別しない）
    """
    services = get_services()
    inquiries = services.inquiries.search(
        g.current_user,
        status=request.args.get('status', '').strip() or None,
        keyword=request.args.get('keyword', '').strip() or None,
    )
    return jsonify({
        'success': True,
        'data': inquiries,
        'count': len(inquiries),
        'counts': services.inquiries.counts(),
    })


@inquiries_bp.route('/<inquiry_id>', methods=['GET'])
@capability_required(Capability.MANAGE_INQUIRIES)
@handle_errors
def get_inquiry(inquiry_id):
    """詳細（未読なら既読にする）"""
    return jsonify({'success': True, 'data': get_services().inquiries.open(inquiry_id, g.current_user)})


@inquiries_bp.route('/<inquiry_id>/read', methods=['POST'])
@capability_required(Capability.MANAGE_INQUIRIES)
@handle_errors
def mark_inquiry_read(inquiry_id):
    return jsonify({'success': True, 'data': get_services().inquiries.mark_read(inquiry_id, g.current_user)})


@inquiries_bp.route('/<inquiry_id>/reply', methods=['POST'])
@capability_required(Capability.MANAGE_INQUIRIES)
@validate_json(['reply'])
@log_action('お問い合わせ返信')
@handle_errors
def reply_inquiry(inquiry_id):
    inquiry = get_services().inquiries.reply(inquiry_id, request.get_json()['reply'], g.current_user)
    return jsonify({'success': True, 'message': '返信しました', 'data': inquiry})


@inquiries_bp.route('/<inquiry_id>', methods=['DELETE'])
@capability_required(Capability.MANAGE_INQUIRIES)
@log_action('お問い合わせ削除')
@handle_errors
def delete_inquiry(inquiry_id):
    get_services().inquiries.delete(inquiry_id, g.current_user)
    return jsonify({'success': True, 'message': 'お問い合わせを削除しました'})


@inquiries_bp.route('/export', methods=['GET'])
@capability_required(Capability.MANAGE_INQUIRIES)
@log_action('お問い合わせエクスポート')
@handle_errors
def export_inquiries():
    """お問い合わせを Excel で出力"""
    inquiries = get_services().inquiries.search(g.current_user)
    content = ExcelHandler().export_inquiries(inquiries)
    return send_file(
        BytesIO(content),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name='inquiries.xlsx',
    )
