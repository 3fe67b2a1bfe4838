from io import BytesIO

from flask import g, send_file

from models import Capability
from services import get_services
from utils.decorators import capability_required, log_action, handle_errors
from utils.errors import PermissionDeniedError
from utils.excel_handler import ExcelHandler

from . import requests_bp

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@requests_bp.route('/events/<event_id>/requests/export', methods=['GET'])
@capability_required(Capability.PROCESS_PARTICIPATION_REQUESTS)
@log_action('参加申請エクスポート')
@handle_errors
def export_event_requests(event_id):
    """イベントの参加申請を Excel で出力"""
    services = get_services()
    event = services.events.get(event_id)
    if not services.events.can_manage(event, g.current_user):
        raise PermissionDeniedError('このイベントの申請を出力する権限がありません')

    content = ExcelHandler().export_participation_requests(services.participation.for_event(event_id))
    return send_file(
        BytesIO(content),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f'participation_requests_{event_id}.xlsx',
    )
