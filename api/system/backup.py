from datetime import datetime

from flask import jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, log_action, handle_errors

from . import system_bp, logger


@system_bp.route('/export', methods=['GET'])
@capability_required(Capability.SYSTEM_SETTINGS)
@log_action('データエクスポート')
@handle_errors
def export_data():
    """ローカルストア全体を JSON で出力"""
    data = get_services().store.dump()
    logger.info(f"データをエクスポートしました（キー数: {len(data)}）")
    return jsonify({
        'success': True,
        'data': data,
        'exported_at': datetime.now().isoformat(),
    })
