from flask import request, jsonify

import local_store
from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import system_bp, logger


@system_bp.route('/import', methods=['POST'])
@capability_required(Capability.SYSTEM_SETTINGS)
@validate_json(['data'])
@log_action('データインポート')
@handle_errors
def import_data():
    """エクスポートした JSON でローカルストアを置き換える"""
    data = request.get_json()['data']
    if not isinstance(data, dict):
        return jsonify({'success': False, 'message': 'data はオブジェクトで指定してください'}), 400
    invalid = local_store.invalid_dump_keys(data)
    if invalid:
        return jsonify({
            'success': False,
            'message': f"レコードの形式が不正です: {', '.join(invalid)}",
        }), 400

    services = get_services()
    services.store.load_dump(data)
    services.bootstrap()

    logger.info(f"データをインポートしました（キー数: {len(data)}）")
    return jsonify({'success': True, 'message': 'データをインポートしました'})
