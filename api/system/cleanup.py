from flask import request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import system_bp, logger, CLEAR_CATEGORIES


@system_bp.route('/clear', methods=['POST'])
@capability_required(Capability.SYSTEM_SETTINGS)
@validate_json(['category'])
@log_action('データ削除')
@handle_errors
def clear_data():
    """カテゴリ単位でデータを削除（all の場合はデモアカウントと既定の会場を再作成）"""
    category = request.get_json()['category']
    if category not in CLEAR_CATEGORIES:
        return jsonify({
            'success': False,
            'message': f'不正なカテゴリです: {category}（{", ".join(CLEAR_CATEGORIES)}）'
        }), 400

    services = get_services()
    services.store.clear(CLEAR_CATEGORIES[category])
    if category == 'all':
        services.bootstrap()

    logger.info(f"データを削除しました: {category}")
    return jsonify({'success': True, 'message': f'{category} のデータを削除しました'})
