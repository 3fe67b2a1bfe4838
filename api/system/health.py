from datetime import datetime

from flask import jsonify

from services import get_services

from . import system_bp


@system_bp.route('/health', methods=['GET'])
def system_health():
    """ローカルストアとリモートバックエンドの状態"""
    services = get_services()
    health_status = {}

    try:
        services.store.keys()
        health_status['local_store'] = {
            'status': 'healthy',
            'message': 'ローカルストアは正常です',
            'size_bytes': services.store.size_bytes(),
        }
    except OSError as e:
        health_status['local_store'] = {
            'status': 'error',
            'message': f'ローカルストアを読み込めません: {str(e)}',
        }

    if services.remote is None:
        health_status['remote'] = {'status': 'disabled', 'message': 'リモートバックエンドは無効です'}
    else:
        try:
            with services.remote.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT 1')
                cursor.fetchone()
            health_status['remote'] = {'status': 'healthy', 'message': 'リモートバックエンドに接続できます'}
        except Exception as e:
            health_status['remote'] = {
                'status': 'warning',
                'message': f'リモートバックエンドに接続できないためローカルで動作します: {str(e)}',
            }

    statuses = [h.get('status') for h in health_status.values()]
    if 'error' in statuses:
        overall_status = 'error'
    elif 'warning' in statuses:
        overall_status = 'warning'
    else:
        overall_status = 'healthy'

    return jsonify({
        'success': True,
        'overall_status': overall_status,
        'health': health_status,
        'check_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
    })
