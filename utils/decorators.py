#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - デコレータ（権限制御など）
"""

from functools import wraps
import logging
import time

from flask import g, jsonify, redirect, request, url_for

from models import authorize
from utils.errors import AppError, AuthenticationError

logger = logging.getLogger(__name__)


def _is_api_request():
    return request.path.startswith('/api/') or request.is_json


def _denied(error):
    """API には JSON、画面遷移にはトップページへのリダイレクトを返す"""
    if _is_api_request():
        return jsonify(error.to_dict()), error.status_code
    return redirect(url_for('index'))


def current_user():
    return getattr(g, 'current_user', None)


def login_required(f):
    """ログイン必須"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            return _denied(AuthenticationError('ログインが必要です'))
        return f(*args, **kwargs)
    return decorated_function


def capability_required(capability):
    """機能単位の権限チェック

    Args:
        capability: models.Capability
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                authorize(current_user(), capability)
            except AppError as e:
                logger.warning(f"権限不足: {request.path} capability={capability.value} user={getattr(current_user(), 'id', None)}")
                return _denied(e)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def validate_json(required_fields=None):
    """JSON データ検証

    Args:
        required_fields: 必須フィールドのリスト
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not request.is_json:
                return jsonify({'success': False, 'message': 'リクエストは JSON 形式で送信してください', 'code': 400}), 400

            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return jsonify({'success': False, 'message': 'JSON データが空です', 'code': 400}), 400

            if required_fields:
                missing_fields = [
                    field for field in required_fields
                    if field not in data or data[field] is None or data[field] == ''
                ]
                if missing_fields:
                    return jsonify({
                        'success': False,
                        'message': f'入力してください: {", ".join(missing_fields)}',
                        'code': 400
                    }), 400

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def log_action(action_name):
    """操作ログ

    Args:
        action_name: 操作名
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = current_user()
            user_id = user.id if user else None
            user_name = user.name if user else 'Guest'

            start_time = time.perf_counter()
            logger.info(f"ユーザー {user_name}(ID:{user_id}) 操作開始: {action_name}")

            try:
                result = f(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.info(
                    f"ユーザー {user_name}(ID:{user_id}) 操作完了: {action_name}, 所要時間: {duration_ms:.1f} ms"
                )
                return result

            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"ユーザー {user_name}(ID:{user_id}) 操作失敗: {action_name}, 所要時間: {duration_ms:.1f} ms, エラー: {str(e)}"
                )
                raise

        return decorated_function
    return decorator


def handle_errors(f):
    """想定外のエラーを 500 応答に変換する（AppError はエラーハンドラへ渡す）"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AppError:
            raise
        except Exception as e:
            logger.exception(f"処理中にエラーが発生しました: {request.method} {request.path}: {e}")
            return jsonify({
                'success': False,
                'message': '処理に失敗しました。しばらくしてから再度お試しください',
                'code': 500
            }), 500

    return decorated_function
