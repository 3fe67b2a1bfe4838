from flask import Blueprint
import logging

import local_store


system_bp = Blueprint('system', __name__)

logger = logging.getLogger(__name__)

# 一括削除の対象カテゴリ
CLEAR_CATEGORIES = {
    'events': [local_store.CREATED_EVENTS],
    'requests': [local_store.PRACTICE_REQUESTS, local_store.PARTICIPATION_REQUESTS],
    'inquiries': [local_store.ADMIN_INQUIRIES],
    'comments': [local_store.EVENT_COMMENTS],
    'all': None,
}

# 各システム管理ルートは独立したモジュールで実装
from . import (
    health,
    stats,
    backup,
    restore,
    cleanup,
)

__all__ = ['system_bp', 'CLEAR_CATEGORIES']
