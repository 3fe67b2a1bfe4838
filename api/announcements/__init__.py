from flask import Blueprint

announcements_bp = Blueprint('announcements', __name__)

# 各ルートは本パッケージ内の個別モジュールで実装
from . import (
    get_announcements,
    create_announcement,
    update_announcement,
    delete_announcement,
)

__all__ = ['announcements_bp']
