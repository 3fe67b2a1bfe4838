from flask import Blueprint
import logging


events_bp = Blueprint('events', __name__)

logger = logging.getLogger(__name__)


def event_payload(event, services):
    """一覧・詳細で返すイベント（NEW 表示を付与）"""
    data = dict(event)
    data['is_new'] = services.events.is_new(event)
    return data


# 各ルートは本パッケージ内の個別モジュールで実装
from . import (
    get_events,
    get_event,
    create_event,
    update_event,
    delete_event,
    get_my_events,
    get_participants,
    event_comments,
)

__all__ = ['events_bp']
