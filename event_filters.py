"""
ビーチボールバレー コミュニティ - イベントの絞り込みと並び替え

開催日は "YYYY-MM-DD..." と "YYYY年M月D日" の2形式のみ受け付ける。
解釈できないイベントは一覧から外すが、invalid に記録して呼び出し元へ返す。
"""

import logging
import re
from datetime import date, datetime, timedelta

from models import REGION_PREFECTURES
from utils.errors import DateParseError
from utils.helpers import parse_datetime

logger = logging.getLogger(__name__)

JAPANESE_DATE = re.compile(r'(\d{4})年(\d{1,2})月(\d{1,2})日')
ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


class EventListing:
    """一覧結果と、開催日を解釈できなかったイベント"""

    def __init__(self, events, invalid=None):
        self.events = events
        self.invalid = invalid or []

    def __iter__(self):
        return iter(self.events)

    def __len__(self):
        return len(self.events)

    def ids(self):
        return [e['id'] for e in self.events]


def parse_event_date(value):
    """開催日を date に変換する。未知の形式は DateParseError"""
    if not isinstance(value, str):
        raise DateParseError(value)

    match = JAPANESE_DATE.search(value)
    if not match:
        match = ISO_DATE.match(value)
    if not match:
        raise DateParseError(value)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        raise DateParseError(value)


def is_new_event(created_at, now=None, days=3):
    """作成から days 日以内なら NEW"""
    created = created_at if isinstance(created_at, datetime) else parse_datetime(created_at)
    if created is None:
        return False
    now = now or datetime.now()
    return now - created <= timedelta(days=days)


def _matches_attributes(event, filters):
    event_type = filters.get('type')
    if event_type and event.get('type') != event_type:
        return False

    prefecture = filters.get('prefecture')
    if prefecture and event.get('prefecture') != prefecture:
        return False

    region = filters.get('region')
    if region and event.get('prefecture') not in REGION_PREFECTURES.get(region, []):
        return False

    if filters.get('beginner_friendly') and not event.get('beginner_friendly'):
        return False

    return True


def sort_key(event, event_day, now, new_days):
    new_first = 0 if is_new_event(event.get('created_at'), now=now, days=new_days) else 1
    return (new_first, event_day, event.get('name') or '')


def filter_events(events, filters=None, today=None, now=None, new_days=3):
    """一覧表示用の絞り込みと並び替え

    filters: type / prefecture / region / beginner_friendly / month (YYYY-MM) / date (date)
    """
    filters = filters or {}
    now = now or datetime.now()
    today = today or now.date()

    selected_month = filters.get('month')
    selected_date = filters.get('date')

    keyed = []
    invalid = []
    for event in events:
        if not _matches_attributes(event, filters):
            continue

        try:
            event_day = parse_event_date(event.get('event_date'))
        except DateParseError as e:
            logger.warning(f"開催日の形式が不正なため一覧から除外: id={event.get('id')} event_date={e.value!r}")
            invalid.append({
                'id': event.get('id'),
                'name': event.get('name'),
                'event_date': event.get('event_date'),
                'error': str(e),
            })
            continue

        # 今日より前のイベントは除外
        if event_day < today:
            continue
        if selected_month and event_day.strftime('%Y-%m') != selected_month:
            continue
        if selected_date and event_day != selected_date:
            continue

        keyed.append((sort_key(event, event_day, now, new_days), event))

    keyed.sort(key=lambda pair: pair[0])
    return EventListing([event for _, event in keyed], invalid)
