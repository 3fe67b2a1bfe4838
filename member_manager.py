#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - 会員向け機能

お気に入り、参加イベント、コメント、プライバシー設定、通知設定。
"""

import logging
from datetime import datetime, timedelta

import local_store
from event_filters import parse_event_date
from models import Capability, EventType, authorize
from utils.errors import DateParseError, NotFoundError, ValidationError
from utils.helpers import generate_id, now_iso, parse_bool

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_SETTINGS = {
    'push_enabled': False,
    'email_enabled': True,
    'in_app_enabled': True,
    'new_participant': True,
    'event_reminder': True,
    'event_cancellation': True,
    'event_update': True,
}

DEFAULT_PRIVACY_SETTINGS = {
    'hide_from_participants': False,
}

# 開始時刻が無いイベントはその日の 23:59 開始とみなす
DEFAULT_START_TIME = (23, 59)


def _member_key(user_id, event_id):
    return f'{user_id}:{event_id}'


def _event_summary(event):
    return {
        'event_id': event.get('id'),
        'name': event.get('name'),
        'type': event.get('type'),
        'event_date': event.get('event_date'),
        'start_time': event.get('start_time'),
        'venue': event.get('venue'),
        'prefecture': event.get('prefecture'),
        'image_url': event.get('image_url'),
    }


def participation_record(user_id, event, registered_at):
    """participating_events に保存する1件分"""
    record = _event_summary(event)
    record.update({
        'id': _member_key(user_id, event.get('id')),
        'user_id': user_id,
        'registered_at': registered_at,
    })
    return record


def event_start(record):
    """開催日と開始時刻から開始日時を求める"""
    day = parse_event_date(record.get('event_date'))
    hours, minutes = DEFAULT_START_TIME
    start_time = record.get('start_time')
    if start_time:
        try:
            hours, minutes = (int(part) for part in start_time.split(':')[:2])
        except ValueError:
            pass
    return datetime(day.year, day.month, day.day, hours, minutes)


class MemberManager:
    """ユーザー単位の付随データ"""

    def __init__(self, store, events, users=None, clock=None, assumed_duration_hours=3):
        self.store = store
        self.events = events
        self.users = users
        self.clock = clock or datetime.now
        self.assumed_duration = timedelta(hours=assumed_duration_hours)

    # ==================== お気に入り ====================

    def favorites(self, user_id):
        records = [r for r in self.store.all(local_store.FAVORITES) if r.get('user_id') == user_id]
        return sorted(records, key=lambda r: r.get('favorited_at') or '', reverse=True)

    def is_favorite(self, user_id, event_id):
        return self.store.get(local_store.FAVORITES, _member_key(user_id, event_id)) is not None

    def add_favorite(self, user, event_id):
        authorize(user, Capability.VIEW_EVENTS)
        key = _member_key(user.id, event_id)
        existing = self.store.get(local_store.FAVORITES, key)
        if existing is not None:
            return existing

        record = _event_summary(self.events.get(event_id))
        record.update({'id': key, 'user_id': user.id, 'favorited_at': now_iso(self.clock())})
        return self.store.put(local_store.FAVORITES, record)

    def remove_favorite(self, user, event_id):
        return self.store.delete(local_store.FAVORITES, _member_key(user.id, event_id))

    def toggle_favorite(self, user, event_id):
        """お気に入り状態を切り替え、切り替え後に登録済みなら True"""
        if self.is_favorite(user.id, event_id):
            self.remove_favorite(user, event_id)
            return False
        self.add_favorite(user, event_id)
        return True

    # ==================== 参加イベント ====================

    def join(self, user, event_id):
        """直接の参加登録。他人の練習会は参加申請の承認を経る"""
        authorize(user, Capability.JOIN_EVENTS)
        key = _member_key(user.id, event_id)
        existing = self.store.get(local_store.PARTICIPATING_EVENTS, key)
        if existing is not None:
            return existing
        event = self.events.get(event_id)
        if event.get('type') == EventType.PRACTICE.value and event.get('creator_id') != user.id:
            raise ValidationError('練習会への参加は参加申請から行ってください')
        record = participation_record(user.id, event, now_iso(self.clock()))
        logger.info(f"イベントに参加登録しました: event={event_id} user={user.id}")
        return self.store.put(local_store.PARTICIPATING_EVENTS, record)

    def leave(self, user, event_id):
        return self.store.delete(local_store.PARTICIPATING_EVENTS, _member_key(user.id, event_id))

    def is_participating(self, user_id, event_id):
        return self.store.get(local_store.PARTICIPATING_EVENTS, _member_key(user_id, event_id)) is not None

    def participating(self, user_id):
        return [r for r in self.store.all(local_store.PARTICIPATING_EVENTS) if r.get('user_id') == user_id]

    def _split_participation(self, user_id):
        now = self.clock()
        upcoming, past = [], []
        for record in self.participating(user_id):
            try:
                ends_at = event_start(record) + self.assumed_duration
            except DateParseError:
                logger.warning(f"参加イベントの開催日を解釈できません: {record.get('id')}")
                continue
            (upcoming if now < ends_at else past).append(record)

        def by_date(record):
            return parse_event_date(record.get('event_date'))

        upcoming.sort(key=by_date, reverse=True)
        past.sort(key=by_date, reverse=True)
        return upcoming, past

    def upcoming_events(self, user_id):
        return self._split_participation(user_id)[0]

    def past_events(self, user_id):
        return self._split_participation(user_id)[1]

    # ==================== 参加者一覧 ====================

    def visible_participants(self, event_id, viewer=None):
        """非表示設定の参加者を除いた一覧と、除いた人数"""
        event = self.events.get(event_id)
        organizer_id = event.get('creator_id')

        participants = []
        if organizer_id:
            participants.append(self._participant(organizer_id, is_organizer=True))
        for record in self.store.all(local_store.PARTICIPATING_EVENTS):
            if record.get('event_id') == event_id and record.get('user_id') != organizer_id:
                participants.append(self._participant(record['user_id']))

        sees_all = viewer is not None and (
            viewer.id == organizer_id or viewer.has_capability(Capability.MANAGE_ALL_EVENTS)
        )
        if sees_all:
            return {'participants': participants, 'hidden_count': 0}

        visible = [p for p in participants if p['is_organizer'] or not p['is_hidden']]
        return {'participants': visible, 'hidden_count': len(participants) - len(visible)}

    def _participant(self, user_id, is_organizer=False):
        user = self.users.get_user(user_id) if self.users else None
        return {
            'user_id': user_id,
            'name': user.name if user else user_id,
            'avatar': user.avatar if user else None,
            'is_hidden': self.privacy_settings(user_id)['hide_from_participants'],
            'is_organizer': is_organizer,
        }

    # ==================== コメント ====================

    def comments(self, event_id):
        records = [c for c in self.store.all(local_store.EVENT_COMMENTS) if c.get('event_id') == event_id]
        return sorted(records, key=lambda c: c.get('created_at') or '', reverse=True)

    def comment_count(self, event_id):
        return len(self.comments(event_id))

    def add_comment(self, user, event_id, content):
        authorize(user, Capability.COMMENT)
        content = (content or '').strip()
        if not content:
            raise ValidationError('コメントを入力してください')
        self.events.get(event_id)

        comment = {
            'id': generate_id('comment'),
            'event_id': event_id,
            'content': content,
            'likes': 0,
            'liked_by': [],
            'created_at': now_iso(self.clock()),
            'user_id': user.id,
            'user_name': user.name,
            'user_avatar': user.avatar,
        }
        return self.store.put(local_store.EVENT_COMMENTS, comment)

    def toggle_like(self, user, comment_id):
        """いいねを切り替え、切り替え後にいいね済みなら True"""
        authorize(user, Capability.COMMENT)
        with self.store.transaction() as tx:
            comment = tx.get(local_store.EVENT_COMMENTS, comment_id)
            if comment is None:
                raise NotFoundError('コメントが見つかりません')
            liked_by = comment.setdefault('liked_by', [])
            if user.id in liked_by:
                liked_by.remove(user.id)
                comment['likes'] = max(0, comment.get('likes', 0) - 1)
                liked = False
            else:
                liked_by.append(user.id)
                comment['likes'] = comment.get('likes', 0) + 1
                liked = True
            tx.put(local_store.EVENT_COMMENTS, comment)
        return liked

    def delete_comment(self, user, comment_id):
        comment = self.store.get(local_store.EVENT_COMMENTS, comment_id)
        if comment is None:
            raise NotFoundError('コメントが見つかりません')
        if comment.get('user_id') != user.id:
            authorize(user, Capability.MANAGE_ALL_EVENTS)
        return self.store.delete(local_store.EVENT_COMMENTS, comment_id)

    # ==================== 設定 ====================

    def _settings(self, key, user_id, defaults):
        stored = (self.store.get_value(key, {}) or {}).get(user_id) or {}
        settings = dict(defaults)
        settings.update({k: v for k, v in stored.items() if k in defaults})
        return settings

    def _save_settings(self, key, user_id, defaults, changes):
        unknown = sorted(set(changes) - set(defaults))
        if unknown:
            raise ValidationError(f"不明な設定項目です: {', '.join(unknown)}")
        settings = self._settings(key, user_id, defaults)
        settings.update({k: parse_bool(v) for k, v in changes.items()})
        with self.store.transaction() as tx:
            all_settings = tx.get_value(key, {}) or {}
            all_settings[user_id] = settings
            tx.set_value(key, all_settings)
        return settings

    def notification_settings(self, user_id):
        return self._settings(local_store.NOTIFICATION_SETTINGS, user_id, DEFAULT_NOTIFICATION_SETTINGS)

    def update_notification_settings(self, user_id, changes):
        return self._save_settings(
            local_store.NOTIFICATION_SETTINGS, user_id, DEFAULT_NOTIFICATION_SETTINGS, changes,
        )

    def privacy_settings(self, user_id):
        return self._settings(local_store.PRIVACY_SETTINGS, user_id, DEFAULT_PRIVACY_SETTINGS)

    def update_privacy_settings(self, user_id, changes):
        return self._save_settings(local_store.PRIVACY_SETTINGS, user_id, DEFAULT_PRIVACY_SETTINGS, changes)
