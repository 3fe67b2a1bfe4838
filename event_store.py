#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - イベントストア

リモートバックエンドが有効ならそちらを優先し、失敗時はローカルストアへ切り替える。
ローカルでは同梱のシードイベントに、同じ id のローカルレコードを上書きして扱う。
"""

import copy
import json
import logging
import os
from datetime import datetime, timedelta

import local_store
from event_filters import filter_events, is_new_event, parse_event_date
from models import (
    Capability, EventType, EventStatus, PREFECTURES, SKILL_LEVELS, RequestStatus,
    authorize, normalize_event, rename_event_fields,
)
from utils.errors import DateParseError, NotFoundError, PermissionDeniedError, ValidationError
from utils.helpers import generate_id, is_valid_time, now_iso, parse_bool

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'NEW_EVENT_DAYS': 3,
    'LOCAL_EVENT_RETENTION_DAYS': 30,
    'LOCAL_EVENT_MAX_COUNT': 50,
    'RECURRING_INTERVAL_DAYS': {'weekly': 7, 'biweekly': 14, 'monthly': 30},
}

# 更新時に無視するフィールド
IMMUTABLE_FIELDS = ('id', 'created_at', 'creator_id', 'deleted_at', 'parent_event_id')


def load_seed_events(path):
    """シードイベントを読み込む（ファイルが無ければ空）"""
    if not path or not os.path.exists(path):
        logger.info(f"シードイベントファイルがありません: {path}")
        return []
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('events', [])
    return [normalize_event(item) for item in data]


def _to_int(value, label):
    if value is None or value == '':
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{label}は数値で入力してください')
    if number < 0:
        raise ValidationError(f'{label}は0以上で入力してください')
    return number


def validate_event(event, intervals):
    """作成・更新共通の入力チェック。正規化した辞書を返す"""
    name = (event.get('name') or '').strip()
    if not name:
        raise ValidationError('イベント名を入力してください')
    event['name'] = name
    event['beginner_friendly'] = parse_bool(event.get('beginner_friendly'))
    event['recurring'] = parse_bool(event.get('recurring'))

    try:
        EventType(event.get('type'))
    except ValueError:
        raise ValidationError('イベント種別が不正です')

    try:
        event_day = parse_event_date(event.get('event_date'))
    except DateParseError:
        raise ValidationError('開催日は YYYY-MM-DD または YYYY年M月D日 の形式で入力してください')

    if not is_valid_time(event.get('start_time')):
        raise ValidationError('開始時刻は HH:MM の形式で入力してください')
    if event.get('end_time') and not is_valid_time(event['end_time']):
        raise ValidationError('終了時刻は HH:MM の形式で入力してください')
    if event.get('end_time') and event['end_time'] <= event['start_time']:
        raise ValidationError('終了時刻は開始時刻より後にしてください')

    if event.get('prefecture') not in PREFECTURES:
        raise ValidationError('都道府県を選択してください')
    if not (event.get('venue') or '').strip():
        raise ValidationError('会場を入力してください')

    event['max_participants'] = _to_int(event.get('max_participants'), '定員')
    event['entry_fee'] = _to_int(event.get('entry_fee'), '参加費') or 0

    if event.get('skill_level') and event['skill_level'] not in SKILL_LEVELS:
        raise ValidationError('レベルが不正です')

    try:
        EventStatus(event.get('status'))
    except ValueError:
        raise ValidationError('ステータスが不正です')

    if event.get('recurring'):
        if event.get('recurring_frequency') not in intervals:
            raise ValidationError('開催頻度は weekly / biweekly / monthly から選択してください')
        if event.get('recurring_end_date'):
            try:
                end_day = parse_event_date(event['recurring_end_date'])
            except DateParseError:
                raise ValidationError('定期開催の終了日の形式が不正です')
            if end_day < event_day:
                raise ValidationError('定期開催の終了日は開催日以降にしてください')
    return event


def expand_recurring(event, intervals):
    """定期開催の2回目以降を生成する（終了日を含む）"""
    if not event.get('recurring') or not event.get('recurring_end_date'):
        return []

    step = timedelta(days=intervals[event['recurring_frequency']])
    first_day = parse_event_date(event['event_date'])
    end_day = parse_event_date(event['recurring_end_date'])

    occurrences = []
    current = first_day + step
    while current <= end_day:
        occurrence = copy.deepcopy(event)
        occurrence.update({
            'id': generate_id('event'),
            'name': f"{event['name']} ({current.year}/{current.month}/{current.day})",
            'event_date': current.isoformat(),
            'recurring': False,
            'recurring_frequency': None,
            'recurring_days': None,
            'recurring_end_date': None,
            'parent_event_id': event['id'],
        })
        occurrences.append(occurrence)
        current += step
    return occurrences


class EventStore:
    """イベントの取得・作成・更新・論理削除"""

    def __init__(self, store, seed_events=None, remote=None, clock=None, settings=None):
        self.store = store
        self.seed_events = {e['id']: e for e in (seed_events or [])}
        self.remote = remote
        self.clock = clock or datetime.now
        self.settings = dict(DEFAULT_SETTINGS)
        self.settings.update({k: v for k, v in (settings or {}).items() if k in DEFAULT_SETTINGS})

    @property
    def intervals(self):
        return self.settings['RECURRING_INTERVAL_DAYS']

    # ==================== ローカル ====================

    def _local_events(self, include_deleted=False):
        merged = {event_id: copy.deepcopy(e) for event_id, e in self.seed_events.items()}
        for record in self.store.all(local_store.CREATED_EVENTS):
            merged[record['id']] = normalize_event(record)
        events = list(merged.values())
        if include_deleted:
            return events
        return [e for e in events if not e.get('deleted_at')]

    def _local_get(self, event_id):
        record = self.store.get(local_store.CREATED_EVENTS, event_id)
        if record is not None:
            return normalize_event(record)
        seed = self.seed_events.get(event_id)
        return copy.deepcopy(seed) if seed else None

    def _prune_local(self, tx):
        """古いローカルイベントを削除し、件数を上限までに抑える"""
        today = self.clock().date()
        cutoff = today - timedelta(days=self.settings['LOCAL_EVENT_RETENTION_DAYS'])
        removed = 0

        records = [r for r in tx.all(local_store.CREATED_EVENTS) if r['id'] not in self.seed_events]
        kept = []
        for record in records:
            try:
                if parse_event_date(record.get('event_date')) < cutoff:
                    tx.delete(local_store.CREATED_EVENTS, record['id'])
                    removed += 1
                    continue
            except DateParseError:
                pass
            kept.append(record)

        parents = [r for r in kept if not r.get('parent_event_id')]
        parents.sort(key=lambda r: r.get('created_at') or '', reverse=True)
        overflow = {r['id'] for r in parents[self.settings['LOCAL_EVENT_MAX_COUNT']:]}
        for record in kept:
            if record['id'] in overflow or record.get('parent_event_id') in overflow:
                tx.delete(local_store.CREATED_EVENTS, record['id'])
                removed += 1

        if removed:
            logger.info(f"ローカルイベントを {removed} 件整理しました")

    # ==================== リモート ====================

    def _use_remote(self, user=None):
        return self.remote is not None and not (user is not None and user.is_demo)

    def _remote_get(self, event_id):
        try:
            return self.remote.get_event_by_id(event_id)
        except Exception as e:
            logger.warning(f"リモートからのイベント取得に失敗したためローカルを参照します: {e}")
            return None

    def _find(self, event_id):
        """(event, source) を返す。source は remote / local"""
        if self.remote is not None:
            event = self._remote_get(event_id)
            if event:
                return event, 'remote'
        event = self._local_get(event_id)
        if event and not event.get('deleted_at'):
            return event, 'local'
        return None, None

    # ==================== 公開操作 ====================

    def list(self, filters=None, user=None):
        """一覧（過去イベント除外・NEW 優先で並び替え）

        デモユーザーのセッション中はローカルのみを参照する。
        """
        now = self.clock()
        today = now.date()
        events = None

        if self._use_remote(user):
            try:
                events = self.remote.list_events(filters, today)
            except Exception as e:
                logger.warning(f"リモートからの一覧取得に失敗したためローカルに切り替えます: {e}")

        if events is None:
            events = self._local_events()

        return filter_events(events, filters, today=today, now=now, new_days=self.settings['NEW_EVENT_DAYS'])

    def get(self, event_id):
        event, _ = self._find(event_id)
        if event is None:
            raise NotFoundError('イベントが見つかりません')
        return event

    def create(self, data, creator):
        """イベントを作成する。定期開催なら2回目以降もまとめて作成"""
        event = normalize_event(data)
        if event.get('type') == EventType.TOURNAMENT.value:
            authorize(creator, Capability.CREATE_TOURNAMENT)
        else:
            authorize(creator, Capability.CREATE_PRACTICE)

        event.update({
            'id': generate_id('event'),
            'created_at': now_iso(self.clock()),
            'status': EventStatus.RECRUITING.value,
            'participants_count': 0,
            'creator_id': creator.id,
            'organizer_name': event.get('organizer_name') or creator.name,
            'deleted_at': None,
            'parent_event_id': None,
        })
        validate_event(event, self.intervals)
        events = [event] + expand_recurring(event, self.intervals)

        if self._use_remote(creator):
            try:
                self.remote.create_events(events)
                logger.info(f"イベントを作成しました(remote): {event['id']} ({len(events)}件)")
                return event
            except Exception as e:
                logger.warning(f"リモートへの作成に失敗したためローカルに保存します: {e}")

        with self.store.transaction() as tx:
            for item in events:
                tx.put(local_store.CREATED_EVENTS, item)
            self._prune_local(tx)

        logger.info(f"イベントを作成しました(local): {event['id']} ({len(events)}件)")
        return event

    def can_manage(self, event, user):
        if user is None:
            return False
        if user.has_capability(Capability.MANAGE_ALL_EVENTS):
            return True
        return user.has_capability(Capability.MANAGE_OWN_EVENTS) and event.get('creator_id') == user.id

    def _check_manage(self, event, actor):
        authorize(actor, Capability.MANAGE_OWN_EVENTS)
        if not self.can_manage(event, actor):
            raise PermissionDeniedError('このイベントを編集する権限がありません')

    def update(self, event_id, patch, actor):
        event, source = self._find(event_id)
        if event is None:
            raise NotFoundError('イベントが見つかりません')
        self._check_manage(event, actor)

        changes = rename_event_fields(patch)
        for field in IMMUTABLE_FIELDS:
            changes.pop(field, None)
        if (changes.get('type') == EventType.TOURNAMENT.value
                and event.get('type') != EventType.TOURNAMENT.value):
            authorize(actor, Capability.CREATE_TOURNAMENT)

        updated = dict(event)
        updated.update(changes)
        validate_event(updated, self.intervals)

        if source == 'remote':
            self.remote.update_event(updated)
        else:
            self.store.put(local_store.CREATED_EVENTS, updated)
        logger.info(f"イベントを更新しました: {event_id} by {actor.id}")
        return updated

    def delete(self, event_id, actor):
        """論理削除。承認待ちの参加申請は同時に却下する"""
        event, source = self._find(event_id)
        if event is None:
            raise NotFoundError('イベントが見つかりません')
        self._check_manage(event, actor)

        deleted_at = now_iso(self.clock())
        if source == 'remote':
            self.remote.soft_delete_event(event_id, deleted_at)

        with self.store.transaction() as tx:
            if source == 'local':
                event['deleted_at'] = deleted_at
                tx.put(local_store.CREATED_EVENTS, event)
            for request in tx.all(local_store.PARTICIPATION_REQUESTS):
                if request.get('event_id') == event_id and request.get('status') == RequestStatus.PENDING.value:
                    request['status'] = RequestStatus.REJECTED.value
                    request['processed_at'] = deleted_at
                    tx.put(local_store.PARTICIPATION_REQUESTS, request)

        logger.info(f"イベントを削除しました: {event_id} by {actor.id}")
        return True

    def organizer_events(self, organizer_id, event_type=None, user=None):
        """主催者が作成したイベント（過去分を含む、開催日の新しい順）"""
        events = None
        if self._use_remote(user):
            try:
                events = self.remote.get_events_by_creator(organizer_id)
            except Exception as e:
                logger.warning(f"リモートからの主催イベント取得に失敗したためローカルを参照します: {e}")
        if events is None:
            events = [e for e in self._local_events() if e.get('creator_id') == organizer_id]
        if event_type:
            events = [e for e in events if e.get('type') == event_type]

        def newest_first(event):
            try:
                return parse_event_date(event.get('event_date')).toordinal()
            except DateParseError:
                return 0

        return sorted(events, key=newest_first, reverse=True)

    def is_new(self, event):
        return is_new_event(event.get('created_at'), now=self.clock(), days=self.settings['NEW_EVENT_DAYS'])
