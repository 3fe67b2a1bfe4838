#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - ローカルストア

ブラウザの localStorage に相当する JSON ファイル。キーごとにレコードを id で
引ける辞書として保持し、レコード単位の get/put/delete を提供する。
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# ストレージキー
CREATED_EVENTS = 'created_events'
ANNOUNCEMENTS = 'announcements'
NEWS_ARTICLES = 'news_articles'
ADMIN_INQUIRIES = 'admin_inquiries'
PRACTICE_REQUESTS = 'practice_requests'
PARTICIPATION_REQUESTS = 'practice_participation_requests'
USERS = 'demo_users_db'
NOTIFICATION_SETTINGS = 'notification_settings'
PRIVACY_SETTINGS = 'privacy_settings'
FAVORITES = 'favorites'
PARTICIPATING_EVENTS = 'participating_events'
EVENT_COMMENTS = 'event_comments'
VENUES = 'venues'

COLLECTION_KEYS = [
    CREATED_EVENTS,
    ANNOUNCEMENTS,
    NEWS_ARTICLES,
    ADMIN_INQUIRIES,
    PRACTICE_REQUESTS,
    PARTICIPATION_REQUESTS,
    USERS,
    FAVORITES,
    PARTICIPATING_EVENTS,
    EVENT_COMMENTS,
    VENUES,
]

SETTINGS_KEYS = [NOTIFICATION_SETTINGS, PRIVACY_SETTINGS]

_locks = {}
_locks_guard = threading.Lock()


def invalid_dump_keys(data):
    """レコードの集まりとして読めないキーの一覧（辞書の辞書、または辞書の配列のみ可）"""
    invalid = []
    for key in COLLECTION_KEYS + SETTINGS_KEYS:
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, dict):
            records = value.values()
        elif isinstance(value, list):
            records = value
        else:
            invalid.append(key)
            continue
        if not all(isinstance(record, dict) for record in records):
            invalid.append(key)
    return invalid


def _lock_for(path):
    with _locks_guard:
        if path not in _locks:
            _locks[path] = threading.RLock()
        return _locks[path]


class LocalStore:
    """JSON ファイルを使ったキー単位のレコードストア"""

    def __init__(self, path):
        self.path = os.path.abspath(path)
        self._lock = _lock_for(self.path)

    # ==================== 読み書き ====================

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"ローカルストアの読み込みに失敗しました: {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"ローカルストアの形式が不正です: {self.path}")
            return {}
        for key, value in list(data.items()):
            if isinstance(value, list):
                # 旧形式（配列）は id をキーにした辞書へ変換
                data[key] = {
                    str(item['id']): item
                    for item in value
                    if isinstance(item, dict) and item.get('id') is not None
                }
        return data

    def _write(self, data):
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.store-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    # ==================== レコード操作 ====================

    def get(self, key, record_id):
        with self._lock:
            record = self._read().get(key, {}).get(str(record_id))
            return copy.deepcopy(record)

    def all(self, key):
        with self._lock:
            return list(self._read().get(key, {}).values())

    def put(self, key, record):
        with self.transaction() as tx:
            tx.put(key, record)
        return record

    def delete(self, key, record_id):
        with self.transaction() as tx:
            return tx.delete(key, record_id)

    def count(self, key):
        with self._lock:
            return len(self._read().get(key, {}))

    # ==================== 単一値 ====================

    def get_value(self, key, default=None):
        with self._lock:
            data = self._read()
            if key not in data:
                return default
            return copy.deepcopy(data[key])

    def set_value(self, key, value):
        with self.transaction() as tx:
            tx.set_value(key, value)

    # ==================== 管理用 ====================

    def keys(self):
        with self._lock:
            return list(self._read().keys())

    def dump(self):
        with self._lock:
            return self._read()

    def load_dump(self, data):
        if not isinstance(data, dict):
            raise ValueError('dump must be a JSON object')
        invalid = invalid_dump_keys(data)
        if invalid:
            raise ValueError(f"invalid collections in dump: {', '.join(invalid)}")
        with self._lock:
            self._write(data)

    def clear(self, keys=None):
        with self._lock:
            if keys is None:
                self._write({})
                return
            data = self._read()
            for key in keys:
                data.pop(key, None)
            self._write(data)

    def size_bytes(self):
        with self._lock:
            if not os.path.exists(self.path):
                return 0
            return os.path.getsize(self.path)

    @contextmanager
    def transaction(self):
        """複数レコードの変更をまとめて1回の書き込みで反映する"""
        with self._lock:
            tx = StoreTransaction(self._read())
            yield tx
            if tx.dirty:
                self._write(tx.data)


class StoreTransaction:
    """transaction() 内でのみ使う変更バッファ"""

    def __init__(self, data):
        self.data = data
        self.dirty = False

    def get(self, key, record_id):
        return copy.deepcopy(self.data.get(key, {}).get(str(record_id)))

    def all(self, key):
        return [copy.deepcopy(r) for r in self.data.get(key, {}).values()]

    def put(self, key, record):
        if record.get('id') is None:
            raise ValueError('record requires an id')
        self.data.setdefault(key, {})[str(record['id'])] = copy.deepcopy(record)
        self.dirty = True
        return record

    def delete(self, key, record_id):
        removed = self.data.get(key, {}).pop(str(record_id), None)
        if removed is not None:
            self.dirty = True
        return removed is not None

    def get_value(self, key, default=None):
        if key not in self.data:
            return default
        return copy.deepcopy(self.data[key])

    def set_value(self, key, value):
        self.data[key] = copy.deepcopy(value)
        self.dirty = True
