#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - リモートデータベース接続

REMOTE_BACKEND_ENABLED のときだけ使われる任意のバックエンド。
利用できない場合、呼び出し側はローカルストアに切り替える。
"""

import logging
import time
from contextlib import contextmanager

import mysql.connector
from mysql.connector import Error, pooling

from config import Config
from db_modules.db_events import EventDbMixin

logger = logging.getLogger(__name__)


DATABASE_SCHEMA = {
    'events': '''
        CREATE TABLE IF NOT EXISTS events (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            type ENUM('tournament', 'practice') NOT NULL,
            event_date VARCHAR(40) NOT NULL,
            start_time VARCHAR(5) NOT NULL,
            end_time VARCHAR(5) DEFAULT NULL,
            venue VARCHAR(200) NOT NULL,
            prefecture VARCHAR(20) NOT NULL,
            description TEXT,
            image_url VARCHAR(500) DEFAULT NULL,
            max_participants INT DEFAULT NULL,
            entry_fee INT DEFAULT 0,
            beginner_friendly BOOLEAN DEFAULT FALSE,
            skill_level VARCHAR(20) DEFAULT NULL,
            rules TEXT,
            prizes JSON DEFAULT NULL,
            creator_id VARCHAR(64) DEFAULT NULL,
            organizer_name VARCHAR(100) DEFAULT NULL,
            status ENUM('recruiting', 'closed', 'finished') DEFAULT 'recruiting',
            participants_count INT DEFAULT 0,
            recurring BOOLEAN DEFAULT FALSE,
            recurring_frequency VARCHAR(20) DEFAULT NULL,
            recurring_days JSON DEFAULT NULL,
            recurring_end_date VARCHAR(40) DEFAULT NULL,
            parent_event_id VARCHAR(64) DEFAULT NULL,
            created_at VARCHAR(40) NOT NULL,
            deleted_at VARCHAR(40) DEFAULT NULL,
            INDEX idx_type (type),
            INDEX idx_prefecture (prefecture),
            INDEX idx_creator (creator_id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='イベント';
    ''',
}


class TimedCursorWrapper:
    def __init__(self, cursor, slow_threshold_ms=50):
        self._cursor = cursor
        self._slow_threshold_ms = slow_threshold_ms

    def execute(self, operation, params=None):
        start = time.perf_counter()
        try:
            return self._cursor.execute(operation, params)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms >= self._slow_threshold_ms:
                logger.warning(
                    "Slow query took %.1f ms: %s; params=%s",
                    duration_ms,
                    operation,
                    params,
                )

    def executemany(self, operation, seq_params):
        start = time.perf_counter()
        try:
            return self._cursor.executemany(operation, seq_params)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms >= self._slow_threshold_ms:
                logger.warning(
                    "Slow query (executemany) took %.1f ms: %s; params_count=%d",
                    duration_ms,
                    operation,
                    len(seq_params) if seq_params is not None else 0,
                )

    def __getattr__(self, item):
        return getattr(self._cursor, item)


_connection_pools = {}


def _get_connection_pool(config):
    """データベース接続プールを取得（プール名ごとに1つ）"""
    pool_config = config.copy()
    pool_size = pool_config.pop('pool_size', 5)
    pool_name = pool_config.pop('pool_name', Config.DB_POOL_NAME)

    if pool_name not in _connection_pools:
        try:
            _connection_pools[pool_name] = pooling.MySQLConnectionPool(
                pool_name=pool_name,
                pool_size=pool_size,
                **pool_config
            )
            logger.info(f"データベース接続プールを作成しました（サイズ: {pool_size}）")
        except Error as e:
            logger.error(f"接続プールの作成に失敗したため直接接続を使用します: {e}")
            return None
    return _connection_pools[pool_name]


class DatabaseManager(EventDbMixin):
    """リモートデータベース管理"""

    def __init__(self, settings=None):
        settings = settings or {}

        def setting(name):
            return settings.get(name, getattr(Config, name))

        self.slow_threshold_ms = setting('SLOW_QUERY_THRESHOLD_MS')
        self.config = {
            'host': setting('DB_HOST'),
            'port': setting('DB_PORT'),
            'user': setting('DB_USER'),
            'password': setting('DB_PASSWORD'),
            'database': setting('DB_NAME'),
            'charset': 'utf8mb4',
            'collation': 'utf8mb4_unicode_ci',
            'autocommit': False,
            'pool_size': setting('DB_POOL_SIZE'),
            'pool_name': setting('DB_POOL_NAME'),
            'pool_reset_session': True,
            'connection_timeout': 10
        }
        self.pool = None

    def _connect(self):
        if self.pool is None:
            self.pool = _get_connection_pool(self.config)
        if self.pool:
            return self.pool.get_connection()
        direct_config = {k: v for k, v in self.config.items() if k not in ('pool_size', 'pool_name', 'pool_reset_session')}
        return mysql.connector.connect(**direct_config)

    @contextmanager
    def get_connection(self):
        """データベース接続のコンテキストマネージャ"""
        connection = None
        try:
            connection = self._connect()
            original_cursor = connection.cursor

            def timed_cursor(*args, **kwargs):
                return TimedCursorWrapper(original_cursor(*args, **kwargs), slow_threshold_ms=self.slow_threshold_ms)

            connection.cursor = timed_cursor
            yield connection
        except Error as e:
            logger.error(f"データベース接続エラー: {e}")
            if connection:
                connection.rollback()
            raise
        finally:
            if connection and connection.is_connected():
                connection.close()

    def init_database(self):
        """テーブルを作成（存在しない場合のみ）"""
        with self.get_connection() as connection:
            cursor = connection.cursor()
            for table_name, schema in DATABASE_SCHEMA.items():
                cursor.execute(schema)
                logger.info(f"テーブルを確認しました: {table_name}")
            connection.commit()
