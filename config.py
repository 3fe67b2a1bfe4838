#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - 設定ファイル
"""

import os
from datetime import timedelta
from dotenv import load_dotenv

# 環境変数を読み込む
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name, default='false'):
    return os.environ.get(name, default).lower() in ['true', 'on', '1']


class Config:
    """アプリケーション設定クラス"""

    # Flask 基本設定
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # ローカルストア（ブラウザの localStorage に相当する JSON ファイル）
    STORAGE_PATH = os.environ.get('STORAGE_PATH') or os.path.join(BASE_DIR, 'instance', 'local_store.json')
    SEED_EVENTS_PATH = os.environ.get('SEED_EVENTS_PATH') or os.path.join(BASE_DIR, 'data', 'seed_events.json')

    # リモートバックエンド（任意）
    REMOTE_BACKEND_ENABLED = _env_bool('REMOTE_BACKEND_ENABLED')
    DB_HOST = os.environ.get('DB_HOST') or 'localhost'
    DB_PORT = int(os.environ.get('DB_PORT') or 3306)
    DB_USER = os.environ.get('DB_USER') or 'bbv'
    DB_PASSWORD = os.environ.get('DB_PASSWORD') or ''
    DB_NAME = os.environ.get('DB_NAME') or 'beach_volley'
    DB_POOL_NAME = os.environ.get('DB_POOL_NAME') or 'bbv_pool'
    DB_POOL_SIZE = int(os.environ.get('DB_POOL_SIZE') or 5)
    SLOW_QUERY_THRESHOLD_MS = int(os.environ.get('SLOW_QUERY_THRESHOLD_MS') or 50)

    # サーバー設定
    HOST = os.environ.get('HOST') or '0.0.0.0'
    PORT = int(os.environ.get('PORT') or 5000)
    DEBUG = _env_bool('DEBUG')

    # Session 設定
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # ログ設定
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = os.environ.get('LOG_FILE') or os.path.join(BASE_DIR, 'instance', 'beach_volley.log')

    # イベント関連
    NEW_EVENT_DAYS = int(os.environ.get('NEW_EVENT_DAYS') or 3)
    LOCAL_EVENT_RETENTION_DAYS = 30
    LOCAL_EVENT_MAX_COUNT = 50
    EVENT_ASSUMED_DURATION_HOURS = 3
    RECURRING_INTERVAL_DAYS = {
        'weekly': 7,
        'biweekly': 14,
        'monthly': 30,
    }

    # お知らせは最大件数を超えると古いものから削除
    ANNOUNCEMENT_MAX_COUNT = int(os.environ.get('ANNOUNCEMENT_MAX_COUNT') or 10)

    # システム情報
    SYSTEM_NAME = 'ビーチボールバレー コミュニティ'
    SYSTEM_VERSION = '1.0.0'

    @staticmethod
    def init_app(app):
        """アプリケーション初期化"""
        os.makedirs(os.path.dirname(app.config['STORAGE_PATH']), exist_ok=True)

        import logging
        handlers = [logging.StreamHandler()]
        log_file = app.config.get('LOG_FILE')
        if log_file:
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        logging.basicConfig(
            level=getattr(logging, app.config.get('LOG_LEVEL', 'INFO')),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )


class DevelopmentConfig(Config):
    """開発環境設定"""
    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'beach-volley-dev-secret-key'


class ProductionConfig(Config):
    """本番環境設定"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    SECRET_KEY = os.environ.get('SECRET_KEY')


class TestingConfig(Config):
    """テスト環境設定"""
    TESTING = True
    SECRET_KEY = 'beach-volley-test-secret-key'
    REMOTE_BACKEND_ENABLED = False
    LOG_FILE = None


# 設定マッピング
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
