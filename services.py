#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - サービスの組み立て

アプリごとに1組だけ作り、current_app.extensions に保持する。
"""

import logging
from datetime import datetime

from flask import current_app

from content_manager import AnnouncementManager, InquiryManager, NewsManager
from event_store import EventStore, load_seed_events
from local_store import LocalStore
from member_manager import MemberManager
from request_manager import OrganizerApplicationManager, ParticipationRequestManager
from user_manager import UserManager
from venue_manager import VenueManager

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'beach_volley'


class Services:
    """リクエスト処理から使うサービス一式"""

    def __init__(self, config, remote=None):
        self.clock = config.get('CLOCK') or datetime.now
        self.store = LocalStore(config['STORAGE_PATH'])
        self.remote = remote

        self.events = EventStore(
            self.store,
            seed_events=load_seed_events(config.get('SEED_EVENTS_PATH')),
            remote=remote,
            clock=self.clock,
            settings=config,
        )
        self.users = UserManager(self.store, clock=self.clock)
        self.participation = ParticipationRequestManager(self.store, self.events, clock=self.clock)
        self.applications = OrganizerApplicationManager(self.store, clock=self.clock)
        self.announcements = AnnouncementManager(
            self.store, clock=self.clock, max_count=config.get('ANNOUNCEMENT_MAX_COUNT', 10),
        )
        self.news = NewsManager(self.store, clock=self.clock)
        self.inquiries = InquiryManager(self.store, clock=self.clock)
        self.venues = VenueManager(self.store, clock=self.clock)
        self.members = MemberManager(
            self.store,
            self.events,
            users=self.users,
            clock=self.clock,
            assumed_duration_hours=config.get('EVENT_ASSUMED_DURATION_HOURS', 3),
        )

    def bootstrap(self):
        """初回起動時の既定データ"""
        self.users.ensure_demo_accounts()
        self.venues.ensure_defaults()


def _build_remote(config):
    if not config.get('REMOTE_BACKEND_ENABLED'):
        return None
    from database import DatabaseManager

    remote = DatabaseManager(config)
    try:
        remote.init_database()
        logger.info("リモートバックエンドを初期化しました")
    except Exception as e:
        # 接続できなくても起動は続け、各操作でローカルに切り替える
        logger.error(f"リモートバックエンドの初期化に失敗しました: {e}")
    return remote


def init_services(app):
    services = Services(app.config, remote=_build_remote(app.config))
    services.bootstrap()
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services():
    return current_app.extensions[EXTENSION_KEY]
