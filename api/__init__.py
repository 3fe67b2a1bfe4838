#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - API モジュール
"""

from .account import auth_bp, users_bp
from .communication import announcements_bp, news_bp, inquiries_bp
from .events import events_bp
from .members import members_bp
from .requests import requests_bp
from .system import system_bp
from .venues import venues_bp

__version__ = '1.0.0'

# すべての Blueprint をエクスポート
__all__ = [
    'auth_bp',
    'users_bp',
    'events_bp',
    'requests_bp',
    'announcements_bp',
    'news_bp',
    'inquiries_bp',
    'venues_bp',
    'members_bp',
    'system_bp',
]
