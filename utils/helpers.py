#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - 補助関数
"""

import hashlib
import os
import re
import time
import uuid
from datetime import datetime

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


def generate_id(prefix):
    """`event_1722470400000_ab12cd` 形式の ID を生成"""
    millis = int(time.time() * 1000)
    return f"{prefix}_{millis}_{uuid.uuid4().hex[:6]}"


def now_iso(now=None):
    return (now or datetime.now()).isoformat()


def parse_datetime(date_str):
    """ISO 形式の日時文字列を解析（タイムゾーン付きはローカル時刻に変換）"""
    if not date_str or not isinstance(date_str, str):
        return None
    try:
        value = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
    except ValueError:
        return None
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def parse_date_param(value):
    """クエリパラメータの YYYY-MM-DD"""
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def is_valid_time(value):
    return bool(value) and TIME_PATTERN.match(value) is not None


def is_valid_month(value):
    return bool(value) and MONTH_PATTERN.match(value) is not None


def validate_email(email):
    """メールアドレスの形式チェック"""
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in ['true', '1', 'on', 'yes']


def unique_list(items):
    """順序を保ったまま重複を除く"""
    seen = set()
    result = []
    for item in items or []:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def generate_password_hash(password, salt_length=16):
    """パスワードハッシュを生成

    salt+hash を16進文字列で返す（JSON にそのまま保存できる）。
    """
    salt = os.urandom(salt_length)
    password_hash = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, 100000)
    return (salt + password_hash).hex()


def verify_password(password, password_hash):
    """パスワードを検証"""
    if not password_hash or not isinstance(password_hash, str):
        return False

    try:
        raw = bytes.fromhex(password_hash)
    except ValueError:
        return False

    # 16バイトのソルト + 32バイトのハッシュ
    if len(raw) < 16 + 32:
        return False

    salt = raw[:16]
    stored_hash = raw[16:]
    computed_hash = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, 100000)
    return computed_hash == stored_hash
