#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - ユーザー管理モジュール
"""

import logging
from datetime import datetime

import local_store
from models import (
    Capability, PREFECTURES, SKILL_LEVELS, User, UserRole, authorize, get_region_from_prefecture,
)
from utils.errors import (
    AuthenticationError, ConflictError, NotFoundError, PermissionDeniedError, ValidationError,
)
from utils.helpers import generate_id, generate_password_hash, now_iso, validate_email, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

DEMO_ACCOUNTS = [
    {
        'id': 'super_admin_001',
        'email': 'super@example.com',
        'password': 'super123',
        'name': 'Super Admin',
        'role': UserRole.SUPER_ADMIN,
        'prefecture': '東京都',
    },
    {
        'id': 'admin_001',
        'email': 'admin@example.com',
        'password': 'admin123',
        'name': '管理者',
        'role': UserRole.ADMIN,
        'prefecture': '埼玉県',
    },
    {
        'id': 'organizer_001',
        'email': 'organizer@example.com',
        'password': 'organizer123',
        'name': '主催者',
        'role': UserRole.ORGANIZER,
        'prefecture': '千葉県',
    },
    {
        'id': 'user_001',
        'email': 'user@example.com',
        'password': 'user123',
        'name': '一般ユーザー',
        'role': UserRole.PARTICIPANT,
        'prefecture': '神奈川県',
    },
]

# プロフィールで変更できる項目
PROFILE_FIELDS = ('name', 'prefecture', 'avatar', 'bio', 'skill_level', 'experience_years', 'team')


class UserManager:
    """ユーザー管理器 - ローカルストアに保存"""

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now

    def ensure_demo_accounts(self):
        """デモアカウントが無ければ作成する"""
        created = 0
        with self.store.transaction() as tx:
            for account in DEMO_ACCOUNTS:
                if tx.get(local_store.USERS, account['id']) is not None:
                    continue
                user = User(
                    id=account['id'],
                    email=account['email'],
                    name=account['name'],
                    role=account['role'],
                    password_hash=generate_password_hash(account['password']),
                    prefecture=account['prefecture'],
                    region=get_region_from_prefecture(account['prefecture']),
                    is_demo=True,
                    created_at=now_iso(self.clock()),
                )
                tx.put(local_store.USERS, user.to_record())
                created += 1
        if created:
            logger.info(f"デモアカウントを {created} 件作成しました")

    def _find_by_email(self, email):
        email = (email or '').strip().lower()
        for record in self.store.all(local_store.USERS):
            if (record.get('email') or '').lower() == email:
                return User.from_dict(record)
        return None

    def register(self, email, password, name, prefecture=None):
        """新規ユーザー登録（一般参加者として作成）"""
        email = (email or '').strip().lower()
        name = (name or '').strip()
        if not validate_email(email):
            raise ValidationError('メールアドレスの形式が正しくありません')
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'パスワードは{MIN_PASSWORD_LENGTH}文字以上で入力してください')
        if not name:
            raise ValidationError('名前を入力してください')
        if prefecture and prefecture not in PREFECTURES:
            raise ValidationError('都道府県が不正です')
        if self._find_by_email(email):
            raise ConflictError('このメールアドレスは既に登録されています')

        user = User(
            id=generate_id('user'),
            email=email,
            name=name,
            role=UserRole.PARTICIPANT,
            password_hash=generate_password_hash(password),
            prefecture=prefecture,
            region=get_region_from_prefecture(prefecture),
            created_at=now_iso(self.clock()),
        )
        self.store.put(local_store.USERS, user.to_record())
        logger.info(f"ユーザーを登録しました: {user.id} ({email})")
        return user

    def authenticate(self, email, password):
        user = self._find_by_email(email)
        if user is None or not verify_password(password or '', user.password_hash):
            logger.warning(f"ログイン失敗: {email}")
            raise AuthenticationError('メールアドレスまたはパスワードが正しくありません')
        return user

    def get_user(self, user_id):
        if not user_id:
            return None
        record = self.store.get(local_store.USERS, user_id)
        return User.from_dict(record) if record else None

    def require_user(self, user_id):
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError('ユーザーが見つかりません')
        return user

    def list_users(self, role=None, keyword=None):
        users = [User.from_dict(r) for r in self.store.all(local_store.USERS)]
        if role:
            role = UserRole.parse(role)
            users = [u for u in users if u.role == role]
        if keyword:
            keyword = keyword.lower()
            users = [
                u for u in users
                if keyword in (u.name or '').lower() or keyword in (u.email or '').lower()
            ]
        return sorted(users, key=lambda u: u.created_at or '')

    def update_profile(self, user, fields):
        """本人のプロフィール更新"""
        user = self.require_user(user.id)
        for field in PROFILE_FIELDS:
            if field not in fields:
                continue
            value = fields[field]
            if isinstance(value, str):
                value = value.strip() or None
            setattr(user, field, value)

        if not user.name:
            raise ValidationError('名前を入力してください')
        if user.prefecture and user.prefecture not in PREFECTURES:
            raise ValidationError('都道府県が不正です')
        if user.skill_level and user.skill_level not in SKILL_LEVELS:
            raise ValidationError('レベルが不正です')
        if user.experience_years is not None:
            try:
                user.experience_years = int(user.experience_years)
            except (TypeError, ValueError):
                raise ValidationError('経験年数は数値で入力してください')
            if user.experience_years < 0:
                raise ValidationError('経験年数は0以上で入力してください')

        user.region = get_region_from_prefecture(user.prefecture)
        self.store.put(local_store.USERS, user.to_record())
        return user

    def change_password(self, user, old_password, new_password):
        user = self.require_user(user.id)
        if not verify_password(old_password or '', user.password_hash):
            raise AuthenticationError('現在のパスワードが正しくありません')
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'パスワードは{MIN_PASSWORD_LENGTH}文字以上で入力してください')
        user.password_hash = generate_password_hash(new_password)
        self.store.put(local_store.USERS, user.to_record())
        return True

    def update_user_role(self, target_id, new_role, operator):
        """ユーザー権限の変更

        manage_users を持つ場合は任意の権限へ、manage_organizers のみの場合は
        一般参加者と主催者の間でだけ変更できる。自分自身の権限は変更できない。
        """
        authorize(operator, Capability.MANAGE_ORGANIZERS)
        try:
            new_role = UserRole.parse(new_role)
        except ValueError:
            raise ValidationError(f'不正な権限です: {new_role}')

        target = self.require_user(target_id)
        if target.id == operator.id:
            raise PermissionDeniedError('自分の権限は変更できません')

        if not operator.has_capability(Capability.MANAGE_USERS):
            limited = {UserRole.PARTICIPANT, UserRole.ORGANIZER}
            if target.role not in limited or new_role not in limited:
                raise PermissionDeniedError('一般参加者と主催者の間でのみ変更できます')

        previous = target.role
        target.role = new_role
        self.store.put(local_store.USERS, target.to_record())
        logger.info(f"ユーザー {target.id} の権限を {previous.value} から {new_role.value} に変更 (by {operator.id})")
        return target
