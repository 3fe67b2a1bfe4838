#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - データモデル定義
"""

from datetime import datetime
from enum import Enum

from utils.errors import AuthenticationError, PermissionDeniedError
from utils.helpers import parse_bool


class UserRole(Enum):
    """ユーザー権限（下位の権限をすべて含む）"""
    PARTICIPANT = 'participant'  # 一般参加者
    ORGANIZER = 'organizer'      # 主催者
    ADMIN = 'admin'              # 管理者
    SUPER_ADMIN = 'super_admin'  # スーパー管理者

    @property
    def level(self):
        return ROLE_HIERARCHY[self]

    @classmethod
    def parse(cls, value):
        """旧データの 'user' も参加者として扱う"""
        if isinstance(value, cls):
            return value
        if value == 'user':
            return cls.PARTICIPANT
        return cls(value)


ROLE_HIERARCHY = {
    UserRole.PARTICIPANT: 1,
    UserRole.ORGANIZER: 2,
    UserRole.ADMIN: 3,
    UserRole.SUPER_ADMIN: 4,
}


class Capability(Enum):
    VIEW_EVENTS = 'view_events'
    JOIN_EVENTS = 'join_events'
    REQUEST_PARTICIPATION = 'request_participation'
    APPLY_ORGANIZER = 'apply_organizer'
    SUBMIT_INQUIRY = 'submit_inquiry'
    COMMENT = 'comment'
    CREATE_PRACTICE = 'create_practice'
    MANAGE_OWN_EVENTS = 'manage_own_events'
    PROCESS_PARTICIPATION_REQUESTS = 'process_participation_requests'
    CREATE_TOURNAMENT = 'create_tournament'
    MANAGE_ALL_EVENTS = 'manage_all_events'
    ACCESS_ADMIN = 'access_admin'
    APPROVE_ORGANIZER_APPLICATIONS = 'approve_organizer_applications'
    MANAGE_INQUIRIES = 'manage_inquiries'
    MANAGE_NEWS = 'manage_news'
    MANAGE_VENUES = 'manage_venues'
    MANAGE_ORGANIZERS = 'manage_organizers'
    MANAGE_ANNOUNCEMENTS = 'manage_announcements'
    MANAGE_USERS = 'manage_users'
    SYSTEM_SETTINGS = 'system_settings'


# 各権限で新たに追加される機能
_ROLE_GRANTS = {
    UserRole.PARTICIPANT: {
        Capability.VIEW_EVENTS,
        Capability.JOIN_EVENTS,
        Capability.REQUEST_PARTICIPATION,
        Capability.APPLY_ORGANIZER,
        Capability.SUBMIT_INQUIRY,
        Capability.COMMENT,
    },
    UserRole.ORGANIZER: {
        Capability.CREATE_PRACTICE,
        Capability.MANAGE_OWN_EVENTS,
        Capability.PROCESS_PARTICIPATION_REQUESTS,
    },
    UserRole.ADMIN: {
        Capability.CREATE_TOURNAMENT,
        Capability.MANAGE_ALL_EVENTS,
        Capability.ACCESS_ADMIN,
        Capability.APPROVE_ORGANIZER_APPLICATIONS,
        Capability.MANAGE_INQUIRIES,
        Capability.MANAGE_NEWS,
        Capability.MANAGE_VENUES,
        Capability.MANAGE_ORGANIZERS,
    },
    UserRole.SUPER_ADMIN: {
        Capability.MANAGE_ANNOUNCEMENTS,
        Capability.MANAGE_USERS,
        Capability.SYSTEM_SETTINGS,
    },
}


def capabilities(role):
    """権限から利用可能な機能の集合を返す"""
    role = UserRole.parse(role)
    granted = set()
    for candidate, level in ROLE_HIERARCHY.items():
        if level <= role.level:
            granted |= _ROLE_GRANTS[candidate]
    return frozenset(granted)


class EventType(Enum):
    TOURNAMENT = 'tournament'  # 大会
    PRACTICE = 'practice'      # 練習会


class EventStatus(Enum):
    RECRUITING = 'recruiting'  # 募集中
    CLOSED = 'closed'          # 締切
    FINISHED = 'finished'      # 終了


class RequestStatus(Enum):
    PENDING = 'pending'    # 承認待ち
    APPROVED = 'approved'  # 承認済み
    REJECTED = 'rejected'  # 却下


class InquiryStatus(Enum):
    UNREAD = 'unread'    # 未読
    READ = 'read'        # 既読
    REPLIED = 'replied'  # 返信済み


class AnnouncementType(Enum):
    INFO = 'info'
    WARNING = 'warning'
    SUCCESS = 'success'


class AnnouncementPriority(Enum):
    NORMAL = 'normal'
    HIGH = 'high'


NEWS_CATEGORIES = ['施設情報', '大会情報', 'ルール', '練習会', '募集']

SKILL_LEVELS = {
    'beginner': '初級',
    'intermediate': '中級',
    'advanced': '上級',
}

REGIONS = ['北海道', '東北', '関東', '中部', '関西', '中国', '四国', '九州・沖縄']

# 地域と都道府県の対応表
REGION_PREFECTURES = {
    '北海道': ['北海道'],
    '東北': ['青森県', '岩手県', '宮城県', '秋田県', '山形県', '福島県'],
    '関東': ['茨城県', '栃木県', '群馬県', '埼玉県', '千葉県', '東京都', '神奈川県'],
    '中部': ['新潟県', '富山県', '石川県', '福井県', '山梨県', '長野県', '岐阜県', '静岡県', '愛知県'],
    '関西': ['三重県', '滋賀県', '京都府', '大阪府', '兵庫県', '奈良県', '和歌山県'],
    '中国': ['鳥取県', '島根県', '岡山県', '広島県', '山口県'],
    '四国': ['徳島県', '香川県', '愛媛県', '高知県'],
    '九州・沖縄': ['福岡県', '佐賀県', '長崎県', '熊本県', '大分県', '宮崎県', '鹿児島県', '沖縄県'],
}

PREFECTURES = [p for prefectures in REGION_PREFECTURES.values() for p in prefectures]


def get_region_from_prefecture(prefecture):
    """都道府県から地域を取得"""
    for region, prefectures in REGION_PREFECTURES.items():
        if prefecture in prefectures:
            return region
    return None


class User:
    """ユーザーモデル

    is_admin / is_organizer / can_create_events は role から都度計算し、保存しない。
    """

    def __init__(self, id=None, email=None, name=None, role=UserRole.PARTICIPANT,
                 password_hash=None, prefecture=None, avatar=None, bio=None,
                 region=None, skill_level=None, experience_years=None, team=None,
                 is_demo=False, created_at=None):
        self.id = id
        self.email = email
        self.name = name
        self.role = UserRole.parse(role)
        self.password_hash = password_hash
        self.prefecture = prefecture
        self.avatar = avatar
        self.bio = bio
        self.region = region
        self.skill_level = skill_level
        self.experience_years = experience_years
        self.team = team
        self.is_demo = is_demo
        self.created_at = created_at or datetime.now().isoformat()

    @classmethod
    def from_dict(cls, data):
        role = data.get('role')
        if not role:
            # 旧形式: 権限フラグのみ保持しているレコード
            if data.get('isAdmin') or data.get('is_admin'):
                role = UserRole.ADMIN
            elif data.get('isOrganizer') or data.get('is_organizer') or data.get('canCreateEvents'):
                role = UserRole.ORGANIZER
            else:
                role = UserRole.PARTICIPANT
        return cls(
            id=data.get('id'),
            email=data.get('email'),
            name=data.get('name'),
            role=role,
            password_hash=data.get('password_hash'),
            prefecture=data.get('prefecture'),
            avatar=data.get('avatar'),
            bio=data.get('bio'),
            region=data.get('region'),
            skill_level=data.get('skill_level') or data.get('skillLevel'),
            experience_years=data.get('experience_years') or data.get('experienceYears'),
            team=data.get('team'),
            is_demo=bool(data.get('is_demo', False)),
            created_at=data.get('created_at') or data.get('createdAt'),
        )

    @property
    def capabilities(self):
        return capabilities(self.role)

    def has_capability(self, capability):
        return capability in self.capabilities

    @property
    def is_admin(self):
        return self.has_capability(Capability.ACCESS_ADMIN)

    @property
    def is_organizer(self):
        return self.has_capability(Capability.CREATE_PRACTICE)

    @property
    def can_create_events(self):
        return self.is_organizer

    def to_record(self):
        """保存用の辞書（派生フラグは含めない）"""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
            'password_hash': self.password_hash,
            'prefecture': self.prefecture,
            'avatar': self.avatar,
            'bio': self.bio,
            'region': self.region,
            'skill_level': self.skill_level,
            'experience_years': self.experience_years,
            'team': self.team,
            'is_demo': self.is_demo,
            'created_at': self.created_at,
        }

    def to_dict(self):
        """API 応答用の辞書"""
        data = self.to_record()
        data.pop('password_hash')
        data.update({
            'is_admin': self.is_admin,
            'is_organizer': self.is_organizer,
            'can_create_events': self.can_create_events,
            'capabilities': sorted(c.value for c in self.capabilities),
        })
        return data


# 入力で受け付ける旧フィールド名
EVENT_FIELD_ALIASES = {
    'createdAt': 'created_at',
    'beginnerFriendly': 'beginner_friendly',
    'maxParticipants': 'max_participants',
    'entryFee': 'entry_fee',
    'organizerId': 'creator_id',
    'organizer_id': 'creator_id',
    'organizerName': 'organizer_name',
    'image': 'image_url',
    'participants': 'participants_count',
    'skillLevel': 'skill_level',
    'recurringFrequency': 'recurring_frequency',
    'recurringDays': 'recurring_days',
    'recurringEndDate': 'recurring_end_date',
}

EVENT_FIELDS = [
    'id', 'name', 'type', 'event_date', 'start_time', 'end_time', 'venue', 'prefecture',
    'description', 'image_url', 'max_participants', 'entry_fee', 'beginner_friendly',
    'skill_level', 'rules', 'prizes', 'creator_id', 'organizer_name', 'created_at', 'status',
    'participants_count', 'recurring', 'recurring_frequency', 'recurring_days',
    'recurring_end_date', 'parent_event_id', 'deleted_at',
]


def rename_event_fields(data):
    """旧形式のフィールド名を正規化し、未知のフィールドを除く"""
    event = {}
    for key, value in data.items():
        key = EVENT_FIELD_ALIASES.get(key, key)
        if key in EVENT_FIELDS and (key not in event or event[key] is None):
            event[key] = value
    return event


def normalize_event(data):
    """旧形式のフィールド名を正規化したイベント辞書を返す"""
    event = rename_event_fields(data)
    event.setdefault('status', EventStatus.RECRUITING.value)
    event.setdefault('participants_count', 0)
    event['beginner_friendly'] = parse_bool(event.get('beginner_friendly'))
    event.setdefault('deleted_at', None)
    return event


def authorize(user, capability):
    """唯一の権限チェック。未ログインは 401、権限不足は 403"""
    if user is None:
        raise AuthenticationError('ログインが必要です')
    if not user.has_capability(capability):
        raise PermissionDeniedError('この操作を行う権限がありません')
    return user
