#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - 会場管理
"""

import logging
from datetime import datetime

import local_store
from models import Capability, PREFECTURES, authorize
from utils.errors import NotFoundError, ValidationError
from utils.helpers import generate_id, now_iso, parse_bool, unique_list

logger = logging.getLogger(__name__)

VENUE_FIELDS = (
    'name', 'address', 'prefecture', 'city', 'google_map_url', 'capacity', 'facilities',
    'parking_available', 'nearest_station', 'phone_number', 'website', 'notes',
)

DEFAULT_VENUES = [
    {
        'name': '大宮市民体育館',
        'address': '埼玉県さいたま市大宮区高鼻町4',
        'prefecture': '埼玉県',
        'city': 'さいたま市',
        'capacity': 500,
        'facilities': ['更衣室', 'シャワー', '駐車場', '自動販売機'],
        'parking_available': True,
        'nearest_station': 'JR大宮駅から徒歩20分',
    },
    {
        'name': '川越第二体育館',
        'address': '埼玉県川越市郭町2-30-1',
        'prefecture': '埼玉県',
        'city': '川越市',
        'capacity': 300,
        'facilities': ['更衣室', '駐車場'],
        'parking_available': True,
        'nearest_station': '西武新宿線本川越駅から徒歩15分',
    },
    {
        'name': '東京体育館',
        'address': '東京都渋谷区千駄ヶ谷1-17-1',
        'prefecture': '東京都',
        'city': '渋谷区',
        'capacity': 1000,
        'facilities': ['更衣室', 'シャワー', '売店', 'レストラン'],
        'parking_available': True,
        'nearest_station': 'JR千駄ヶ谷駅から徒歩1分',
        'phone_number': '03-5474-1111',
        'website': 'https://www.tef.or.jp/tmg/',
    },
    {
        'name': '浦和スポーツセンター',
        'address': '埼玉県さいたま市浦和区元町1-29-10',
        'prefecture': '埼玉県',
        'city': 'さいたま市',
        'capacity': 400,
        'facilities': ['更衣室', 'シャワー', '駐車場'],
        'parking_available': True,
        'nearest_station': 'JR浦和駅から徒歩10分',
    },
    {
        'name': '横浜武道館',
        'address': '神奈川県横浜市中区翁町2-9-10',
        'prefecture': '神奈川県',
        'city': '横浜市',
        'capacity': 800,
        'facilities': ['更衣室', 'シャワー', '売店', '駐車場'],
        'parking_available': True,
        'nearest_station': 'JR関内駅から徒歩6分',
        'website': 'https://yokohama-budoukan.jp/',
    },
    {
        'name': '世田谷スポーツセンター',
        'address': '東京都世田谷区大蔵4-6-1',
        'prefecture': '東京都',
        'city': '世田谷区',
        'capacity': 600,
        'facilities': ['更衣室', 'シャワー', '駐車場', '自動販売機'],
        'parking_available': True,
        'nearest_station': '小田急線祖師ヶ谷大蔵駅から徒歩20分',
    },
]


def _clean_venue(data, partial=False):
    venue = {}
    for field in VENUE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if isinstance(value, str):
            value = value.strip() or None
        venue[field] = value

    if not partial or 'name' in venue:
        if not venue.get('name'):
            raise ValidationError('会場名を入力してください')
    if not partial or 'address' in venue:
        if not venue.get('address'):
            raise ValidationError('住所を入力してください')
    if not partial or 'prefecture' in venue:
        if venue.get('prefecture') not in PREFECTURES:
            raise ValidationError('都道府県を選択してください')

    if venue.get('capacity') is not None:
        try:
            venue['capacity'] = int(venue['capacity'])
        except (TypeError, ValueError):
            raise ValidationError('収容人数は数値で入力してください')
        if venue['capacity'] < 0:
            raise ValidationError('収容人数は0以上で入力してください')
    if 'facilities' in venue:
        facilities = venue['facilities'] or []
        if isinstance(facilities, str):
            facilities = facilities.split(',')
        venue['facilities'] = unique_list(f.strip() for f in facilities if f and f.strip())
    if 'parking_available' in venue:
        venue['parking_available'] = parse_bool(venue['parking_available'])
    return venue


class VenueManager:
    """会場（削除は is_active を落とす論理削除のみ）"""

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now

    def ensure_defaults(self):
        """会場が1件も無いときだけ既定の会場を登録"""
        with self.store.transaction() as tx:
            if tx.all(local_store.VENUES):
                return 0
            timestamp = now_iso(self.clock())
            for data in DEFAULT_VENUES:
                venue = _clean_venue(data)
                venue.update({
                    'id': generate_id('venue'),
                    'created_at': timestamp,
                    'updated_at': timestamp,
                    'is_active': True,
                })
                tx.put(local_store.VENUES, venue)
        logger.info(f"既定の会場を {len(DEFAULT_VENUES)} 件登録しました")
        return len(DEFAULT_VENUES)

    def list(self, prefecture=None, include_inactive=False):
        venues = self.store.all(local_store.VENUES)
        if not include_inactive:
            venues = [v for v in venues if v.get('is_active')]
        if prefecture:
            venues = [v for v in venues if v.get('prefecture') == prefecture]
        return sorted(venues, key=lambda v: (v.get('prefecture') or '', v.get('name') or ''))

    def get(self, venue_id, include_inactive=False):
        venue = self.store.get(local_store.VENUES, venue_id)
        if venue is None or (not include_inactive and not venue.get('is_active')):
            raise NotFoundError('会場が見つかりません')
        return venue

    def create(self, data, actor):
        authorize(actor, Capability.MANAGE_VENUES)
        venue = _clean_venue(data)
        timestamp = now_iso(self.clock())
        venue.update({
            'id': generate_id('venue'),
            'created_at': timestamp,
            'updated_at': timestamp,
            'is_active': True,
        })
        self.store.put(local_store.VENUES, venue)
        logger.info(f"会場を登録しました: {venue['id']} {venue['name']}")
        return venue

    def update(self, venue_id, data, actor):
        authorize(actor, Capability.MANAGE_VENUES)
        venue = self.get(venue_id, include_inactive=True)
        venue.update(_clean_venue(data, partial=True))
        venue['updated_at'] = now_iso(self.clock())
        return self.store.put(local_store.VENUES, venue)

    def _set_active(self, venue_id, active, actor):
        authorize(actor, Capability.MANAGE_VENUES)
        venue = self.get(venue_id, include_inactive=True)
        venue['is_active'] = active
        venue['updated_at'] = now_iso(self.clock())
        return self.store.put(local_store.VENUES, venue)

    def deactivate(self, venue_id, actor):
        venue = self._set_active(venue_id, False, actor)
        logger.info(f"会場を無効化しました: {venue_id}")
        return venue

    def restore(self, venue_id, actor):
        return self._set_active(venue_id, True, actor)
