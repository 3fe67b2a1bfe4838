import json
import logging

from mysql.connector import Error

from models import REGION_PREFECTURES


logger = logging.getLogger(__name__)

_JSON_COLUMNS = ('prizes', 'recurring_days')

_COLUMNS = [
    'id', 'name', 'type', 'event_date', 'start_time', 'end_time', 'venue', 'prefecture',
    'description', 'image_url', 'max_participants', 'entry_fee', 'beginner_friendly',
    'skill_level', 'rules', 'prizes', 'creator_id', 'organizer_name', 'status',
    'participants_count', 'recurring', 'recurring_frequency', 'recurring_days',
    'recurring_end_date', 'parent_event_id', 'created_at', 'deleted_at',
]


def _row_to_event(row):
    event = dict(row)
    for column in _JSON_COLUMNS:
        if isinstance(event.get(column), (str, bytes)):
            event[column] = json.loads(event[column])
    event['beginner_friendly'] = bool(event.get('beginner_friendly'))
    event['recurring'] = bool(event.get('recurring'))
    return event


def _event_params(event):
    params = []
    for column in _COLUMNS:
        value = event.get(column)
        if column in _JSON_COLUMNS and value is not None:
            value = json.dumps(value, ensure_ascii=False)
        params.append(value)
    return params


class EventDbMixin:
    """イベント関連のデータベース操作 mixin。

    ホストクラスが self.get_connection() を提供すること。
    """

    def list_events(self, filters=None, today=None):
        """論理削除されていないイベントを取得（開催日の最終判定は呼び出し側）"""
        filters = filters or {}
        conditions = ['deleted_at IS NULL']
        params = []

        if filters.get('type'):
            conditions.append('type = %s')
            params.append(filters['type'])
        if filters.get('prefecture'):
            conditions.append('prefecture = %s')
            params.append(filters['prefecture'])
        if filters.get('region'):
            prefectures = REGION_PREFECTURES.get(filters['region'], [])
            if not prefectures:
                return []
            conditions.append('prefecture IN (' + ', '.join(['%s'] * len(prefectures)) + ')')
            params.extend(prefectures)
        if filters.get('beginner_friendly'):
            conditions.append('beginner_friendly = TRUE')

        sql = 'SELECT * FROM events WHERE ' + ' AND '.join(conditions) + ' ORDER BY created_at DESC'
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, tuple(params))
                return [_row_to_event(row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"イベント一覧の取得に失敗: {e}")
            raise

    def get_event_by_id(self, event_id):
        with self.get_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute('SELECT * FROM events WHERE id = %s AND deleted_at IS NULL', (event_id,))
            row = cursor.fetchone()
            return _row_to_event(row) if row else None

    def get_events_by_creator(self, creator_id):
        with self.get_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(
                'SELECT * FROM events WHERE creator_id = %s AND deleted_at IS NULL',
                (creator_id,),
            )
            return [_row_to_event(row) for row in cursor.fetchall()]

    def create_events(self, events):
        """イベントを作成（定期開催の2回目以降もまとめて登録）"""
        if not events:
            return []
        placeholders = ', '.join(['%s'] * len(_COLUMNS))
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.executemany(
                    f"INSERT INTO events ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                    [tuple(_event_params(e)) for e in events],
                )
                conn.commit()
                return events
        except Error as e:
            logger.error(f"イベントの作成に失敗: {e}")
            raise

    def update_event(self, event):
        columns = [c for c in _COLUMNS if c != 'id']
        assignments = ', '.join(f'{c} = %s' for c in columns)
        params = _event_params(event)[1:] + [event['id']]
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f'UPDATE events SET {assignments} WHERE id = %s', tuple(params))
            conn.commit()
            return cursor.rowcount > 0

    def soft_delete_event(self, event_id, deleted_at):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                'UPDATE events SET deleted_at = %s WHERE id = %s AND deleted_at IS NULL',
                (deleted_at, event_id),
            )
            conn.commit()
            return cursor.rowcount > 0
