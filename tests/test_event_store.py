from datetime import timedelta

import pytest

import local_store
from event_store import EventStore, expand_recurring, load_seed_events
from models import RequestStatus
from tests.conftest import NOW, TickingClock, practice_payload
from utils.errors import AuthenticationError, NotFoundError, PermissionDeniedError, ValidationError

SEED_ORDER = [
    'seed_practice_omiya_weekly',
    'seed_practice_kawagoe',
    'seed_practice_urawa',
    'seed_tournament_tokyo_2026',
    'seed_tournament_yokohama',
    'seed_tournament_setagaya_2027',
]


class TestListing:

    def test_seed_events_sorted_by_date(self, services):
        listing = services.events.list()
        assert listing.ids() == SEED_ORDER
        assert listing.invalid == []

    def test_created_event_is_listed_first_as_new(self, services, users):
        event = services.events.create(practice_payload(event_date='2027-02-01'), users['organizer'])
        listing = services.events.list()
        assert listing.ids()[0] == event['id']
        assert services.events.is_new(event)

    def test_local_record_overrides_seed(self, services, users):
        services.events.update('seed_practice_kawagoe', {'name': '川越 練習会（会場変更）'}, users['organizer'])
        assert services.events.get('seed_practice_kawagoe')['name'] == '川越 練習会（会場変更）'
        assert len(services.events.list()) == len(SEED_ORDER)

    def test_invalid_local_date_is_reported(self, services):
        services.store.put(local_store.CREATED_EVENTS, {
            'id': 'broken', 'name': '日付不明', 'type': 'practice', 'event_date': '未定',
        })
        listing = services.events.list()
        assert 'broken' not in listing.ids()
        assert [item['id'] for item in listing.invalid] == ['broken']


class TestCreate:

    def test_organizer_creates_practice(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        assert event['creator_id'] == 'organizer_001'
        assert event['status'] == 'recruiting'
        assert event['participants_count'] == 0
        assert event['organizer_name'] == '主催者'
        assert services.store.get(local_store.CREATED_EVENTS, event['id']) is not None

    def test_legacy_field_names_are_accepted(self, services, users):
        payload = practice_payload(
            beginner_friendly=None, max_participants=None, maxParticipants='8', beginnerFriendly='true',
        )
        event = services.events.create(payload, users['organizer'])
        assert event['max_participants'] == 8
        assert event['beginner_friendly'] is True

    @pytest.mark.parametrize('value', ['false', '0', 'off'])
    def test_beginner_friendly_false_string(self, services, users, value):
        event = services.events.create(practice_payload(beginner_friendly=value), users['organizer'])
        assert event['beginner_friendly'] is False
        listing = services.events.list({'beginner_friendly': True})
        assert event['id'] not in listing.ids()

    def test_stored_string_flag_is_normalized(self, services):
        record = practice_payload(id='legacy_event', created_at='2026-09-01T00:00:00', beginner_friendly='false')
        services.store.put(local_store.CREATED_EVENTS, record)
        assert services.events.get('legacy_event')['beginner_friendly'] is False

    def test_participant_cannot_create(self, services, users):
        with pytest.raises(PermissionDeniedError):
            services.events.create(practice_payload(), users['participant'])

    def test_anonymous_cannot_create(self, services):
        with pytest.raises(AuthenticationError):
            services.events.create(practice_payload(), None)

    def test_organizer_cannot_create_tournament(self, services, users):
        with pytest.raises(PermissionDeniedError):
            services.events.create(practice_payload(type='tournament'), users['organizer'])

    def test_admin_creates_tournament(self, services, users):
        event = services.events.create(practice_payload(type='tournament'), users['admin'])
        assert event['type'] == 'tournament'

    @pytest.mark.parametrize('overrides', [
        {'name': '  '},
        {'event_date': '11/07/2026'},
        {'start_time': '25:00'},
        {'end_time': '09:00'},
        {'prefecture': 'カリフォルニア'},
        {'max_participants': -1},
        {'skill_level': 'expert'},
        {'type': 'party'},
    ])
    def test_invalid_input(self, services, users, overrides):
        with pytest.raises(ValidationError):
            services.events.create(practice_payload(**overrides), users['organizer'])

    def test_weekly_recurring_event(self, services, users):
        payload = practice_payload(
            event_date='2026-11-01',
            recurring=True,
            recurring_frequency='weekly',
            recurring_end_date='2026-11-22',
        )
        event = services.events.create(payload, users['organizer'])

        children = [
            r for r in services.store.all(local_store.CREATED_EVENTS)
            if r.get('parent_event_id') == event['id']
        ]
        assert sorted(c['event_date'] for c in children) == ['2026-11-08', '2026-11-15', '2026-11-22']
        assert all(not c['recurring'] for c in children)
        assert '土曜 練習会 (2026/11/8)' in [c['name'] for c in children]

    def test_recurring_end_before_start(self, services, users):
        payload = practice_payload(
            event_date='2026-11-01', recurring=True, recurring_frequency='weekly', recurring_end_date='2026-10-25',
        )
        with pytest.raises(ValidationError):
            services.events.create(payload, users['organizer'])

    def test_old_local_events_are_pruned(self, services, users):
        event = services.events.create(practice_payload(event_date='2026-08-01'), users['organizer'])
        assert services.store.get(local_store.CREATED_EVENTS, event['id']) is None

    def test_local_event_count_is_capped(self, store, users):
        events = EventStore(store, clock=TickingClock(), settings={'LOCAL_EVENT_MAX_COUNT': 2})
        created = [
            events.create(practice_payload(name=f'練習会 {n}'), users['organizer'])
            for n in range(3)
        ]
        remaining = {r['id'] for r in store.all(local_store.CREATED_EVENTS)}
        assert remaining == {created[1]['id'], created[2]['id']}


class TestExpandRecurring:

    def test_monthly_interval_is_thirty_days(self):
        event = {
            'id': 'e1', 'name': '月例会', 'event_date': '2026年11月1日', 'recurring': True,
            'recurring_frequency': 'monthly', 'recurring_end_date': '2027-01-01',
        }
        occurrences = expand_recurring(event, {'weekly': 7, 'biweekly': 14, 'monthly': 30})
        assert [o['event_date'] for o in occurrences] == ['2026-12-01', '2026-12-31']
        assert all(o['parent_event_id'] == 'e1' for o in occurrences)

    def test_without_end_date(self):
        event = {'id': 'e1', 'event_date': '2026-11-01', 'recurring': True, 'recurring_frequency': 'weekly'}
        assert expand_recurring(event, {'weekly': 7}) == []


class TestUpdateAndDelete:

    def test_other_organizer_cannot_update(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        other = services.users.register('other@example.com', 'secret1', '別の主催者')
        services.users.update_user_role(other.id, 'organizer', users['admin'])
        other = services.users.get_user(other.id)
        with pytest.raises(PermissionDeniedError):
            services.events.update(event['id'], {'name': '乗っ取り'}, other)

    def test_admin_can_update_any_event(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        updated = services.events.update(event['id'], {'name': '管理者が修正'}, users['admin'])
        assert updated['name'] == '管理者が修正'

    def test_immutable_fields_are_ignored(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        updated = services.events.update(
            event['id'], {'creator_id': 'user_001', 'created_at': '2000-01-01T00:00:00'}, users['organizer'],
        )
        assert updated['creator_id'] == 'organizer_001'
        assert updated['created_at'] == event['created_at']

    def test_organizer_cannot_turn_practice_into_tournament(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        with pytest.raises(PermissionDeniedError):
            services.events.update(event['id'], {'type': 'tournament'}, users['organizer'])

    def test_update_missing_event(self, services, users):
        with pytest.raises(NotFoundError):
            services.events.update('missing', {'name': 'x'}, users['admin'])

    def test_soft_delete_rejects_pending_requests(self, services, users):
        event = services.events.create(practice_payload(), users['organizer'])
        request = services.participation.create(event['id'], users['participant'])

        services.events.delete(event['id'], users['organizer'])

        with pytest.raises(NotFoundError):
            services.events.get(event['id'])
        assert services.store.get(local_store.CREATED_EVENTS, event['id'])['deleted_at'] == NOW.isoformat()
        assert services.participation.get(request['id'])['status'] == RequestStatus.REJECTED.value
        assert event['id'] not in services.events.list().ids()

    def test_delete_seed_event(self, services, users):
        services.events.delete('seed_tournament_yokohama', users['admin'])
        assert 'seed_tournament_yokohama' not in services.events.list().ids()


def test_organizer_events_newest_first(services, users):
    services.events.create(practice_payload(event_date='2026-12-24'), users['organizer'])
    events = services.events.organizer_events('organizer_001')
    assert [e['event_date'] for e in events] == [
        '2026-12-24', '2026-11-18T19:00:00', '2026年11月8日', '2026-10-31',
    ]


def test_load_seed_events_missing_file(tmp_path):
    assert load_seed_events(str(tmp_path / 'missing.json')) == []


class FailingRemote:
    """常に接続に失敗するリモートバックエンド"""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError('remote unavailable')
        return fail


class RecordingRemote:

    def __init__(self):
        self.created = []

    def create_events(self, events):
        self.created.extend(events)
        return events

    def get_event_by_id(self, event_id):
        return None

    def list_events(self, filters=None, today=None):
        return list(self.created)

    def get_events_by_creator(self, creator_id):
        return [e for e in self.created if e.get('creator_id') == creator_id]


class TestRemoteBackend:

    def test_list_falls_back_to_local(self, services):
        events = EventStore(services.store, seed_events=list(services.events.seed_events.values()),
                            remote=FailingRemote(), clock=lambda: NOW)
        assert events.list().ids() == SEED_ORDER

    def test_create_falls_back_to_local(self, store, users):
        events = EventStore(store, remote=FailingRemote(), clock=lambda: NOW)
        user = non_demo(users['organizer'])
        event = events.create(practice_payload(), user)
        assert store.get(local_store.CREATED_EVENTS, event['id']) is not None

    def test_create_uses_remote(self, store, users):
        remote = RecordingRemote()
        events = EventStore(store, remote=remote, clock=lambda: NOW)
        event = events.create(practice_payload(), non_demo(users['organizer']))
        assert [e['id'] for e in remote.created] == [event['id']]
        assert store.all(local_store.CREATED_EVENTS) == []

    def test_demo_user_writes_locally(self, store, users):
        remote = RecordingRemote()
        events = EventStore(store, remote=remote, clock=lambda: NOW)
        event = events.create(practice_payload(), users['organizer'])
        assert remote.created == []
        assert store.get(local_store.CREATED_EVENTS, event['id']) is not None

    def test_demo_user_lists_local_events(self, services, users):
        remote = RecordingRemote()
        events = EventStore(services.store, seed_events=list(services.events.seed_events.values()),
                            remote=remote, clock=lambda: NOW)
        organizer = users['organizer']
        event = events.create(practice_payload(), organizer)

        assert event['id'] in events.list(user=organizer).ids()
        assert 'seed_practice_kawagoe' in events.list(user=organizer).ids()
        assert event['id'] in [e['id'] for e in events.organizer_events(organizer.id, user=organizer)]
        # デモ以外はリモートのみを参照する
        assert events.list().ids() == []


def non_demo(user):
    user.is_demo = False
    return user


def test_new_flag_expires_after_three_days(store, users):
    clock = MovableClock()
    events = EventStore(store, clock=clock)
    event = events.create(practice_payload(), users['organizer'])
    assert events.is_new(event)
    clock.current += timedelta(days=4)
    assert not events.is_new(event)


class MovableClock:

    def __init__(self):
        self.current = NOW

    def __call__(self):
        return self.current
