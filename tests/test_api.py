import local_store
from tests.conftest import practice_payload

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class TestAuth:

    def test_index(self, client):
        data = client.get('/').get_json()
        assert data['success'] is True
        assert data['data']['logged_in'] is False

    def test_login_failure(self, client):
        response = client.post('/api/auth/login', json={'email': 'user@example.com', 'password': 'wrong'})
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_login_requires_fields(self, client):
        response = client.post('/api/auth/login', json={'email': 'user@example.com'})
        assert response.status_code == 400

    def test_session_and_logout(self, login_as):
        client = login_as('organizer')
        user = client.get('/api/auth/session').get_json()['data']['user']
        assert user['id'] == 'organizer_001'
        assert user['is_organizer'] is True
        assert 'create_practice' in user['capabilities']

        client.post('/api/auth/logout')
        assert client.get('/api/auth/session').get_json()['data']['logged_in'] is False

    def test_register_logs_in(self, client):
        response = client.post('/api/auth/register', json={
            'email': 'new@example.com', 'password': 'secret1', 'name': '新規', 'prefecture': '千葉県',
        })
        assert response.status_code == 201
        assert client.get('/api/users/me').get_json()['data']['email'] == 'new@example.com'

    def test_register_duplicate(self, client):
        response = client.post('/api/auth/register', json={
            'email': 'user@example.com', 'password': 'secret1', 'name': '重複',
        })
        assert response.status_code == 409

    def test_profile_requires_login(self, client):
        response = client.get('/api/users/me')
        assert response.status_code == 401


class TestEventsApi:

    def test_list(self, client):
        data = client.get('/api/events').get_json()
        assert data['count'] == 6
        assert data['data'][0]['id'] == 'seed_practice_omiya_weekly'
        assert data['data'][0]['is_new'] is False
        assert 'invalid_events' not in data

    def test_list_filters(self, client):
        data = client.get('/api/events', query_string={'type': 'tournament', 'region': '関東'}).get_json()
        assert [e['id'] for e in data['data']] == [
            'seed_tournament_tokyo_2026', 'seed_tournament_yokohama', 'seed_tournament_setagaya_2027',
        ]
        data = client.get('/api/events?month=2026-11&beginner_friendly=true').get_json()
        assert [e['id'] for e in data['data']] == ['seed_practice_urawa']

    def test_invalid_filters(self, client):
        assert client.get('/api/events?type=party').status_code == 400
        assert client.get('/api/events?month=2026-13').status_code == 400
        assert client.get('/api/events?date=2026/11/08').status_code == 400
        assert client.get('/api/events', query_string={'region': '火星'}).status_code == 400

    def test_invalid_events_for_admin(self, services, login_as):
        services.store.put(local_store.CREATED_EVENTS, {
            'id': 'broken', 'name': '日付不明', 'type': 'practice', 'event_date': 'TBD',
        })
        admin = login_as('admin')
        data = admin.get('/api/events').get_json()
        assert [item['id'] for item in data['invalid_events']] == ['broken']
        participant = login_as('participant')
        assert 'invalid_events' not in participant.get('/api/events').get_json()

    def test_create_requires_login(self, client):
        response = client.post('/api/events', json=practice_payload())
        assert response.status_code == 401

    def test_participant_cannot_create(self, login_as):
        response = login_as('participant').post('/api/events', json=practice_payload())
        assert response.status_code == 403

    def test_organizer_cannot_create_tournament(self, login_as):
        response = login_as('organizer').post('/api/events', json=practice_payload(type='tournament'))
        assert response.status_code == 403

    def test_create_update_delete(self, login_as):
        organizer = login_as('organizer')
        response = organizer.post('/api/events', json=practice_payload())
        assert response.status_code == 201
        event_id = response.get_json()['data']['id']

        detail = organizer.get(f'/api/events/{event_id}').get_json()['data']
        assert detail['is_new'] is True
        assert detail['viewer']['can_manage'] is True

        response = organizer.put(f'/api/events/{event_id}', json={'name': '日曜 練習会'})
        assert response.get_json()['data']['name'] == '日曜 練習会'

        response = login_as('participant').put(f'/api/events/{event_id}', json={'name': 'x'})
        assert response.status_code == 403

        assert organizer.delete(f'/api/events/{event_id}').status_code == 200
        assert organizer.get(f'/api/events/{event_id}').status_code == 404

    def test_invalid_payload(self, login_as):
        response = login_as('organizer').post('/api/events', json=practice_payload(end_time='08:00'))
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_my_events(self, login_as):
        data = login_as('organizer').get('/api/events/mine?type=practice').get_json()
        assert data['count'] == 3
        assert data['pending_requests'] == 0

    def test_comments(self, login_as, client):
        participant = login_as('participant')
        response = participant.post('/api/events/seed_practice_kawagoe/comments', json={'content': '楽しみです'})
        assert response.status_code == 201
        comment_id = response.get_json()['data']['id']

        liked = login_as('organizer').post(f'/api/events/comments/{comment_id}/like').get_json()
        assert liked['data']['liked'] is True

        comments = client.get('/api/events/seed_practice_kawagoe/comments').get_json()
        assert comments['count'] == 1
        assert comments['data'][0]['likes'] == 1

    def test_unknown_event(self, client):
        response = client.get('/api/events/missing')
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestParticipationFlow:

    def test_request_approve_and_participate(self, login_as):
        participant = login_as('participant')
        organizer = login_as('organizer')

        response = participant.post('/api/events/seed_practice_urawa/requests', json={'message': 'よろしくお願いします'})
        assert response.status_code == 201
        request_id = response.get_json()['data']['id']

        assert participant.post('/api/events/seed_practice_urawa/requests').status_code == 409

        pending = organizer.get('/api/participation-requests/organizer?status=pending').get_json()
        assert [r['id'] for r in pending['data']] == [request_id]

        response = organizer.put(f'/api/participation-requests/{request_id}', json={'status': 'approved'})
        assert response.status_code == 200

        response = organizer.put(f'/api/participation-requests/{request_id}', json={'status': 'rejected'})
        assert response.status_code == 409

        upcoming = participant.get('/api/me/events?scope=upcoming').get_json()
        assert [r['event_id'] for r in upcoming['data']] == ['seed_practice_urawa']

        detail = participant.get('/api/events/seed_practice_urawa').get_json()['data']
        assert detail['viewer']['request_status'] == 'approved'
        assert detail['viewer']['is_participating'] is True

    def test_export_requests(self, login_as):
        login_as('participant').post('/api/events/seed_practice_urawa/requests')
        response = login_as('organizer').get('/api/events/seed_practice_urawa/requests/export')
        assert response.status_code == 200
        assert response.mimetype == XLSX_MIMETYPE

    def test_other_events_requests_are_hidden(self, login_as):
        response = login_as('organizer').get('/api/events/seed_tournament_tokyo_2026/requests')
        assert response.status_code == 403

    def test_organizer_application(self, login_as):
        participant = login_as('participant')
        response = participant.post('/api/organizer-applications', json={'reason': '練習会を開きたい'})
        assert response.status_code == 201
        application_id = response.get_json()['data']['id']

        assert participant.get('/api/organizer-applications').status_code == 403

        admin = login_as('admin')
        assert admin.get('/api/organizer-applications').get_json()['pending_count'] == 1
        assert admin.post(f'/api/organizer-applications/{application_id}/approve').status_code == 200

        profile = participant.get('/api/users/me').get_json()['data']
        assert profile['role'] == 'organizer'
        assert profile['can_create_events'] is True


class TestMembersApi:

    def test_favorites(self, login_as):
        client = login_as('participant')
        assert client.post('/api/me/favorites/seed_practice_kawagoe/toggle').get_json()['data']['favorited'] is True
        assert client.get('/api/me/favorites').get_json()['count'] == 1
        assert client.delete('/api/me/favorites/seed_practice_kawagoe').status_code == 200
        assert client.get('/api/me/favorites').get_json()['count'] == 0

    def test_favorites_require_login(self, client):
        assert client.get('/api/me/favorites').status_code == 401

    def test_join_and_scope(self, login_as):
        client = login_as('participant')
        assert client.post('/api/me/events/seed_tournament_tokyo_2026').status_code == 200
        assert client.get('/api/me/events').get_json()['count'] == 1
        assert client.get('/api/me/events?scope=past').get_json()['count'] == 0
        assert client.get('/api/me/events?scope=someday').status_code == 400

    def test_practice_join_goes_through_request(self, login_as):
        client = login_as('participant')
        assert client.post('/api/me/events/seed_practice_kawagoe').status_code == 400
        assert client.get('/api/me/events').get_json()['count'] == 0

    def test_settings(self, login_as):
        client = login_as('participant')
        response = client.put('/api/me/settings/privacy', json={'hide_from_participants': True})
        assert response.get_json()['data'] == {'hide_from_participants': True}
        response = client.put('/api/me/settings/notifications', json={'unknown': True})
        assert response.status_code == 400


class TestCommunicationApi:

    def test_announcements(self, login_as, client):
        response = login_as('admin').post('/api/announcements', json={'title': 't', 'content': 'c'})
        assert response.status_code == 403
        response = login_as('super_admin').post('/api/announcements', json={'title': '大会延期', 'content': '雨天のため'})
        assert response.status_code == 201
        assert client.get('/api/announcements').get_json()['count'] == 1

    def test_anonymous_inquiry(self, client, login_as):
        response = client.post('/api/inquiries', json={'subject': '質問', 'message': '内容'})
        assert response.status_code == 400
        response = client.post('/api/inquiries', json={
            'subject': '質問', 'message': '内容', 'name': '山田', 'email': 'yamada@example.com',
        })
        assert response.status_code == 201

        admin = login_as('admin')
        data = admin.get('/api/inquiries?status=unread').get_json()
        assert data['count'] == 1
        export = admin.get('/api/inquiries/export')
        assert export.mimetype == XLSX_MIMETYPE

    def test_news_drafts_are_hidden(self, login_as, client):
        admin = login_as('admin')
        response = admin.post('/api/news', json={'title': '新ルール', 'content': '本文', 'category': 'ルール'})
        article_id = response.get_json()['data']['id']
        assert client.get(f'/api/news/{article_id}').status_code == 404
        admin.post(f'/api/news/{article_id}/publish')
        assert client.get(f'/api/news/{article_id}').status_code == 200


class TestVenuesApi:

    def test_list(self, client):
        assert client.get('/api/venues').get_json()['count'] == 6
        assert client.get('/api/venues', query_string={'prefecture': '埼玉県'}).get_json()['count'] == 3

    def test_deactivate(self, login_as, client):
        venue_id = client.get('/api/venues', query_string={'prefecture': '神奈川県'}).get_json()['data'][0]['id']
        assert login_as('organizer').delete(f'/api/venues/{venue_id}').status_code == 403
        admin = login_as('admin')
        assert admin.delete(f'/api/venues/{venue_id}').status_code == 200
        assert client.get('/api/venues').get_json()['count'] == 5
        assert admin.get('/api/venues/admin').get_json()['count'] == 6
        assert admin.post(f'/api/venues/{venue_id}/restore').status_code == 200


class TestSystemApi:

    def test_stats_requires_super_admin(self, login_as):
        assert login_as('admin').get('/api/system/stats').status_code == 403
        data = login_as('super_admin').get('/api/system/stats').get_json()['data']
        assert data['counts'][local_store.USERS] == 4
        assert data['counts'][local_store.VENUES] == 6
        assert data['remote_enabled'] is False

    def test_clear_comments(self, services, login_as):
        login_as('participant').post('/api/events/seed_practice_kawagoe/comments', json={'content': 'hi'})
        client = login_as('super_admin')
        assert client.post('/api/system/clear', json={'category': 'comments'}).status_code == 200
        assert services.members.comment_count('seed_practice_kawagoe') == 0
        assert client.post('/api/system/clear', json={'category': 'everything'}).status_code == 400

    def test_clear_all_recreates_demo_accounts(self, services, login_as):
        services.users.register('x@example.com', 'secret1', 'x')
        assert len(services.users.list_users()) == 5
        response = login_as('super_admin').post('/api/system/clear', json={'category': 'all'})
        assert response.status_code == 200
        assert len(services.users.list_users()) == 4
        assert len(services.venues.list()) == 6

    def test_export_and_import(self, services, login_as):
        client = login_as('super_admin')
        dump = client.get('/api/system/export').get_json()['data']
        services.store.put(local_store.EVENT_COMMENTS, {'id': 'c1', 'event_id': 'seed_practice_kawagoe'})
        assert client.post('/api/system/import', json={'data': dump}).status_code == 200
        assert services.store.get(local_store.EVENT_COMMENTS, 'c1') is None

    def test_import_rejects_malformed_collections(self, services, login_as):
        client = login_as('super_admin')
        response = client.post('/api/system/import', json={'data': {local_store.CREATED_EVENTS: {'x': 'str'}}})
        assert response.status_code == 400
        assert local_store.CREATED_EVENTS in response.get_json()['message']
        assert client.get('/api/events').status_code == 200
        assert len(services.users.list_users()) == 4

    def test_health(self, client):
        data = client.get('/api/system/health').get_json()
        assert data['health']['local_store']['status'] == 'healthy'
        assert data['health']['remote']['status'] == 'disabled'


def test_unknown_route_returns_json(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json()['success'] is False
