import pytest

import local_store
from models import UserRole
from request_manager import transition
from tests.conftest import practice_payload
from utils.errors import ConflictError, InvalidTransitionError, PermissionDeniedError, ValidationError


class TestTransition:

    @pytest.mark.parametrize('target', ['approved', 'rejected'])
    def test_pending_can_be_processed(self, target):
        assert transition('pending', target) == target

    @pytest.mark.parametrize('current,target', [
        ('approved', 'rejected'),
        ('rejected', 'approved'),
        ('approved', 'approved'),
        ('pending', 'pending'),
    ])
    def test_processed_requests_are_final(self, current, target):
        with pytest.raises(InvalidTransitionError):
            transition(current, target)

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            transition('pending', 'cancelled')


class TestParticipationRequests:

    def test_request_and_approve(self, services, users):
        request = services.participation.create(
            'seed_practice_kawagoe', users['participant'], message='  よろしくお願いします ',
        )
        assert request['status'] == 'pending'
        assert request['organizer_id'] == 'organizer_001'
        assert request['message'] == 'よろしくお願いします'
        assert services.participation.pending_count(organizer_id='organizer_001') == 1

        approved = services.participation.process(request['id'], 'approved', users['organizer'])
        assert approved['status'] == 'approved'
        assert approved['processed_at'] is not None
        assert services.members.is_participating('user_001', 'seed_practice_kawagoe')
        assert services.participation.pending_count() == 0

    def test_tournament_does_not_accept_requests(self, services, users):
        with pytest.raises(ValidationError):
            services.participation.create('seed_tournament_tokyo_2026', users['participant'])

    def test_cannot_request_own_event(self, services, users):
        with pytest.raises(ValidationError):
            services.participation.create('seed_practice_kawagoe', users['organizer'])

    def test_duplicate_request(self, services, users):
        services.participation.create('seed_practice_kawagoe', users['participant'])
        with pytest.raises(ConflictError) as excinfo:
            services.participation.create('seed_practice_kawagoe', users['participant'])
        assert excinfo.value.message == '既に申請済みです'

    def test_can_request_again_after_rejection(self, services, users):
        first = services.participation.create('seed_practice_kawagoe', users['participant'])
        services.participation.process(first['id'], 'rejected', users['organizer'])
        second = services.participation.create('seed_practice_kawagoe', users['participant'])
        assert second['id'] != first['id']
        assert second['status'] == 'pending'
        assert not services.members.is_participating('user_001', 'seed_practice_kawagoe')

    def test_processing_twice_is_rejected(self, services, users):
        request = services.participation.create('seed_practice_kawagoe', users['participant'])
        services.participation.process(request['id'], 'approved', users['organizer'])
        with pytest.raises(InvalidTransitionError):
            services.participation.process(request['id'], 'rejected', users['organizer'])
        assert services.participation.get(request['id'])['status'] == 'approved'

    def test_only_event_organizer_or_admin_processes(self, services, users):
        event = services.events.create(practice_payload(), users['admin'])
        request = services.participation.create(event['id'], users['participant'])
        with pytest.raises(PermissionDeniedError):
            services.participation.process(request['id'], 'approved', users['organizer'])
        assert services.participation.process(request['id'], 'approved', users['super_admin'])['status'] == 'approved'

    def test_requests_for_organizer(self, services, users):
        services.participation.create('seed_practice_kawagoe', users['participant'])
        services.participation.create('seed_practice_urawa', users['participant'])
        assert len(services.participation.for_organizer('organizer_001')) == 2
        assert services.participation.for_organizer('organizer_001', status='approved') == []
        assert len(services.participation.for_user('user_001')) == 2

    def test_applicant_can_withdraw(self, services, users):
        request = services.participation.create('seed_practice_kawagoe', users['participant'])
        services.participation.remove(request['id'], users['participant'])
        assert services.participation.for_event('seed_practice_kawagoe') == []


class TestOrganizerApplications:

    def _form(self, **overrides):
        form = {'reason': '地域で練習会を開きたい', 'experience': '5年', 'location': '千葉県'}
        form.update(overrides)
        return form

    def test_submit_and_approve(self, services, users):
        application = services.applications.submit(users['participant'], self._form())
        assert application['status'] == 'pending'
        assert services.applications.pending_count() == 1

        approved = services.applications.approve(application['id'], users['admin'])
        assert approved['status'] == 'approved'
        assert approved['processed_by'] == 'admin_001'
        user = services.users.get_user('user_001')
        assert user.role == UserRole.ORGANIZER
        assert user.can_create_events

    def test_reason_is_required(self, services, users):
        with pytest.raises(ValidationError):
            services.applications.submit(users['participant'], self._form(reason='  '))

    def test_duplicate_pending_application(self, services, users):
        services.applications.submit(users['participant'], self._form())
        with pytest.raises(ConflictError) as excinfo:
            services.applications.submit(users['participant'], self._form())
        assert excinfo.value.message == '既に申請中です。承認をお待ちください'

    def test_organizer_cannot_apply(self, services, users):
        with pytest.raises(ConflictError) as excinfo:
            services.applications.submit(users['organizer'], self._form())
        assert excinfo.value.message == '既に主催者権限をお持ちです'

    def test_organizer_cannot_approve(self, services, users):
        application = services.applications.submit(users['participant'], self._form())
        with pytest.raises(PermissionDeniedError):
            services.applications.approve(application['id'], users['organizer'])

    def test_reject_keeps_role(self, services, users):
        application = services.applications.submit(users['participant'], self._form())
        rejected = services.applications.reject(application['id'], users['admin'])
        assert rejected['status'] == 'rejected'
        assert services.users.get_user('user_001').role == UserRole.PARTICIPANT
        with pytest.raises(InvalidTransitionError):
            services.applications.approve(application['id'], users['admin'])

    def test_build_approval_never_lowers_role(self, services, users):
        application = {'id': 'req_1', 'user_id': 'admin_001', 'status': 'pending'}
        user_record = services.store.get(local_store.USERS, 'admin_001')
        command = services.applications.build_approval(application, user_record, users['super_admin'], 'now')
        assert command.user.role == UserRole.ADMIN
        assert command.application['status'] == 'approved'
        # 組み立てるだけで保存はしない
        assert services.store.get(local_store.PRACTICE_REQUESTS, 'req_1') is None
