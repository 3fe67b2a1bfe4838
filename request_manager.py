#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - 申請と承認

練習会への参加申請（practice_participation_requests）と
主催者権限の申請（practice_requests）を扱う。
どちらも pending から approved / rejected へ一度だけ遷移する。
"""

import logging
from datetime import datetime

import local_store
from member_manager import participation_record
from models import Capability, EventType, RequestStatus, User, UserRole, authorize
from utils.errors import (
    ConflictError, InvalidTransitionError, NotFoundError, PermissionDeniedError, ValidationError,
)
from utils.helpers import generate_id, now_iso

logger = logging.getLogger(__name__)

# 許可される遷移
ALLOWED_TRANSITIONS = {
    RequestStatus.PENDING: {RequestStatus.APPROVED, RequestStatus.REJECTED},
    RequestStatus.APPROVED: set(),
    RequestStatus.REJECTED: set(),
}


def _parse_status(value):
    try:
        return RequestStatus(value)
    except ValueError:
        raise ValidationError(f'不正なステータスです: {value}')


def transition(current, target):
    """ステータス遷移を検証し、遷移後のステータス値を返す"""
    current = _parse_status(current)
    target = _parse_status(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(f'{current.value} から {target.value} には変更できません')
    return target.value


class ParticipationRequestManager:
    """練習会への参加申請"""

    def __init__(self, store, events, clock=None):
        self.store = store
        self.events = events
        self.clock = clock or datetime.now

    def _all(self):
        return self.store.all(local_store.PARTICIPATION_REQUESTS)

    def get(self, request_id):
        request = self.store.get(local_store.PARTICIPATION_REQUESTS, request_id)
        if request is None:
            raise NotFoundError('申請が見つかりません')
        return request

    def create(self, event_id, user, message=None):
        authorize(user, Capability.REQUEST_PARTICIPATION)
        event = self.events.get(event_id)
        if event.get('type') != EventType.PRACTICE.value:
            raise ValidationError('参加申請は練習会のみ受け付けています')
        if event.get('creator_id') == user.id:
            raise ValidationError('自分が主催する練習会には申請できません')

        with self.store.transaction() as tx:
            for existing in tx.all(local_store.PARTICIPATION_REQUESTS):
                if (existing.get('event_id') == event_id
                        and existing.get('user_id') == user.id
                        and existing.get('status') != RequestStatus.REJECTED.value):
                    raise ConflictError('既に申請済みです')

            request = {
                'id': generate_id('pr'),
                'event_id': event_id,
                'event_name': event.get('name'),
                'event_date': event.get('event_date'),
                'event_venue': event.get('venue'),
                'user_id': user.id,
                'user_name': user.name,
                'user_email': user.email,
                'message': (message or '').strip() or None,
                'status': RequestStatus.PENDING.value,
                'created_at': now_iso(self.clock()),
                'processed_at': None,
                'organizer_id': event.get('creator_id'),
            }
            tx.put(local_store.PARTICIPATION_REQUESTS, request)

        logger.info(f"参加申請を受け付けました: {request['id']} event={event_id} user={user.id}")
        return request

    def for_user(self, user_id):
        requests = [r for r in self._all() if r.get('user_id') == user_id]
        return sorted(requests, key=lambda r: r.get('created_at') or '', reverse=True)

    def for_organizer(self, organizer_id, status=None):
        requests = [r for r in self._all() if r.get('organizer_id') == organizer_id]
        if status:
            requests = [r for r in requests if r.get('status') == status]
        return sorted(requests, key=lambda r: r.get('created_at') or '', reverse=True)

    def for_event(self, event_id):
        requests = [r for r in self._all() if r.get('event_id') == event_id]
        return sorted(requests, key=lambda r: r.get('created_at') or '')

    def status_for(self, event_id, user_id):
        """そのユーザーの最新の申請（無ければ None）"""
        requests = [
            r for r in self._all()
            if r.get('event_id') == event_id and r.get('user_id') == user_id
        ]
        if not requests:
            return None
        return max(requests, key=lambda r: r.get('created_at') or '')

    def pending_count(self, organizer_id=None):
        return sum(
            1 for r in self._all()
            if r.get('status') == RequestStatus.PENDING.value
            and (organizer_id is None or r.get('organizer_id') == organizer_id)
        )

    def _check_processor(self, request, actor):
        authorize(actor, Capability.PROCESS_PARTICIPATION_REQUESTS)
        if request.get('organizer_id') != actor.id and not actor.has_capability(Capability.MANAGE_ALL_EVENTS):
            raise PermissionDeniedError('この申請を処理する権限がありません')

    def process(self, request_id, status, actor):
        """承認または却下。承認時は参加イベントへの登録も同じトランザクションで行う"""
        processed_at = now_iso(self.clock())
        event = None
        if status == RequestStatus.APPROVED.value:
            event = self._event_snapshot(self.get(request_id))

        with self.store.transaction() as tx:
            request = tx.get(local_store.PARTICIPATION_REQUESTS, request_id)
            if request is None:
                raise NotFoundError('申請が見つかりません')
            self._check_processor(request, actor)

            request['status'] = transition(request.get('status'), status)
            request['processed_at'] = processed_at
            tx.put(local_store.PARTICIPATION_REQUESTS, request)

            if request['status'] == RequestStatus.APPROVED.value:
                tx.put(
                    local_store.PARTICIPATING_EVENTS,
                    participation_record(request['user_id'], event, processed_at),
                )

        logger.info(f"参加申請を処理しました: {request_id} -> {request['status']} by {actor.id}")
        return request

    def _event_snapshot(self, request):
        """イベントが削除済みでも申請に残っている情報で登録できるようにする"""
        try:
            return self.events.get(request['event_id'])
        except NotFoundError:
            return {
                'id': request['event_id'],
                'name': request.get('event_name'),
                'event_date': request.get('event_date'),
                'venue': request.get('event_venue'),
            }

    def remove(self, request_id, actor):
        request = self.get(request_id)
        if request.get('user_id') != actor.id:
            self._check_processor(request, actor)
        self.store.delete(local_store.PARTICIPATION_REQUESTS, request_id)
        logger.info(f"参加申請を削除しました: {request_id} by {actor.id}")
        return True


class ApprovalCommand:
    """承認で行う2つの変更（申請と申請者）"""

    def __init__(self, application, user):
        self.application = application
        self.user = user

    def apply(self, tx):
        tx.put(local_store.PRACTICE_REQUESTS, self.application)
        if self.user is not None:
            tx.put(local_store.USERS, self.user.to_record())


class OrganizerApplicationManager:
    """主催者権限の申請"""

    FORM_FIELDS = ('reason', 'experience', 'plan', 'location', 'frequency')

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now

    def _all(self):
        return self.store.all(local_store.PRACTICE_REQUESTS)

    def get(self, application_id):
        application = self.store.get(local_store.PRACTICE_REQUESTS, application_id)
        if application is None:
            raise NotFoundError('申請が見つかりません')
        return application

    def submit(self, user, form):
        authorize(user, Capability.APPLY_ORGANIZER)
        if user.has_capability(Capability.CREATE_PRACTICE):
            raise ConflictError('既に主催者権限をお持ちです')

        values = {field: (form.get(field) or '').strip() for field in self.FORM_FIELDS}
        if not values['reason']:
            raise ValidationError('申請理由を入力してください')

        with self.store.transaction() as tx:
            for existing in tx.all(local_store.PRACTICE_REQUESTS):
                if existing.get('user_id') == user.id and existing.get('status') == RequestStatus.PENDING.value:
                    raise ConflictError('既に申請中です。承認をお待ちください')

            application = {
                'id': generate_id('req'),
                'user_id': user.id,
                'user_name': user.name,
                'user_email': user.email,
                'status': RequestStatus.PENDING.value,
                'created_at': now_iso(self.clock()),
                'processed_at': None,
                'processed_by': None,
            }
            application.update(values)
            tx.put(local_store.PRACTICE_REQUESTS, application)

        logger.info(f"主催者申請を受け付けました: {application['id']} user={user.id}")
        return application

    def list(self, status=None):
        applications = self._all()
        if status:
            _parse_status(status)
            applications = [a for a in applications if a.get('status') == status]
        return sorted(applications, key=lambda a: a.get('created_at') or '', reverse=True)

    def for_user(self, user_id):
        return [a for a in self.list() if a.get('user_id') == user_id]

    def pending_count(self):
        return sum(1 for a in self._all() if a.get('status') == RequestStatus.PENDING.value)

    def build_approval(self, application, user_record, actor, processed_at):
        """承認後の申請と申請者を組み立てる（保存はしない）"""
        application = dict(application)
        application['status'] = transition(application.get('status'), RequestStatus.APPROVED.value)
        application['processed_at'] = processed_at
        application['processed_by'] = actor.id

        user = None
        if user_record is not None:
            user = User.from_dict(user_record)
            # 既により上位の権限を持つ場合は下げない
            if user.role.level < UserRole.ORGANIZER.level:
                user.role = UserRole.ORGANIZER
        return ApprovalCommand(application, user)

    def approve(self, application_id, actor):
        authorize(actor, Capability.APPROVE_ORGANIZER_APPLICATIONS)
        processed_at = now_iso(self.clock())

        with self.store.transaction() as tx:
            application = tx.get(local_store.PRACTICE_REQUESTS, application_id)
            if application is None:
                raise NotFoundError('申請が見つかりません')
            user_record = tx.get(local_store.USERS, application['user_id'])
            command = self.build_approval(application, user_record, actor, processed_at)
            command.apply(tx)

        if command.user is None:
            logger.warning(f"承認した申請のユーザーが見つかりません: {application['user_id']}")
        logger.info(f"主催者申請を承認しました: {application_id} by {actor.id}")
        return command.application

    def reject(self, application_id, actor):
        authorize(actor, Capability.APPROVE_ORGANIZER_APPLICATIONS)
        with self.store.transaction() as tx:
            application = tx.get(local_store.PRACTICE_REQUESTS, application_id)
            if application is None:
                raise NotFoundError('申請が見つかりません')
            application['status'] = transition(application.get('status'), RequestStatus.REJECTED.value)
            application['processed_at'] = now_iso(self.clock())
            application['processed_by'] = actor.id
            tx.put(local_store.PRACTICE_REQUESTS, application)

        logger.info(f"主催者申請を却下しました: {application_id} by {actor.id}")
        return application
