#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - お知らせ・ニュース・お問い合わせ
"""

import logging
from datetime import datetime

import local_store
from models import (
    AnnouncementPriority, AnnouncementType, Capability, InquiryStatus, NEWS_CATEGORIES, authorize,
)
from utils.errors import NotFoundError, ValidationError
from utils.helpers import generate_id, now_iso, parse_bool, validate_email

logger = logging.getLogger(__name__)


def _newest_first(records, field='created_at'):
    return sorted(records, key=lambda r: r.get(field) or '', reverse=True)


def _required_text(data, field, label):
    value = (data.get(field) or '').strip()
    if not value:
        raise ValidationError(f'{label}を入力してください')
    return value


class AnnouncementManager:
    """トップページのお知らせ（件数上限あり）"""

    def __init__(self, store, clock=None, max_count=10):
        self.store = store
        self.clock = clock or datetime.now
        self.max_count = max_count

    def _validate(self, announcement):
        try:
            AnnouncementType(announcement.get('type'))
        except ValueError:
            raise ValidationError('種類は info / warning / success から選択してください')
        try:
            AnnouncementPriority(announcement.get('priority'))
        except ValueError:
            raise ValidationError('優先度は normal / high から選択してください')

    def get(self, announcement_id):
        announcement = self.store.get(local_store.ANNOUNCEMENTS, announcement_id)
        if announcement is None:
            raise NotFoundError('お知らせが見つかりません')
        return announcement

    def list(self, active_only=True):
        announcements = self.store.all(local_store.ANNOUNCEMENTS)
        if active_only:
            announcements = [a for a in announcements if a.get('is_active')]
        return _newest_first(announcements)

    def create(self, data, actor):
        authorize(actor, Capability.MANAGE_ANNOUNCEMENTS)
        announcement = {
            'id': generate_id('announcement'),
            'title': _required_text(data, 'title', 'タイトル'),
            'content': _required_text(data, 'content', '内容'),
            'type': data.get('type') or AnnouncementType.INFO.value,
            'priority': data.get('priority') or AnnouncementPriority.NORMAL.value,
            'is_active': parse_bool(data.get('is_active'), default=True),
            'created_at': now_iso(self.clock()),
            'created_by': actor.id,
        }
        self._validate(announcement)

        with self.store.transaction() as tx:
            # 上限を超えた分は古いものから削除（作成日時が同じなら先に登録した方が古い）
            others = list(enumerate(tx.all(local_store.ANNOUNCEMENTS)))
            others.sort(key=lambda pair: (pair[1].get('created_at') or '', pair[0]), reverse=True)
            for _, old in others[self.max_count - 1:]:
                tx.delete(local_store.ANNOUNCEMENTS, old['id'])
                logger.info(f"古いお知らせを削除しました: {old['id']}")
            tx.put(local_store.ANNOUNCEMENTS, announcement)
        return announcement

    def update(self, announcement_id, data, actor):
        authorize(actor, Capability.MANAGE_ANNOUNCEMENTS)
        announcement = self.get(announcement_id)
        for field in ('title', 'content'):
            if field in data:
                announcement[field] = _required_text(data, field, 'タイトル' if field == 'title' else '内容')
        for field in ('type', 'priority'):
            if data.get(field):
                announcement[field] = data[field]
        if 'is_active' in data:
            announcement['is_active'] = parse_bool(data['is_active'])
        self._validate(announcement)
        announcement['updated_at'] = now_iso(self.clock())
        return self.store.put(local_store.ANNOUNCEMENTS, announcement)

    def toggle_active(self, announcement_id, actor):
        authorize(actor, Capability.MANAGE_ANNOUNCEMENTS)
        announcement = self.get(announcement_id)
        announcement['is_active'] = not announcement.get('is_active')
        return self.store.put(local_store.ANNOUNCEMENTS, announcement)

    def delete(self, announcement_id, actor):
        authorize(actor, Capability.MANAGE_ANNOUNCEMENTS)
        if not self.store.delete(local_store.ANNOUNCEMENTS, announcement_id):
            raise NotFoundError('お知らせが見つかりません')
        return True


class NewsManager:
    """ニュース記事"""

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now

    def _get(self, article_id):
        article = self.store.get(local_store.NEWS_ARTICLES, article_id)
        if article is None:
            raise NotFoundError('記事が見つかりません')
        return article

    def _publish_state(self, article, published):
        article['is_published'] = published
        if published and not article.get('published_at'):
            article['published_at'] = now_iso(self.clock())

    def list_published(self, category=None):
        articles = [a for a in self.store.all(local_store.NEWS_ARTICLES) if a.get('is_published')]
        if category:
            articles = [a for a in articles if a.get('category') == category]
        return sorted(
            articles,
            key=lambda a: a.get('published_at') or a.get('created_at') or '',
            reverse=True,
        )

    def list_all(self, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        return _newest_first(self.store.all(local_store.NEWS_ARTICLES))

    def get_published(self, article_id):
        article = self._get(article_id)
        if not article.get('is_published'):
            raise NotFoundError('記事が見つかりません')
        return article

    def get(self, article_id, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        return self._get(article_id)

    def create(self, data, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        category = data.get('category')
        if category not in NEWS_CATEGORIES:
            raise ValidationError(f"カテゴリは {' / '.join(NEWS_CATEGORIES)} から選択してください")

        article = {
            'id': generate_id('news'),
            'title': _required_text(data, 'title', 'タイトル'),
            'summary': (data.get('summary') or '').strip(),
            'content': _required_text(data, 'content', '本文'),
            'category': category,
            'image_url': data.get('image_url') or data.get('image'),
            'is_published': False,
            'published_at': None,
            'created_at': now_iso(self.clock()),
            'author': actor.name,
        }
        self._publish_state(article, parse_bool(data.get('is_published')))
        self.store.put(local_store.NEWS_ARTICLES, article)
        logger.info(f"ニュース記事を作成しました: {article['id']}")
        return article

    def update(self, article_id, data, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        article = self._get(article_id)
        if 'title' in data:
            article['title'] = _required_text(data, 'title', 'タイトル')
        if 'content' in data:
            article['content'] = _required_text(data, 'content', '本文')
        if 'summary' in data:
            article['summary'] = (data.get('summary') or '').strip()
        if 'image_url' in data:
            article['image_url'] = data['image_url']
        if 'category' in data:
            if data['category'] not in NEWS_CATEGORIES:
                raise ValidationError(f"カテゴリは {' / '.join(NEWS_CATEGORIES)} から選択してください")
            article['category'] = data['category']
        if 'is_published' in data:
            self._publish_state(article, parse_bool(data['is_published']))
        article['updated_at'] = now_iso(self.clock())
        return self.store.put(local_store.NEWS_ARTICLES, article)

    def toggle_publish(self, article_id, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        article = self._get(article_id)
        self._publish_state(article, not article.get('is_published'))
        return self.store.put(local_store.NEWS_ARTICLES, article)

    def delete(self, article_id, actor):
        authorize(actor, Capability.MANAGE_NEWS)
        if not self.store.delete(local_store.NEWS_ARTICLES, article_id):
            raise NotFoundError('記事が見つかりません')
        return True


class InquiryManager:
    """お問い合わせ"""

    SEARCH_FIELDS = ('subject', 'message', 'user_name', 'user_email')

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now

    def _get(self, inquiry_id):
        inquiry = self.store.get(local_store.ADMIN_INQUIRIES, inquiry_id)
        if inquiry is None:
            raise NotFoundError('お問い合わせが見つかりません')
        return inquiry

    def submit(self, data, user=None):
        """送信（未ログインでも可。その場合は名前とメールが必須）"""
        if user is not None:
            user_id, user_name, user_email = user.id, user.name, user.email
        else:
            user_id = None
            user_name = _required_text(data, 'name', 'お名前')
            user_email = _required_text(data, 'email', 'メールアドレス')
            if not validate_email(user_email):
                raise ValidationError('メールアドレスの形式が正しくありません')

        inquiry = {
            'id': generate_id('inquiry'),
            'user_id': user_id,
            'user_email': user_email,
            'user_name': user_name,
            'subject': _required_text(data, 'subject', '件名'),
            'message': _required_text(data, 'message', 'お問い合わせ内容'),
            'status': InquiryStatus.UNREAD.value,
            'reply': None,
            'replied_at': None,
            'created_at': now_iso(self.clock()),
        }
        self.store.put(local_store.ADMIN_INQUIRIES, inquiry)
        logger.info(f"お問い合わせを受け付けました: {inquiry['id']}")
        return inquiry

    def for_user(self, user_id):
        return _newest_first([i for i in self.store.all(local_store.ADMIN_INQUIRIES) if i.get('user_id') == user_id])

    def search(self, actor, status=None, keyword=None):
        authorize(actor, Capability.MANAGE_INQUIRIES)
        inquiries = self.store.all(local_store.ADMIN_INQUIRIES)
        if status:
            try:
                InquiryStatus(status)
            except ValueError:
                raise ValidationError(f'不正なステータスです: {status}')
            inquiries = [i for i in inquiries if i.get('status') == status]
        if keyword:
            keyword = keyword.strip().lower()
            inquiries = [
                i for i in inquiries
                if any(keyword in (i.get(field) or '').lower() for field in self.SEARCH_FIELDS)
            ]
        return _newest_first(inquiries)

    def counts(self):
        inquiries = self.store.all(local_store.ADMIN_INQUIRIES)
        result = {status.value: 0 for status in InquiryStatus}
        for inquiry in inquiries:
            status = inquiry.get('status') or InquiryStatus.UNREAD.value
            result[status] = result.get(status, 0) + 1
        result['total'] = len(inquiries)
        return result

    def open(self, inquiry_id, actor):
        """詳細を開く。未読なら既読にする"""
        authorize(actor, Capability.MANAGE_INQUIRIES)
        inquiry = self._get(inquiry_id)
        if inquiry.get('status') == InquiryStatus.UNREAD.value:
            inquiry['status'] = InquiryStatus.READ.value
            self.store.put(local_store.ADMIN_INQUIRIES, inquiry)
        return inquiry

    def mark_read(self, inquiry_id, actor):
        return self.open(inquiry_id, actor)

    def reply(self, inquiry_id, reply, actor):
        authorize(actor, Capability.MANAGE_INQUIRIES)
        reply = (reply or '').strip()
        if not reply:
            raise ValidationError('返信内容を入力してください')
        inquiry = self._get(inquiry_id)
        inquiry.update({
            'status': InquiryStatus.REPLIED.value,
            'reply': reply,
            'replied_at': now_iso(self.clock()),
            'replied_by': actor.id,
        })
        self.store.put(local_store.ADMIN_INQUIRIES, inquiry)
        logger.info(f"お問い合わせに返信しました: {inquiry_id} by {actor.id}")
        return inquiry

    def delete(self, inquiry_id, actor):
        authorize(actor, Capability.MANAGE_INQUIRIES)
        if not self.store.delete(local_store.ADMIN_INQUIRIES, inquiry_id):
            raise NotFoundError('お問い合わせが見つかりません')
        return True
