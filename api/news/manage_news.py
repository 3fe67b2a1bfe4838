from flask import g, request, jsonify

from models import Capability
from services import get_services
from utils.decorators import capability_required, validate_json, log_action, handle_errors

from . import news_bp


@news_bp.route('/admin', methods=['GET'])
@capability_required(Capability.MANAGE_NEWS)
@handle_errors
def get_all_news():
    """管理画面用: 下書きを含むすべての記事"""
    articles = get_services().news.list_all(g.current_user)
    return jsonify({'success': True, 'data': articles, 'count': len(articles)})


@news_bp.route('/admin/<article_id>', methods=['GET'])
@capability_required(Capability.MANAGE_NEWS)
@handle_errors
def get_news_for_edit(article_id):
    return jsonify({'success': True, 'data': get_services().news.get(article_id, g.current_user)})


@news_bp.route('', methods=['POST'])
@capability_required(Capability.MANAGE_NEWS)
@validate_json(['title', 'content', 'category'])
@log_action('ニュース作成')
@handle_errors
def create_news():
    article = get_services().news.create(request.get_json(), g.current_user)
    return jsonify({'success': True, 'message': '記事を作成しました', 'data': article}), 201


@news_bp.route('/<article_id>', methods=['PUT'])
@capability_required(Capability.MANAGE_NEWS)
@validate_json()
@log_action('ニュース更新')
@handle_errors
def update_news(article_id):
    article = get_services().news.update(article_id, request.get_json(), g.current_user)
    return jsonify({'success': True, 'message': '記事を更新しました', 'data': article})


@news_bp.route('/<article_id>/publish', methods=['POST'])
@capability_required(Capability.MANAGE_NEWS)
@log_action('ニュース公開切替')
@handle_errors
def toggle_news_publish(article_id):
    article = get_services().news.toggle_publish(article_id, g.current_user)
    return jsonify({'success': True, 'data': article})


@news_bp.route('/<article_id>', methods=['DELETE'])
@capability_required(Capability.MANAGE_NEWS)
@log_action('ニュース削除')
@handle_errors
def delete_news(article_id):
    get_services().news.delete(article_id, g.current_user)
    return jsonify({'success': True, 'message': '記事を削除しました'})
