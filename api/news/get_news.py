from flask import request, jsonify

from models import NEWS_CATEGORIES
from services import get_services
from utils.decorators import handle_errors

from . import news_bp


@news_bp.route('', methods=['GET'])
@handle_errors
def get_news():
    """公開中のニュース（公開日の新しい順、category で絞り込み可）"""
    category = request.args.get('category', '').strip() or None
    if category and category not in NEWS_CATEGORIES:
        return jsonify({'success': False, 'message': f'不正なカテゴリです: {category}'}), 400
    articles = get_services().news.list_published(category=category)
    return jsonify({
        'success': True,
        'data': articles,
        'count': len(articles),
        'categories': NEWS_CATEGORIES,
    })


@news_bp.route('/<article_id>', methods=['GET'])
@handle_errors
def get_news_article(article_id):
    """公開中のニュース詳細（非公開は 404）"""
    return jsonify({'success': True, 'data': get_services().news.get_published(article_id)})
