from api.announcements import announcements_bp
from api.news import news_bp
from api.inquiries import inquiries_bp

__all__ = [
    'announcements_bp',
    'news_bp',
    'inquiries_bp',
]
