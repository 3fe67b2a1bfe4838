from flask import Blueprint

news_bp = Blueprint('news', __name__)

from . import (
    get_news,
    manage_news,
)

__all__ = ['news_bp']
