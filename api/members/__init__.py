from flask import Blueprint
import logging


members_bp = Blueprint('members', __name__)

logger = logging.getLogger(__name__)

# 会員向けの各ルートは個別モジュールで実装
from . import (
    favorites,
    participation,
    settings,
)

__all__ = ['members_bp']
