from flask import Blueprint
import logging


users_bp = Blueprint('users', __name__)

logger = logging.getLogger(__name__)

from . import (
    profile,
    get_users,
    update_user_role,
)

__all__ = ['users_bp']
