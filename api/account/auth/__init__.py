from flask import Blueprint
import logging


auth_bp = Blueprint('auth', __name__)

logger = logging.getLogger(__name__)

from . import (
    login,
    logout,
    register,
    check_session,
    change_password,
)

__all__ = ['auth_bp']
