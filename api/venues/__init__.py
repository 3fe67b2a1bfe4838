from flask import Blueprint
import logging


venues_bp = Blueprint('venues', __name__)

logger = logging.getLogger(__name__)

from . import (
    get_venues,
    manage_venues,
)

__all__ = ['venues_bp']
