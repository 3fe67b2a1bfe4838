from flask import Blueprint
import logging


requests_bp = Blueprint('requests', __name__)

logger = logging.getLogger(__name__)

from . import (
    participation_requests,
    organizer_applications,
    export_requests,
)

__all__ = ['requests_bp']
