from flask import Blueprint
import logging

inquiries_bp = Blueprint('inquiries', __name__)

logger = logging.getLogger(__name__)

from . import (
    submit_inquiry,
    manage_inquiries,
)

__all__ = ['inquiries_bp']
