from flask import jsonify

import local_store
from models import Capability
from services import get_services
from utils.decorators import capability_required, handle_errors

from . import system_bp


@system_bp.route('/stats', methods=['GET'])
@capability_required(Capability.SYSTEM_SETTINGS)
@handle_errors
def system_stats():
    """ストレージキーごとの件数と承認待ちの件数"""
    services = get_services()
    store = services.store

    counts = {key: store.count(key) for key in local_store.COLLECTION_KEYS}
    for key in local_store.SETTINGS_KEYS:
        counts[key] = len(store.get_value(key, {}) or {})

    return jsonify({
        'success': True,
        'data': {
            'counts': counts,
            'storage_size_bytes': store.size_bytes(),
            'pending': {
                'participation_requests': services.participation.pending_count(),
                'organizer_applications': services.applications.pending_count(),
                'unread_inquiries': services.inquiries.counts()['unread'],
            },
            'remote_enabled': services.remote is not None,
        },
    })
