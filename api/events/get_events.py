from flask import g, request, jsonify

from models import Capability, EventType, PREFECTURES, REGIONS
from services import get_services
from utils.decorators import log_action, handle_errors
from utils.helpers import is_valid_month, parse_bool, parse_date_param

from . import events_bp, event_payload


@events_bp.route('', methods=['GET'])
@log_action('イベント一覧取得')
@handle_errors
def get_events():
    """イベント一覧（開催日が過ぎたものは除外、NEW を優先して開催日順）
    クエリパラメータ：
    - type: tournament / practice
    - prefecture: 都道府県
    - region: 地域（関東、関西 など）
    - beginner_friendly: true で初心者歓迎のみ
    - month: YYYY-MM
    - date: YYYY-MM-DD
    """
    filters = {}

    event_type = request.args.get('type', '').strip()
    if event_type:
        valid_types = [t.value for t in EventType]
        if event_type not in valid_types:
            return jsonify({
                'success': False,
                'message': f'不正なイベント種別です: {event_type}（{", ".join(valid_types)}）'
            }), 400
        filters['type'] = event_type

    prefecture = request.args.get('prefecture', '').strip()
    if prefecture:
        if prefecture not in PREFECTURES:
            return jsonify({'success': False, 'message': f'不正な都道府県です: {prefecture}'}), 400
        filters['prefecture'] = prefecture

    region = request.args.get('region', '').strip()
    if region:
        if region not in REGIONS:
            return jsonify({'success': False, 'message': f'不正な地域です: {region}'}), 400
        filters['region'] = region

    if parse_bool(request.args.get('beginner_friendly')):
        filters['beginner_friendly'] = True

    month = request.args.get('month', '').strip()
    if month:
        if not is_valid_month(month):
            return jsonify({'success': False, 'message': '月は YYYY-MM の形式で指定してください'}), 400
        filters['month'] = month

    date_str = request.args.get('date', '').strip()
    if date_str:
        selected_date = parse_date_param(date_str)
        if selected_date is None:
            return jsonify({'success': False, 'message': '日付は YYYY-MM-DD の形式で指定してください'}), 400
        filters['date'] = selected_date

    services = get_services()
    listing = services.events.list(filters, user=g.current_user)

    result = {
        'success': True,
        'data': [event_payload(e, services) for e in listing],
        'count': len(listing),
    }
    # 開催日を解釈できなかったイベントは管理者にだけ返す
    user = g.current_user
    if user is not None and user.has_capability(Capability.ACCESS_ADMIN):
        result['invalid_events'] = listing.invalid
    return jsonify(result)
