#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ビーチボールバレー コミュニティ - アプリケーション
"""

import os
import sys
import time

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

load_dotenv()

from config import config as config_map
from services import get_services, init_services
from utils.errors import AppError

from api.account import auth_bp, users_bp
from api.communication import announcements_bp, inquiries_bp, news_bp
from api.events import events_bp
from api.members import members_bp
from api.requests import requests_bp
from api.system import system_bp
from api.venues import venues_bp


def create_app(config_name=None, test_config=None):
    app = Flask(__name__)
    env_name = (config_name or os.environ.get('APP_ENV', 'default')).lower()
    config_class = config_map.get(env_name, config_map['default'])
    app.config.from_object(config_class)
    if test_config:
        app.config.update(test_config)

    if env_name == 'production' and not app.config.get('SECRET_KEY'):
        raise RuntimeError('SECRET_KEY environment variable is required in production')

    config_class.init_app(app)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    init_services(app)

    @app.before_request
    def start_request_timer():
        g.request_start_time = time.perf_counter()

    @app.before_request
    def load_current_user():
        # セッションのユーザーはリクエストごとに1回だけ読み込む
        g.current_user = None
        user_id = session.get('user_id')
        if not user_id:
            return
        user = get_services().users.get_user(user_id)
        if user is None:
            app.logger.warning(f"セッションのユーザーが存在しないためログアウトします: {user_id}")
            session.clear()
            return
        g.current_user = user

    @app.after_request
    def log_request_time(response):
        start_time = getattr(g, 'request_start_time', None)
        if start_time is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            app.logger.info(
                "Request %s %s took %.2fms, status %d",
                request.method,
                request.path,
                duration_ms,
                response.status_code,
            )
        return response

    @app.errorhandler(AppError)
    def handle_app_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'message': 'ページが見つかりません', 'code': 404}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'message': '許可されていないメソッドです', 'code': 405}), 405

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'success': False, 'message': error.description, 'code': error.code}), error.code
        app.logger.exception(f"予期しないエラー: {request.method} {request.path}")
        return jsonify({'success': False, 'message': 'サーバーエラーが発生しました', 'code': 500}), 500

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(events_bp, url_prefix='/api/events')
    app.register_blueprint(requests_bp, url_prefix='/api')
    app.register_blueprint(announcements_bp, url_prefix='/api/announcements')
    app.register_blueprint(news_bp, url_prefix='/api/news')
    app.register_blueprint(inquiries_bp, url_prefix='/api/inquiries')
    app.register_blueprint(venues_bp, url_prefix='/api/venues')
    app.register_blueprint(members_bp, url_prefix='/api/me')
    app.register_blueprint(system_bp, url_prefix='/api/system')

    @app.route('/')
    def index():
        return jsonify({
            'success': True,
            'data': {
                'name': app.config['SYSTEM_NAME'],
                'version': app.config['SYSTEM_VERSION'],
                'logged_in': g.current_user is not None,
            },
        })

    return app


if __name__ == '__main__':
    try:
        app = create_app()
        app.run(
            host=app.config.get('HOST', '0.0.0.0'),
            port=app.config.get('PORT', 5000),
            debug=app.config.get('DEBUG', True)
        )
    except KeyboardInterrupt:
        sys.exit(0)
