"""
Guestbook - Flask Application
Accepts visitor comments from a web form and serves them back as JSON
"""

import os
import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler

from flask import Flask, abort, current_app, jsonify, request
from werkzeug.exceptions import BadRequest, RequestEntityTooLarge
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

from config import Config, ConfigError, Settings, load_settings
from request_log import RequestLog
from resolver import classify_location, resolve_request_ip
from store import CommentStore, StoreError

RECENT_LIMIT = 15
MAX_FORM_BYTES = 10 * 1024 * 1024
REQUIRED_FIELDS_MESSAGE = 'All fields (name, email, comment) are required'
COMMENTS_METHODS = ['GET', 'POST']
ALL_METHODS = ['GET']


@dataclass
class GuestbookContext:
    settings: Settings
    store: CommentStore
    request_log: RequestLog


def _ctx():
    return current_app.extensions['guestbook']


def _text(body, status):
    return current_app.response_class(body, status=status, mimetype='text/plain')


def _configure_logging(app):
    app.logger.setLevel(Config.LOG_LEVEL)
    if any(isinstance(h, RotatingFileHandler) for h in app.logger.handlers):
        return
    os.makedirs(Config.LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(Config.LOG_DIR, 'app.log'),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
    )
    file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    app.logger.addHandler(file_handler)


def create_app(settings, store=None, request_log=None):
    """Build the Flask app around an explicit store and request log."""
    app = Flask(__name__)
    app.config.from_object(Config)
    app.config['MAX_CONTENT_LENGTH'] = MAX_FORM_BYTES

    _configure_logging(app)

    if Config.SENTRY_DSN:
        sentry_sdk.init(
            dsn=Config.SENTRY_DSN,
            integrations=[FlaskIntegration()],
            traces_sample_rate=Config.SENTRY_TRACES_SAMPLE_RATE,
        )

    if store is None:
        store = CommentStore(settings.db_path)
    if request_log is None:
        request_log = RequestLog(settings.log_path)

    app.extensions['guestbook'] = GuestbookContext(
        settings=settings,
        store=store,
        request_log=request_log,
    )

    app.add_url_rule('/comments', 'comments', comments, methods=COMMENTS_METHODS,
                     provide_automatic_options=False)
    app.add_url_rule('/all', 'all_comments', all_comments, methods=ALL_METHODS,
                     provide_automatic_options=False)
    app.add_url_rule('/health', 'health', health, methods=['GET'])

    app.register_error_handler(404, not_found)
    app.register_error_handler(405, method_not_allowed)
    return app


# ===== COMMENT ROUTES =====

def comments():
    """Recent comments on GET, new comment on POST"""
    # werkzeug adds HEAD to every GET rule
    if request.method == 'HEAD':
        abort(405, valid_methods=COMMENTS_METHODS)
    if request.method == 'POST':
        return add_comment()
    return list_comments(RECENT_LIMIT)


def all_comments():
    if request.method == 'HEAD':
        abort(405, valid_methods=ALL_METHODS)
    return list_comments(None)


def list_comments(limit):
    try:
        rows = _ctx().store.recent_comments(limit)
    except StoreError as exc:
        current_app.logger.exception('Listing comments failed')
        # the driver's message is returned verbatim
        return _text(str(exc), 500)
    return jsonify([c.to_dict() for c in rows]), 200


def add_comment():
    try:
        form = request.form
    except (BadRequest, RequestEntityTooLarge):
        return _text('Invalid form data', 400)

    name = form.get('name', '')
    email = form.get('email', '')
    text = form.get('comment', '')
    if not name or not email or not text:
        return _text(REQUIRED_FIELDS_MESSAGE, 400)

    ctx = _ctx()
    ip = resolve_request_ip(request)
    location = classify_location(ip)

    try:
        comment_id = ctx.store.insert_comment(name, email, text, ip, location)
    except StoreError as exc:
        current_app.logger.exception('Inserting comment failed')
        return _text(str(exc), 500)

    ctx.request_log.log_request(ip, location, f'name={name} email={email} comment={text}')
    current_app.logger.info('Comment %s added from %s', comment_id, ip)
    return _text('Comment added successfully\n', 201)


def health():
    try:
        total = _ctx().store.count_comments()
    except StoreError as exc:
        current_app.logger.exception('Health check failed')
        return jsonify({'status': 'error', 'service': 'guestbook', 'error': str(exc)}), 500
    return jsonify({'status': 'ok', 'service': 'guestbook', 'comments': total}), 200


# ===== ERROR HANDLERS =====

def not_found(error):
    return _text('Not found', 404)


def method_not_allowed(error):
    response = _text('Method not allowed', 405)
    allowed = [m for m in getattr(error, 'valid_methods', None) or () if m != 'HEAD']
    if allowed:
        response.headers['Allow'] = ', '.join(allowed)
    return response


# ===== APPLICATION ENTRY POINT =====

def main():
    try:
        settings = load_settings()
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    store = CommentStore(settings.db_path)
    store.init_db()
    request_log = RequestLog(settings.log_path)
    app = create_app(settings, store=store, request_log=request_log)

    print('Guestbook started :)')
    try:
        app.run(host='0.0.0.0', port=settings.port, debug=Config.DEBUG)
    finally:
        request_log.close()


if __name__ == '__main__':
    main()
