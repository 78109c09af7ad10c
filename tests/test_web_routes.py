"""Tests for the Flask routes."""

import csv

from src.components.countdown_errors import RenderingFailure
from src.components.web import countdown_timer_handler


class TestCountdownRoute:

    def test_invalid_target_returns_400_json(self, client):
        response = client.get('/countdown?target=not-a-date')

        assert response.status_code == 400
        assert response.headers['Cache-Control'] == 'no-store'
        assert response.get_json() == {'error': countdown_timer_handler.TARGET_USAGE_MESSAGE}

    def test_static_png(self, client):
        response = client.get('/countdown?target=2099-01-01T00:00:00Z&cb=abc')

        assert response.status_code == 200
        assert response.headers['Content-Type'] == 'image/png'
        assert response.headers['Cache-Control'] == 'public, max-age=0, s-maxage=3, stale-while-revalidate=30'
        assert response.headers['X-Countdown-Bucket'].isdigit()
        assert response.headers['X-Countdown-CB'] == 'abc'
        assert response.data[:8] == b'\x89PNG\r\n\x1a\n'

    def test_multiline_label_renders(self, client):
        response = client.get('/countdown?target=2099-01-01T00:00:00Z&label=Sale%0Aends&sub=Shop%0D%0Anow')

        assert response.status_code == 200
        assert response.headers['Content-Type'] == 'image/png'

    def test_animated_gif(self, client):
        response = client.get('/countdown?target=2099-01-01T00:00:00Z&animated=1')

        assert response.status_code == 200
        assert response.headers['Content-Type'] == 'image/gif'
        assert response.data[:6] == b'GIF89a'

    def test_rendering_failure_returns_500(self, client, monkeypatch):
        def broken(*args, **kwargs):
            raise RenderingFailure("encoder rejected frames")

        monkeypatch.setattr(countdown_timer_handler, 'build_countdown_response', broken)
        response = client.get('/countdown?target=2099-01-01T00:00:00Z')

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to render countdown image'}

    def test_activity_is_logged(self, client, tmp_path):
        client.get('/countdown?target=not-a-date')

        with open(tmp_path / 'web_server_activity_log.csv', newline='') as f:
            rows = list(csv.reader(f))
        assert rows[0][:3] == ['remote_addr', 'method', 'path']
        assert rows[1][1:3] == ['GET', '/countdown']


def test_healthz(client):
    response = client.get('/healthz')

    assert response.status_code == 200
    assert response.get_json()['ok'] is True


def test_usage_text(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.mimetype == 'text/plain'
    assert 'Bucket seconds: 3' in response.get_data(as_text=True)
    assert 'GIF allowed: true' in response.get_data(as_text=True)


class TestScannerFilter:

    def test_scanner_paths_are_rejected_before_routing(self, app, client, tmp_path):
        from src.utils.logging_utils import log_web_activity

        app.add_url_rule('/admin/status', 'admin_status', log_web_activity(lambda: 'ok'))

        response = client.get('/admin/status')

        assert response.status_code == 404
        assert not (tmp_path / 'web_server_activity_log.csv').exists()

    def test_regular_paths_pass_through(self, app, client):
        app.add_url_rule('/status', 'status', lambda: 'ok')

        assert client.get('/status').status_code == 200

    def test_is_scanner_request_matches_known_paths(self, app):
        from src.utils.logging_utils import is_scanner_request

        for path in ('/wp-login', '/index.php', '/.git/config'):
            with app.test_request_context(path):
                assert is_scanner_request()
        with app.test_request_context('/countdown'):
            assert not is_scanner_request()
