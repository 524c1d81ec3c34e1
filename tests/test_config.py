import pytest

from config import ConfigError, Settings, load_settings


def write(tmp_path, body):
    path = tmp_path / 'config.toml'
    path.write_text(body, encoding='utf-8')
    return str(path)


def test_load_settings(tmp_path):
    path = write(tmp_path, 'port = 8080\ndb_path = "guestbook.db"\nlog_path = "requests.log"\n')
    assert load_settings(path) == Settings(port=8080, db_path='guestbook.db', log_path='requests.log')


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match='not found'):
        load_settings(str(tmp_path / 'nope.toml'))


def test_malformed_file(tmp_path):
    path = write(tmp_path, 'port = = 8080\n')
    with pytest.raises(ConfigError):
        load_settings(path)


@pytest.mark.parametrize('body', [
    'db_path = "a.db"\nlog_path = "a.log"\n',
    'port = "8080"\ndb_path = "a.db"\nlog_path = "a.log"\n',
    'port = true\ndb_path = "a.db"\nlog_path = "a.log"\n',
    'port = 8080\nlog_path = "a.log"\n',
    'port = 8080\ndb_path = "a.db"\nlog_path = 3\n',
])
def test_incomplete_settings_rejected(tmp_path, body):
    with pytest.raises(ConfigError):
        load_settings(write(tmp_path, body))
