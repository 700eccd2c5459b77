import configparser

import pytest

from streamhdfs import config as config_mod
from streamhdfs.config import FsConfig, load_config, write_default_config


@pytest.fixture(autouse=True)
def no_netrc(monkeypatch):
    monkeypatch.setattr(config_mod, '_netrc_user', lambda host: None)


def _write_ini(path, **values):
    cfg = configparser.ConfigParser(interpolation=None)
    for key, value in values.items():
        cfg.set('DEFAULT', key, value)
    with open(path, 'w') as f:
        cfg.write(f)
    return str(path)


def test_defaults_without_file(tmp_path):
    cfg = load_config(str(tmp_path / 'missing.ini'), environ={})
    assert cfg.host == 'localhost'
    assert cfg.port == 50070
    assert cfg.use_ssl is False
    assert cfg.scheme == 'http'
    assert cfg.user is None
    assert cfg.token is None
    assert cfg.verify is True
    assert cfg.timeout == 120
    assert cfg.max_response_bytes is None


def test_values_from_ini(tmp_path):
    path = _write_ini(tmp_path / 'webhdfs.ini', HDFS_HOST='nn.example.com',
                      HDFS_PORT='9871', HDFS_USE_SSL='yes', HDFS_USERNAME='alice',
                      HDFS_TOKEN='KAAKSm9p%2B', HDFS_CERT='/etc/ssl/ca.pem',
                      HDFS_TIMEOUT='30', HDFS_CHUNK_SIZE='4096',
                      HDFS_MAX_RESPONSE_BYTES='1048576')
    cfg = load_config(path, environ={})
    assert cfg.host == 'nn.example.com'
    assert cfg.port == 9871
    assert cfg.scheme == 'https'
    assert cfg.user == 'alice'
    assert cfg.token == 'KAAKSm9p%2B'
    assert cfg.verify == '/etc/ssl/ca.pem'
    assert cfg.timeout == 30.0
    assert cfg.chunk_size == 4096
    assert cfg.max_response_bytes == 1048576


def test_environment_overrides_file(tmp_path):
    path = _write_ini(tmp_path / 'webhdfs.ini', HDFS_HOST='from-file', HDFS_USERNAME='alice')
    cfg = load_config(path, environ={'HDFS_HOST': 'from-env', 'HDFS_TOKEN': 'tok'})
    assert cfg.host == 'from-env'
    assert cfg.user == 'alice'
    assert cfg.token == 'tok'


def test_netrc_supplies_missing_user(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, '_netrc_user',
                        lambda host: 'netrc-user' if host == 'nn' else None)
    cfg = load_config(str(tmp_path / 'missing.ini'), environ={'HDFS_HOST': 'nn'})
    assert cfg.user == 'netrc-user'


def test_disabled_verification_silences_warnings(monkeypatch):
    calls = []
    monkeypatch.setattr(config_mod.urllib3, 'disable_warnings', calls.append)
    cfg = load_config('/nonexistent/webhdfs.ini', environ={'HDFS_CERT': 'false'})
    assert cfg.verify is False
    assert calls == [config_mod.urllib3.exceptions.InsecureRequestWarning]


def test_empty_user_and_token_are_unset():
    cfg = FsConfig(user='', token='')
    assert cfg.user is None
    assert cfg.token is None


def test_write_default_config_round_trips(tmp_path):
    answers = iter(['nn.example.com', '', 'yes', '', 'bob'])
    path = write_default_config(str(tmp_path / 'conf' / 'webhdfs.ini'),
                                prompt=lambda text: next(answers))
    cfg = load_config(path, environ={})
    assert cfg.host == 'nn.example.com'
    assert cfg.port == 50070
    assert cfg.use_ssl is True
    assert cfg.verify == '/etc/ssl/certs/ca-certificates.crt'
    assert cfg.user == 'bob'
