import os
import logging
import configparser
from netrc import netrc, NetrcParseError

import urllib3

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser('~'), '.config', 'webhdfs.ini')
DEFAULT_PORT = 50070
DEFAULT_TIMEOUT = 120
DEFAULT_CHUNK_SIZE = 64 * 1024

_TRUE = ('1', 'yes', 'true', 'on')


class FsConfig(object):
    """
    Connection settings shared by every request against one WebHDFS
    namenode.

    :param host: hostname of the namenode
    :param port: WebHDFS port on the namenode
    :param use_ssl: talk https instead of http
    :param user: value for the user.name query parameter
    :param token: delegation token appended to every URL
    :param verify: CA bundle path, or a bool to switch certificate checks
    :param timeout: timeout in seconds for each HTTP exchange
    :param chunk_size: bytes pulled from an upload producer per read
    :param max_response_bytes: cap on the accumulated response body
    """

    def __init__(self, host='localhost', port=DEFAULT_PORT, use_ssl=False,
                 user=None, token=None, verify=True, timeout=DEFAULT_TIMEOUT,
                 chunk_size=DEFAULT_CHUNK_SIZE, max_response_bytes=None):
        self.host = host
        self.port = int(port)
        self.use_ssl = use_ssl
        self.user = user or None
        self.token = token or None
        self.verify = verify
        self.timeout = timeout
        self.chunk_size = int(chunk_size)
        self.max_response_bytes = max_response_bytes
        if verify is False:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def scheme(self):
        return 'https' if self.use_ssl else 'http'

    def __repr__(self):
        return '<FsConfig {0}://{1}:{2} user={3}>'.format(
            self.scheme, self.host, self.port, self.user)


def _netrc_user(host):
    try:
        auth = netrc().authenticators(host)
    except (NetrcParseError, OSError):
        return None
    if auth is None:
        return None
    return auth[0]


def _parse_verify(value):
    if value is None:
        return True
    if value.lower() in _TRUE:
        return True
    if value.lower() in ('0', 'no', 'false', 'off'):
        return False
    return value


def load_config(path=None, environ=None):
    """
    Build an FsConfig from the INI file at ``path`` (default
    ~/.config/webhdfs.ini), ~/.netrc and the environment, in increasing
    order of precedence. A missing INI file is not an error.
    """
    if environ is None:
        environ = os.environ
    path = path or DEFAULT_CONFIG_PATH

    cfg = configparser.ConfigParser(interpolation=None)
    if cfg.read(path):
        logger.debug("Loaded configuration from %s", path)
    section = dict(cfg['DEFAULT'])

    def setting(key, default=None):
        if key in environ:
            return environ[key]
        return section.get(key.lower(), default)

    host = setting('HDFS_HOST', 'localhost')
    user = setting('HDFS_USERNAME')
    if not user:
        user = _netrc_user(host)

    max_response = setting('HDFS_MAX_RESPONSE_BYTES')
    return FsConfig(host=host,
                    port=setting('HDFS_PORT', DEFAULT_PORT),
                    use_ssl=str(setting('HDFS_USE_SSL', 'false')).lower() in _TRUE,
                    user=user,
                    token=setting('HDFS_TOKEN'),
                    verify=_parse_verify(setting('HDFS_CERT')),
                    timeout=float(setting('HDFS_TIMEOUT', DEFAULT_TIMEOUT)),
                    chunk_size=setting('HDFS_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
                    max_response_bytes=int(max_response) if max_response else None)


def write_default_config(path=None, prompt=input):
    path = path or DEFAULT_CONFIG_PATH
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    cfg = configparser.ConfigParser(interpolation=None)
    webhdfs_host = prompt("WebHDFS hostname: ")
    cfg.set('DEFAULT', 'HDFS_HOST', webhdfs_host)
    webhdfs_port = prompt("WebHDFS port [{}]: ".format(DEFAULT_PORT)) or str(DEFAULT_PORT)
    cfg.set('DEFAULT', 'HDFS_PORT', webhdfs_port)
    use_ssl = prompt("Use https [no]: ") or 'no'
    cfg.set('DEFAULT', 'HDFS_USE_SSL', use_ssl)
    if use_ssl.lower() in _TRUE:
        webhdfs_cert = prompt("HDFS web server certificate path [/etc/ssl/certs/ca-certificates.crt]: ") \
            or "/etc/ssl/certs/ca-certificates.crt"
        cfg.set('DEFAULT', 'HDFS_CERT', webhdfs_cert)
    webhdfs_username = prompt("HDFS username: ")
    if webhdfs_username:
        cfg.set('DEFAULT', 'HDFS_USERNAME', webhdfs_username)
    with open(path, 'w') as configfile:
        cfg.write(configfile)
    logger.info("Wrote configuration to %s", path)
    return path
