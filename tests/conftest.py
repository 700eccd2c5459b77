import pytest
from requests.structures import CaseInsensitiveDict

from streamhdfs import errors
from streamhdfs.config import FsConfig


class FakeTransport(object):
    """
    Scripted stand-in for RequestsTransport. Each perform() consumes one
    entry of ``responses``: a dict with ``status`` and optionally
    ``body``, ``redirect``, ``echo`` (reply with the sent body) or
    ``error`` (raise EngineError).
    """

    def __init__(self, responses=(), chunk_size=4):
        self.responses = list(responses)
        self.chunk_size = chunk_size
        self.calls = []
        self.url = None
        self.method = None
        self.follow_redirects = True
        self.headers = {}
        self.sink = None
        self.source = None
        self.redirect_url = None
        self.response_code = 0
        self.closed = False

    def set_url(self, url):
        self.url = url

    def set_method(self, method):
        self.method = method

    def set_follow_redirects(self, follow):
        self.follow_redirects = follow

    def set_headers(self, headers):
        self.headers = dict(headers)

    def set_sink(self, sink):
        self.sink = sink

    def set_source(self, source):
        self.source = source

    def perform(self):
        reply = self.responses.pop(0)
        sent = b''
        if self.source is not None:
            while True:
                chunk = self.source(self.chunk_size)
                if not chunk:
                    break
                sent += chunk
        self.calls.append({'url': self.url, 'method': self.method,
                           'follow': self.follow_redirects,
                           'headers': dict(self.headers), 'body': sent})
        self.redirect_url = None
        if 'status' in reply:
            self.response_code = reply['status']
        if 'error' in reply:
            raise errors.EngineError(msg=reply['error'])
        self.redirect_url = reply.get('redirect')
        body = sent if reply.get('echo') else reply.get('body', b'')
        for i in range(0, len(body), self.chunk_size):
            chunk = body[i:i + self.chunk_size]
            if self.sink(chunk) != len(chunk):
                raise errors.CallbackAbort(msg='Failed writing received data')

    def close(self):
        self.closed = True


class FakeResponse(object):
    def __init__(self, status_code=200, body=b'', headers=None, url=None,
                 stream_error=None):
        self.status_code = status_code
        self.body = body
        self.headers = CaseInsensitiveDict(headers or {})
        self.url = url
        self.stream_error = stream_error
        self.closed = False

    @property
    def is_redirect(self):
        return 'location' in self.headers and self.status_code in (301, 302, 303, 307, 308)

    def iter_content(self, chunk_size):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]
        if self.stream_error is not None:
            raise self.stream_error

    def close(self):
        self.closed = True


class FakeSession(object):
    """
    Records each session.request() call and replies from ``responses``
    (FakeResponse instances or exceptions to raise). Iterable request
    bodies are drained the way requests would send them.
    """

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, data=None, **kwargs):
        body = None
        if data is not None:
            body = b''.join(data)
        self.calls.append(dict(kwargs, method=method, url=url, body=body))
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if reply.url is None:
            reply.url = url
        return reply

    def close(self):
        self.closed = True


@pytest.fixture
def config():
    return FsConfig(host='namenode', port=50070, user='hdfs')


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def transport_factory(fake_transport):
    return lambda config: fake_transport
