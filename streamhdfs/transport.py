import logging

from urllib.parse import urljoin

import requests

from streamhdfs import errors

logger = logging.getLogger(__name__)


class RequestsTransport(object):
    """
    One-shot HTTP handle on top of a requests Session.

    The handle is configured piecewise, then ``perform`` runs a single
    blocking exchange. Response bytes are handed to the sink as they
    arrive; outbound bytes are pulled from the source on demand and sent
    with chunked transfer-encoding. A handle may be re-targeted and
    performed again, which is how the two-phase upload reuses it.

    :param timeout: timeout for each exchange, in seconds
    :param verify: passed to requests (CA bundle path or bool)
    :param chunk_size: size of the reads from the source and of the
      chunks delivered to the sink
    :param session: an existing requests.Session; a private one is
      created (and closed with the handle) otherwise
    """

    def __init__(self, timeout=120, verify=True, chunk_size=64 * 1024,
                 session=None):
        self.timeout = timeout
        self.verify = verify
        self.chunk_size = chunk_size
        self._own_session = session is None
        self.session = requests.Session() if session is None else session
        self.url = None
        self.method = 'GET'
        self.follow_redirects = True
        self.headers = {}
        self._sink = None
        self._source = None
        self.redirect_url = None
        self.response_code = 0

    def set_url(self, url):
        self.url = url

    def set_method(self, method):
        self.method = method

    def set_follow_redirects(self, follow):
        self.follow_redirects = bool(follow)

    def set_headers(self, headers):
        self.headers = dict(headers)

    def set_sink(self, sink):
        """``sink(data) -> int``: number of bytes accepted."""
        self._sink = sink

    def set_source(self, source):
        """``source(max_bytes) -> bytes``: empty bytes ends the body."""
        self._source = source

    def _body(self):
        while True:
            chunk = self._source(self.chunk_size)
            if not chunk:
                return
            yield chunk

    def perform(self):
        """
        Run one HTTP exchange against the current URL. Raises EngineError
        when the exchange could not be completed.
        """
        if not self.url:
            raise errors.EngineError(msg="No URL set")

        self.redirect_url = None
        logger.debug("%s %s (follow redirects: %s)", self.method, self.url,
                     self.follow_redirects)
        data = self._body() if self._source is not None else None
        try:
            response = self.session.request(
                self.method, self.url, data=data, headers=self.headers,
                allow_redirects=self.follow_redirects, stream=True,
                timeout=self.timeout, verify=self.verify)
        except requests.exceptions.RequestException as e:
            raise errors.EngineError(msg=str(e))

        try:
            self.response_code = response.status_code
            if response.is_redirect:
                location = response.headers.get('location')
                if location:
                    self.redirect_url = urljoin(response.url or self.url,
                                                location)
            for chunk in response.iter_content(self.chunk_size):
                if not chunk or self._sink is None:
                    continue
                if self._sink(chunk) != len(chunk):
                    raise errors.CallbackAbort(
                        msg="Failed writing received data ({0} bytes)".format(
                            len(chunk)))
        except requests.exceptions.RequestException as e:
            raise errors.EngineError(msg=str(e))
        finally:
            response.close()

    def close(self):
        if self._own_session:
            self.session.close()
        self._sink = None
        self._source = None


def default_transport(config):
    return RequestsTransport(timeout=config.timeout, verify=config.verify,
                             chunk_size=config.chunk_size)
