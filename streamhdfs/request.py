import json
import logging
from urllib.parse import quote, quote_plus

from streamhdfs import errors
from streamhdfs.buffer import Buffer
from streamhdfs.operations import RequestKind
from streamhdfs.transport import default_transport

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 512


class TransportOutcome(object):
    failed = False
    status = 0

    def raise_for_error(self):
        pass


class Success(TransportOutcome):
    """Terminal transfer completed; ``body`` may be empty."""

    def __init__(self, status, body=b''):
        self.status = status
        self.body = body

    def __repr__(self):
        return '<Success status={0} body={1} bytes>'.format(
            self.status, len(self.body))


class Failure(TransportOutcome):
    """
    Terminal transfer failed. ``message`` holds the transport diagnostic
    and the URL being accessed, ``status`` the last HTTP status seen.
    """

    failed = True

    def __init__(self, message, url=None, status=0):
        self.message = message
        self.url = url
        self.status = status

    def raise_for_error(self):
        raise errors.TransportError(msg=self.message, url=self.url,
                                    status=self.status)

    def __repr__(self):
        return '<Failure status={0} {1!r}>'.format(self.status, self.message)


def _format_error(message, url):
    return '{0} (url: {1})'.format(message, url)[:MAX_ERROR_LENGTH]


class WebHdfsRequest(object):
    """
    One WebHDFS call: the URL is built on construction, extended with
    query arguments by the caller, then executed exactly once.

    The buffer that holds the URL is cleared when the transfer starts and
    from then on accumulates the response body.

    :param config: FsConfig of the target filesystem
    :param path: HDFS path; None or '' addresses the root
    :param transport_factory: callable taking the FsConfig and returning
      a transport handle (RequestsTransport by default)

    >>> req = WebHdfsRequest(config, '/user/hdfs/data.txt')
    >>> req.set_args('op=%s&overwrite=%s', operations.CREATE, 'true')
    >>> with open('data.txt', 'rb') as f:
    >>>     req.set_upload_file(f)
    >>>     outcome = req.execute(RequestKind.PUT)
    >>> outcome.status
    201
    """

    def __init__(self, config, path=None, transport_factory=None):
        self.config = config
        self.transport_factory = transport_factory or default_transport
        self.response_code = 0
        self.parse_error = None
        self._upload = None
        self._executed = False
        self._url = None
        self._buffer = Buffer(max_size=config.max_response_bytes).open()

        path = path or ''
        no_root_path = path[1:] if path.startswith('/') else path
        try:
            self._buffer.append_format('%s://%s:%d/webhdfs/v1/%s?',
                                       config.scheme, config.host,
                                       config.port, quote(no_root_path))
            if config.user is not None:
                self._buffer.append_format('user.name=%s&',
                                           quote_plus(config.user))
            if config.token is not None:
                self._buffer.append_format('delegation=%s&',
                                           quote_plus(config.token))
        except (errors.BufferFull, MemoryError) as e:
            self._buffer.close()
            raise errors.BuildError(msg='Unable to build request URL: {0}'.format(e))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        self._buffer.close()

    def _check_pending(self):
        if self._buffer.closed:
            raise errors.RequestStateError(msg='Request is closed')
        if self._executed:
            raise errors.RequestStateError(msg='Request was already executed')

    @property
    def url(self):
        if self._executed:
            return self._url
        return self._buffer.getvalue().decode('utf8')

    def set_args(self, frmt, *args):
        """
        Append printf-style formatted text to the query string, e.g.
        ``req.set_args('op=%s&recursive=%s', 'DELETE', 'true')``.
        """
        self._check_pending()
        try:
            self._buffer.append_format(frmt, *args)
        except (errors.BufferFull, MemoryError) as e:
            raise errors.BuildError(msg='Unable to append request arguments: {0}'.format(e))
        except (TypeError, ValueError) as e:
            raise errors.BuildError(msg='Bad request arguments {0!r}: {1}'.format(frmt, e))

    def set_params(self, **kwargs):
        """
        Append keyword arguments as query parameters. Strings are escaped,
        anything else (bools, ints) is rendered lower-cased.
        """
        self._check_pending()
        params = []
        for key, value in kwargs.items():
            if isinstance(value, str):
                value = quote_plus(value.encode('utf8'))
            else:
                value = str(value).lower()
            params.append('{key}={value}'.format(key=key, value=value))
        if not params:
            return
        separator = '' if self._buffer.getvalue()[-1:] in (b'?', b'&') else '&'
        self.set_args('%s%s', separator, '&'.join(params))

    def set_upload(self, producer):
        """
        Bind the body source for PUT/POST. ``producer(max_bytes)`` returns
        at most ``max_bytes`` bytes per call; empty bytes ends the body.
        """
        self._check_pending()
        self._upload = producer

    def set_upload_file(self, fileobj):
        self.set_upload(fileobj.read)

    def _write(self, data):
        try:
            self._buffer.append(data)
        except (errors.BufferFull, MemoryError) as e:
            logger.warning("Dropping response bytes: %s", e)
            return 0
        return len(data)

    def _read(self, max_bytes):
        if self._upload is None:
            return b''
        try:
            data = self._upload(max_bytes)
        except Exception as e:
            raise errors.CallbackAbort(msg='Upload producer failed: {0}'.format(e)) from e
        if not data:
            return b''
        if len(data) > max_bytes:
            raise errors.CallbackAbort(
                msg='Upload producer returned {0} bytes, at most {1} allowed'.format(
                    len(data), max_bytes))
        return bytes(data)

    def execute(self, kind):
        """
        Run the request and return a Success or Failure outcome. The
        response body stays available through ``body`` either way.

        PUT and POST with a bound upload first ask the namenode without a
        body, then send the body to the datanode named in its redirect.
        """
        if isinstance(kind, str):
            kind = RequestKind.parse(kind)
        self._check_pending()
        if self._upload is not None and not kind.uploads:
            raise errors.RequestStateError(
                msg='Upload bodies can only be sent with PUT or POST, not {0}'.format(kind.method))
        self._executed = True
        self._url = self._buffer.getvalue().decode('utf8')

        try:
            transport = self.transport_factory(self.config)
        except Exception as e:
            raise errors.TransportInitError(
                msg='Unable to create transport: {0}'.format(e)) from e

        try:
            return self._perform(transport, kind)
        finally:
            transport.close()

    def _perform(self, transport, kind):
        upload = self._upload is not None
        transport.set_url(self._url)
        logger.debug("downloading url: %s", self._url)
        transport.set_sink(self._write)
        transport.set_method(kind.method)
        transport.set_follow_redirects(not upload)
        self._buffer.clear()

        if upload:
            failure = None
            try:
                transport.perform()
            except errors.EngineError as e:
                failure = e.msg
                logger.warning("Namenode request failed: %s (url: %s)", e.msg, self._url)
            self.response_code = transport.response_code

            location = transport.redirect_url
            if not location:
                if failure is None:
                    failure = 'No redirect target in namenode response (HTTP {0})'.format(
                        self.response_code)
                return Failure(_format_error(failure, self._url), self._url,
                               self.response_code)

            self._url = location
            logger.debug("uploading to url: %s", location)
            transport.set_url(location)
            transport.set_headers({'Transfer-Encoding': 'chunked',
                                   'Content-Type': 'application/octet-stream'})
            transport.set_source(self._read)
            transport.set_method(kind.method)
            self._buffer.clear()

        error = None
        try:
            transport.perform()
        except errors.EngineError as e:
            error = _format_error(e.msg, self._url)
            logger.warning("Request failed: %s", error)

        self.response_code = transport.response_code
        if error is not None:
            return Failure(error, self._url, self.response_code)
        logger.debug("%s %s -> %d (%d bytes)", kind.method, self._url,
                     self.response_code, self._buffer.size)
        return Success(self.response_code, self.body)

    @property
    def body(self):
        return self._buffer.getvalue()

    @property
    def text(self):
        return self.body.decode('utf8', errors='replace')

    def json_response(self):
        """
        Parse the response body as JSON. Returns None for an empty body,
        and None with ``parse_error`` set when the body is not JSON.
        """
        self.parse_error = None
        if self._buffer.size == 0:
            return None
        try:
            return json.loads(self._buffer.getvalue().decode('utf8'))
        except (ValueError, RecursionError) as e:
            self.parse_error = str(e) or 'invalid JSON'
            logger.warning("response-parse: %s", self.parse_error)
            return None
