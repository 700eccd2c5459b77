from http import HTTPStatus


class WebHdfsException(Exception):
    def __init__(self, msg=str()):
        self.msg = msg
        super(WebHdfsException, self).__init__(self.msg)


class BuildError(WebHdfsException):
    pass


class TransportInitError(WebHdfsException):
    pass


class TransportError(WebHdfsException):
    """
    The terminal transfer of a request failed before a complete response
    was received. ``url`` is the address being accessed at the time and
    ``status`` the last HTTP status seen (0 when no connection was made).
    """

    def __init__(self, msg=str(), url=None, status=0):
        super(TransportError, self).__init__(msg)
        self.url = url
        self.status = status


class EngineError(WebHdfsException):
    pass


class CallbackAbort(EngineError):
    pass


class BufferFull(WebHdfsException):
    pass


class RequestStateError(WebHdfsException):
    pass


class BadRequest(WebHdfsException):
    pass


class Unauthorized(WebHdfsException):
    pass


class Forbidden(WebHdfsException):
    pass


class FileNotFound(WebHdfsException):
    pass


class MethodNotAllowed(WebHdfsException):
    pass


_STATUS_ERRORS = {
    HTTPStatus.BAD_REQUEST: BadRequest,
    HTTPStatus.UNAUTHORIZED: Unauthorized,
    HTTPStatus.FORBIDDEN: Forbidden,
    HTTPStatus.NOT_FOUND: FileNotFound,
    HTTPStatus.METHOD_NOT_ALLOWED: MethodNotAllowed,
}


def remote_exception_message(document):
    """
    Pull the server-side message out of a WebHDFS error body:

    {"RemoteException": {"exception": "FileNotFoundException",
                         "javaClassName": "java.io.FileNotFoundException",
                         "message": "File does not exist: /foo"}}
    """
    try:
        remote = document["RemoteException"]
        return "{0}: {1}".format(remote["exception"], remote["message"])
    except (KeyError, TypeError):
        return None


def raise_for_status(resp_code, document=None, message=None):
    """
    Raise the exception matching a WebHDFS error status. Success codes
    (below 400) are ignored.
    """
    if resp_code < 400:
        return
    msg = remote_exception_message(document) or message or \
        "HTTP status {0}".format(resp_code)
    raise _STATUS_ERRORS.get(resp_code, WebHdfsException)(msg=msg)
