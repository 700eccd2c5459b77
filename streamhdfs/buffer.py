from streamhdfs.errors import BufferFull


class Buffer(object):
    """
    Growable byte buffer used both for the request URL and for the
    response body accumulated while a transfer runs.

    :param max_size: optional limit on the number of bytes held; growing
      past it raises BufferFull
    """

    def __init__(self, max_size=None):
        self.max_size = max_size
        self._blob = None

    def open(self):
        self._blob = bytearray()
        return self

    def close(self):
        self._blob = None

    @property
    def closed(self):
        return self._blob is None

    def _check_open(self):
        if self._blob is None:
            raise ValueError("I/O operation on closed buffer")

    def clear(self):
        self._check_open()
        del self._blob[:]

    def append(self, data):
        self._check_open()
        if self.max_size is not None and \
                len(self._blob) + len(data) > self.max_size:
            raise BufferFull(msg="buffer limit of {0} bytes reached".format(
                self.max_size))
        self._blob.extend(data)

    def append_format(self, frmt, *args):
        """Without arguments ``frmt`` is appended as-is, so escaped text
        such as ``%2F`` needs no doubling."""
        text = frmt % args if args else frmt
        self.append(text.encode("utf8"))

    def getvalue(self):
        self._check_open()
        return bytes(self._blob)

    @property
    def size(self):
        return 0 if self._blob is None else len(self._blob)

    def __len__(self):
        return self.size

    def __enter__(self):
        if self._blob is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
