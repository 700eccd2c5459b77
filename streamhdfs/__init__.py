from streamhdfs import errors, operations
from streamhdfs.config import FsConfig, load_config
from streamhdfs.operations import RequestKind
from streamhdfs.request import WebHdfsRequest, TransportOutcome, Success, Failure
from streamhdfs.transport import RequestsTransport

__version__ = '0.1.0'
