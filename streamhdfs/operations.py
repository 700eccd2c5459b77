import enum

# WebHDFS op= values, passed by callers through WebHdfsRequest.set_args
# or set_params.
CREATE = "CREATE"
APPEND = "APPEND"
OPEN = "OPEN"
MKDIRS = "MKDIRS"
RENAME = "RENAME"
DELETE = "DELETE"
GETFILESTATUS = "GETFILESTATUS"
LISTSTATUS = "LISTSTATUS"
GETCONTENTSUMMARY = "GETCONTENTSUMMARY"
GETFILECHECKSUM = "GETFILECHECKSUM"
GETHOMEDIRECTORY = "GETHOMEDIRECTORY"
SETPERMISSION = "SETPERMISSION"
SETOWNER = "SETOWNER"
SETREPLICATION = "SETREPLICATION"
SETTIMES = "SETTIMES"
GETXATTRS = "GETXATTRS"
SETXATTR = "SETXATTR"
REMOVEXATTR = "REMOVEXATTR"
LISTXATTRS = "LISTXATTRS"
GETDELEGATIONTOKEN = "GETDELEGATIONTOKEN"


class RequestKind(enum.Enum):
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"

    @property
    def method(self):
        return self.value

    @property
    def uploads(self):
        """Whether a bound upload goes through the two-phase redirect."""
        return self in (RequestKind.PUT, RequestKind.POST)

    @classmethod
    def parse(cls, name):
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError("unknown request kind: {0}".format(name))
