import sys
import json
import logging
import argparse
import datetime

from streamhdfs import errors, operations
from streamhdfs.config import load_config, write_default_config, DEFAULT_CONFIG_PATH
from streamhdfs.operations import RequestKind
from streamhdfs.request import WebHdfsRequest

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='streamhdfs', description='Issue raw WebHDFS requests.')
    parser.add_argument('-c', '--config', default=DEFAULT_CONFIG_PATH,
                        help='INI file with HDFS_* settings [%(default)s]')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log request URLs and transport details')
    sub = parser.add_subparsers(dest='command')
    sub.required = True

    req = sub.add_parser('request', help='execute one WebHDFS request')
    req.add_argument('kind', choices=[k.name for k in RequestKind],
                     type=str.upper)
    req.add_argument('path')
    req.add_argument('params', nargs='*', metavar='key=value',
                     help='query parameters, e.g. op=LISTSTATUS')
    req.add_argument('--upload', metavar='FILE',
                     help="send FILE ('-' for stdin) through the datanode redirect")
    req.add_argument('--json', action='store_true',
                     help='decode and pretty-print the JSON response')

    ls = sub.add_parser('ls', help='list a directory')
    ls.add_argument('path', nargs='?', default='/')

    sub.add_parser('configure', help='write the configuration file interactively')
    return parser


def _parse_params(parser, pairs):
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            parser.error('expected key=value, got {0!r}'.format(pair))
        params[key] = value
    return params


def _check_response(req, outcome):
    if outcome.failed:
        print(outcome.message, file=sys.stderr)
        return False
    if outcome.status < 400:
        return True
    try:
        errors.raise_for_status(outcome.status, req.json_response(), req.text)
    except errors.WebHdfsException as e:
        print('{0}: {1}'.format(type(e).__name__, e.msg), file=sys.stderr)
        return False
    return True


def run_request(parser, config, args):
    params = _parse_params(parser, args.params)
    with WebHdfsRequest(config, args.path) as req:
        req.set_params(**params)
        if args.upload == '-':
            req.set_upload_file(sys.stdin.buffer)
            outcome = req.execute(args.kind)
        elif args.upload:
            with open(args.upload, 'rb') as f:
                req.set_upload_file(f)
                outcome = req.execute(args.kind)
        else:
            outcome = req.execute(args.kind)

        if not _check_response(req, outcome):
            return 1
        if args.json:
            doc = req.json_response()
            if req.parse_error:
                print('response-parse: {0}'.format(req.parse_error), file=sys.stderr)
                return 1
            if doc is not None:
                print(json.dumps(doc, indent=2, sort_keys=True))
        else:
            sys.stdout.buffer.write(req.body)
            sys.stdout.flush()
    return 0


def format_status(s):
    mtime = datetime.datetime.fromtimestamp(s['modificationTime'] / 1000)
    kind = 'd' if s['type'] == 'DIRECTORY' else '-'
    return "{}{:>4}\t{}\t{:12}\t{:12}\t{:>12}\t{}\t{}".format(
        kind, s['permission'], s.get('replication') or '-',
        s['owner'], s['group'], s['length'],
        mtime.strftime('%Y-%m-%d %H:%M'), s['pathSuffix'])


def run_ls(config, args):
    with WebHdfsRequest(config, args.path) as req:
        req.set_params(op=operations.LISTSTATUS)
        outcome = req.execute(RequestKind.GET)
        if not _check_response(req, outcome):
            return 1
        doc = req.json_response()
        if doc is None:
            print('response-parse: {0}'.format(req.parse_error or 'empty response'),
                  file=sys.stderr)
            return 1
    for s in doc["FileStatuses"]["FileStatus"]:
        print(format_status(s))
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == 'configure':
        path = write_default_config(args.config)
        print("Configuration written to {}".format(path))
        return 0

    config = load_config(args.config)
    logger.debug("Using %r", config)
    try:
        if args.command == 'ls':
            return run_ls(config, args)
        return run_request(parser, config, args)
    except errors.WebHdfsException as e:
        print('{0}: {1}'.format(type(e).__name__, e.msg), file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
