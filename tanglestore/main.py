import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import config as cfg
from .errors import StoreError


def configure_logging(log_dir: str = None):
    """Root logger with a rotating file handler, plus stderr for warnings."""
    logdir = Path(log_dir or os.environ.get('TANGLESTORE_LOG_DIR', 'logs'))
    logdir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler = RotatingFileHandler(str(logdir / 'tanglestore.log'), maxBytes=5_000_000, backupCount=5)
    handler.setFormatter(fmt)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(fmt)
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)
    root.addHandler(console)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='tanglestore')
    parser.add_argument('--config', help='Path to the JSON configuration file')
    sub = parser.add_subparsers(dest='cmd')
    webp = sub.add_parser('web')
    webp.add_argument('--host', default='127.0.0.1')
    webp.add_argument('--port', type=int, default=4000)
    storep = sub.add_parser('store')
    storep.add_argument('path')
    storep.add_argument('--description')
    sub.add_parser('check-node')
    sub.add_parser('show-config')
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 1

    configure_logging()
    try:
        config = cfg.load_config(args.config)
    except StoreError as e:
        print('configuration error:', e, file=sys.stderr)
        return 2

    if args.cmd == 'show-config':
        print(json.dumps(cfg.masked(config), indent=2))
        return 0
    if args.cmd == 'check-node':
        from .iota_interface import IotaLedger
        try:
            info = IotaLedger(config.node.provider, config.seed).is_node_available(check_sync=True)
        except StoreError as e:
            print(e, file=sys.stderr)
            return 3
        print('node ok, milestone', info.get('latestMilestoneIndex'))
        return 0
    if args.cmd == 'store':
        from .store import ipfs_store
        from .utils import request_from_file
        try:
            body = request_from_file(args.path, args.description)
        except OSError as e:
            print('cannot read', args.path, e, file=sys.stderr)
            return 2
        response = ipfs_store(config, body)
        print(json.dumps(response.to_dict(), indent=2))
        return 0 if response.success else 1
    if args.cmd == 'web':
        from .api import create_app
        create_app(config).run(host=args.host, port=args.port)
        return 0
    return 1


if __name__ == '__main__':
    sys.exit(main())
