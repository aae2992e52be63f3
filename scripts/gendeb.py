#!/usr/bin/env python3
'''
Generate a Debian binary package from a specification file.

 $ gendeb.py --spec hello.json
 $ gendeb.py --spec hello.json --version 1.1 --out hello.deb

Set SOURCE_DATE_EPOCH to fix the timestamps of all the members.
'''
import argparse
import logging
import os
import sys

from gendeb.config import BuildConfig
from gendeb.debian import generate
from gendeb.exceptions import BuildException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate a Debian package from a spec file')
    parser.add_argument('--spec', required=True, help='The spec file to use for deb generation')
    parser.add_argument('--version', help='Override the version in the spec file')
    parser.add_argument('--out', help='Override the output filename for the deb file')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = BuildConfig.from_environ(args.spec, version=args.version, output=args.out)

    try:
        path = generate(config)
    except BuildException as e:
        logger.error(f'Unable to generate deb: {e.step}: {e}')
        return 1

    logger.info(f'Wrote deb file to: {path}')

    return 0


if __name__ == '__main__':
    sys.exit(main())
