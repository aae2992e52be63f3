#!/usr/bin/env python3
'''
Dump the content of a Debian binary package, a little like dpkg-deb --info
and --contents together.
'''
import sys
import os
import logging
from datetime import datetime, timezone

from gendeb.debian import DebFile
from gendeb.exceptions import GendebException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <deb file>' % progname)
    sys.exit(1)


def dump_members(deb):
    print('Members:')
    for member in deb.members:
        print(f'  {member.name:<16} {member.size:>10} bytes  mode {member.mode:o}')
    print(f'Format version: {deb.debian_binary.decode().strip()}')


def dump_control(deb):
    print('Control:')
    for key, value in deb.control.items():
        print(f'  {key}: {value}')


def dump_contents(deb):
    md5sums = deb.md5sums
    print('Contents:')
    for entry in deb.data_entries:
        mtime = datetime.fromtimestamp(entry.mtime, tz=timezone.utc).strftime('%Y-%m-%d %H:%M')
        print(f'  {entry.mode:04o} {entry.uid}/{entry.gid} {entry.size:>10} {mtime} {md5sums.get(entry.name, "-"):<32} {entry.name}')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]

    try:
        deb = DebFile(path)
    except (GendebException, KeyError, OSError) as e:
        logger.error(f'\'{path}\' is not a valid package: {e}')
        sys.exit(1)

    dump_members(deb)
    dump_control(deb)
    dump_contents(deb)

    if not deb.validate():
        logger.warning('the members are not in the order dpkg expects')

    broken = deb.verify()
    for name in broken:
        logger.error(f'md5sum mismatch for \'{name}\'')

    sys.exit(1 if broken else 0)
