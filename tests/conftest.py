import json
import logging
import os

import pytest

from gendeb.config import BuildConfig


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)

PAYLOAD = {
    'hello': b'#!/bin/sh\necho hello\n',
    'README': b'odd sized content',
    'empty': b'',
}

CONTROL = {
    'Package': 'hello',
    'Version': '1.0',
    'Architecture': 'amd64',
    'Maintainer': 'Someone <someone@example.com>',
    'Description': 'says hello',
}


@pytest.fixture
def payload_dir(tmp_path):
    root = tmp_path / 'payload'
    root.mkdir()
    for name, content in PAYLOAD.items():
        (root / name).write_bytes(content)

    return root


@pytest.fixture
def files(payload_dir):
    return [
        {'Name': str(payload_dir / 'hello'), 'Dest': '/usr/bin/hello', 'Mode': '0755', 'Uid': 0, 'Gid': 0},
        {'Name': str(payload_dir / 'README'), 'Dest': '/usr/share/doc/hello/README', 'Mode': '0644', 'Uid': 1000, 'Gid': 100},
        {'Name': str(payload_dir / 'empty'), 'Dest': '/etc/hello.conf'},
    ]


@pytest.fixture
def make_spec(tmp_path, files):
    '''Write a specification document and returns its path'''
    def _make_spec(control=None, files=files, name='spec.json'):
        document = {
            'Control': dict(CONTROL) if control is None else control,
            'Files': files,
        }
        path = tmp_path / name
        path.write_text(json.dumps(document))

        return str(path)

    return _make_spec


@pytest.fixture
def config(tmp_path, make_spec):
    return BuildConfig(spec=make_spec(), output=str(tmp_path / 'out.deb'), mtime=1234567890)
