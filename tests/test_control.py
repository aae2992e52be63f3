import pytest

from gendeb.common.digest import md5sum
from gendeb.debian.control import render_control, parse_control
from gendeb.debian.md5sums import Md5sums, parse_md5sums


def test_render_control_keeps_order():
    control = {
        'Package': 'hello',
        'Version': '1.0',
        'Architecture': 'amd64',
        'Description': 'says hello',
    }

    assert render_control(control) == (
        b'Package: hello\n'
        b'Version: 1.0\n'
        b'Architecture: amd64\n'
        b'Description: says hello\n'
    )


def test_parse_control():
    text = (
        'Package: hello\n'
        'Description: says hello\n'
        ' in a very polite way\n'
    )

    control = parse_control(text.encode())

    assert list(control) == ['Package', 'Description']
    assert control['Description'] == 'says hello\n in a very polite way'

    with pytest.raises(ValueError):
        parse_control('no colon here\n')


def test_md5sum():
    assert md5sum(b'') == 'd41d8cd98f00b204e9800998ecf8427e'
    assert md5sum(b'hello\n') == 'b1946ac92492d2347c6235b4d2611184'


def test_md5sums():
    md5sums = Md5sums()
    md5sums.add('/usr/bin/hello', b'hello\n')
    md5sums.add('/etc/hello.conf', b'')

    assert len(md5sums) == 2
    assert md5sums.raw == (
        b'b1946ac92492d2347c6235b4d2611184  /usr/bin/hello\n'
        b'd41d8cd98f00b204e9800998ecf8427e  /etc/hello.conf\n'
    )
    assert parse_md5sums(md5sums.raw) == {
        '/usr/bin/hello': 'b1946ac92492d2347c6235b4d2611184',
        '/etc/hello.conf': 'd41d8cd98f00b204e9800998ecf8427e',
    }
