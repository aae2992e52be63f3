import io

import pytest

from gendeb.archives.ar import AR_MAGIC, ArHeader, ArReader, ArWriter
from gendeb.exceptions import MagicException, StreamWriteError


def test_header_layout():
    header = ArHeader()
    header.ar_name.value = 'debian-binary'
    header.ar_size.value = 4
    header.ar_mode.value = 0o100644

    raw = header.pack()

    assert len(raw) == 60
    assert raw == (
        b'debian-binary   '
        b'0           '
        b'0     '
        b'0     '
        b'100644  '
        b'4         '
        b'`\n'
    )


def test_header_gnu_name():
    header = ArHeader(b'debian-binary/  0           0     0     100644  4         `\n')

    assert header.ar_name.value == 'debian-binary/'
    assert header.filename == 'debian-binary'
    assert header.ar_mode.value == 0o100644
    assert header.ar_size.value == 4


def test_writer():
    buffer = io.BytesIO()
    with ArWriter(buffer) as ar:
        ar.write_header('debian-binary', 4)
        ar.write(b'2.0\n')
        ar.write_header('odd', 3, mtime=1234567890)
        ar.write(b'a')
        ar.write(b'bc')

    data = buffer.getvalue()

    assert data.startswith(AR_MAGIC)
    assert len(data) == len(AR_MAGIC) + 60 + 4 + 60 + 3 + 1
    assert data.endswith(b'abc\n')
    assert data[len(AR_MAGIC) + 64:len(AR_MAGIC) + 64 + 16] == b'odd             '

    members = ArReader(data).members()

    assert [_.name for _ in members] == ['debian-binary', 'odd']
    assert members[0].data == b'2.0\n'
    assert members[1].data == b'abc'
    assert members[1].header.ar_date.value == 1234567890


def test_writer_empty_archive():
    buffer = io.BytesIO()
    ArWriter(buffer).close()

    assert buffer.getvalue() == AR_MAGIC
    assert ArReader(buffer.getvalue()).members() == []


def test_writer_name_truncated():
    buffer = io.BytesIO()
    with ArWriter(buffer) as ar:
        ar.write_header('a-very-long-member-name', 0)

    assert [_.name for _ in ArReader(buffer.getvalue())] == ['a-very-long-memb']


def test_writer_too_long():
    ar = ArWriter(io.BytesIO())
    ar.write_header('debian-binary', 4)

    with pytest.raises(StreamWriteError):
        ar.write(b'2.0\n\n')


def test_writer_incomplete_member():
    ar = ArWriter(io.BytesIO())
    ar.write_header('debian-binary', 4)
    ar.write(b'2.')

    with pytest.raises(StreamWriteError):
        ar.write_header('control.tar.gz', 10)

    with pytest.raises(StreamWriteError):
        ar.close()


def test_reader_bad_magic():
    with pytest.raises(MagicException) as exc:
        ArReader(b'!<arch>X').members()

    assert exc.value.chain == ['magic']
