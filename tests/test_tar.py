import io
import tarfile

import pytest

from gendeb.archives.tar import (
    BLOCK_SIZE,
    TarHeader,
    TarNumericField,
    TarReader,
    TarWriter,
    split_path,
)
from gendeb.enum import Compliant
from gendeb.exceptions import MagicException, StreamWriteError


class BrokenFile(object):

    def write(self, data):
        raise OSError(28, 'No space left on device')


def test_header_layout():
    header = TarHeader()

    assert header.size == BLOCK_SIZE
    assert header.layout['th_mode'] == (100, 8)
    assert header.layout['th_size'] == (124, 12)
    assert header.layout['th_chksum'] == (148, 8)
    assert header.layout['th_typeflag'] == (156, 1)
    assert header.layout['th_magic'] == (257, 6)
    assert header.layout['th_prefix'] == (345, 155)


def test_header_checksum():
    header = TarHeader()
    header.path = './control'
    header.th_mode.value = 0o644
    header.th_size.value = 10

    raw = header.pack()
    expected = sum(raw[:148]) + 8 * ord(' ') + sum(raw[156:])

    assert raw[:9] == b'./control'
    assert raw[100:108] == b'0000644\x00'
    assert raw[124:136] == b'00000000012\x00'
    assert raw[148:156] == b'%06o\x00 ' % expected
    assert raw[156:157] == b'0'
    assert raw[257:265] == b'ustar\x0000'

    assert TarHeader(raw, compliant=Compliant.MAGIC).validate()


def test_numeric_field_base256():
    field = TarNumericField(8)

    field.value = 0o7777777
    assert field.raw == b'7777777\x00'

    field.value = 0o10000000
    assert field.raw == b'\x80\x00\x00\x00\x00\x20\x00\x00'

    field.raw = b'\x80\x00\x00\x00\x00\x20\x00\x00'
    assert field.value == 0o10000000

    with pytest.raises(ValueError):
        field.value = 1 << 63


def test_split_path():
    assert split_path('/usr/bin/hello') == ('', '/usr/bin/hello')

    path = '/usr/share/' + 'a' * 90 + '/' + 'b' * 60

    assert split_path(path) == ('/usr/share/' + 'a' * 90, 'b' * 60)

    with pytest.raises(ValueError):
        split_path('c' * 300)


def test_writer_readable_by_tarfile():
    buffer = io.BytesIO()
    writer = TarWriter(buffer, mtime=1000)
    writer.write_entry('/usr/bin/hello', b'hello\n', mode=0o755, uid=1, gid=2)
    writer.write_entry('./empty', b'')
    writer.write_entry('./big-uid', b'x', uid=3000000)
    writer.finalize()

    data = buffer.getvalue()

    assert len(data) == 3 * BLOCK_SIZE + 2 * BLOCK_SIZE + 2 * BLOCK_SIZE
    assert data.endswith(b'\x00' * 2 * BLOCK_SIZE)

    with tarfile.open(fileobj=io.BytesIO(data), mode='r:') as tar:
        members = tar.getmembers()

        assert [_.name for _ in members] == ['/usr/bin/hello', './empty', './big-uid']

        hello = members[0]
        assert hello.mode == 0o755
        assert hello.uid == 1
        assert hello.gid == 2
        assert hello.mtime == 1000
        assert hello.size == 6
        assert tar.extractfile(hello).read() == b'hello\n'

        assert members[1].size == 0
        assert members[2].uid == 3000000


def test_writer_long_path():
    path = '/usr/share/' + 'a' * 90 + '/' + 'b' * 60

    buffer = io.BytesIO()
    with TarWriter(buffer) as writer:
        writer.write_entry(path, b'content')

    with tarfile.open(fileobj=io.BytesIO(buffer.getvalue()), mode='r:') as tar:
        assert tar.getnames() == [path]

    entries = TarReader(buffer.getvalue()).entries()

    assert [_.name for _ in entries] == [path]

    with pytest.raises(StreamWriteError):
        TarWriter(io.BytesIO()).write_entry('c' * 300, b'')


def test_writer_after_finalize():
    writer = TarWriter(io.BytesIO())
    writer.finalize()

    with pytest.raises(StreamWriteError):
        writer.write_entry('./late', b'')


def test_writer_io_error():
    writer = TarWriter(BrokenFile())

    with pytest.raises(StreamWriteError):
        writer.write_entry('./control', b'Package: hello\n')


def test_reader():
    buffer = io.BytesIO()
    with TarWriter(buffer, mtime=42) as writer:
        writer.write_entry('./control', b'Package: hello\n')
        writer.write_entry('./md5sums', b'', mode=0o600, uid=5, gid=6)

    entries = TarReader(buffer.getvalue()).entries()

    assert [_.name for _ in entries] == ['./control', './md5sums']
    assert entries[0].content == b'Package: hello\n'
    assert entries[0].mtime == 42
    assert entries[1].mode == 0o600
    assert (entries[1].uid, entries[1].gid) == (5, 6)


def test_reader_reads_tarfile_output():
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode='w', format=tarfile.USTAR_FORMAT) as tar:
        info = tarfile.TarInfo('usr/bin/tool')
        info.size = 3
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(b'abc'))

    entries = TarReader(buffer.getvalue()).entries()

    assert len(entries) == 1
    assert entries[0].name == 'usr/bin/tool'
    assert entries[0].content == b'abc'
    assert entries[0].mode == 0o755


def test_reader_bad_checksum():
    buffer = io.BytesIO()
    with TarWriter(buffer) as writer:
        writer.write_entry('./control', b'Package: hello\n')

    data = bytearray(buffer.getvalue())
    data[2] = ord('X')

    with pytest.raises(MagicException):
        TarReader(bytes(data)).entries()

    entries = TarReader(bytes(data), compliant=Compliant.NONE).entries()
    assert entries[0].name == './Xontrol'


def test_split_path_absolute():
    # 101 bytes: the slash at the start is not a valid split point
    path = '/usr/share/doc/hello/' + 'r' * 80

    assert split_path(path) == ('/usr', 'share/doc/hello/' + 'r' * 80)

    with pytest.raises(ValueError):
        split_path('/' + 'a' * 100)


def test_writer_absolute_path_just_too_long():
    path = '/usr/share/doc/hello/' + 'r' * 80

    buffer = io.BytesIO()
    with TarWriter(buffer) as writer:
        writer.write_entry(path, b'content')

    with tarfile.open(fileobj=io.BytesIO(buffer.getvalue()), mode='r:') as tar:
        assert tar.getnames() == [path]

    assert [_.name for _ in TarReader(buffer.getvalue())] == [path]

    with pytest.raises(StreamWriteError):
        TarWriter(io.BytesIO()).write_entry('/' + 'a' * 100, b'x')


def test_reader_space_terminated_numbers():
    '''some writers terminate the numbers with a space before the NUL'''
    buffer = io.BytesIO()
    with TarWriter(buffer) as writer:
        writer.write_entry('./control', b'Package: hello\n', mode=0o644)

    data = bytearray(buffer.getvalue())
    data[100:108] = b'000644 \x00'
    data[148:156] = b' ' * 8
    data[148:156] = b'%06o\x00 ' % sum(data[:BLOCK_SIZE])

    entries = TarReader(bytes(data)).entries()

    assert entries[0].name == './control'
    assert entries[0].mode == 0o644
    assert entries[0].content == b'Package: hello\n'
