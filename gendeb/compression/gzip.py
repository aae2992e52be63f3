'''
# GZIP file format

Defined in RFC 1952 <https://www.rfc-editor.org/rfc/rfc1952>: a gzip file is
a sequence of members with the following structure

  .-----------------------------------------------------------.
  | ID1 | ID2 | CM | FLG | MTIME (4) | XFL | OS |  header     |
  | (optional fields depending on FLG)                        |
  | compressed blocks (raw deflate)                           |
  | CRC32 (4) | ISIZE (4)                          trailer    |
  '-----------------------------------------------------------'

All the multi-byte numbers are little-endian. We write a single member without
optional fields; the timestamp is under control of the caller so that the
same input produces always the same output.
'''
import io
import logging
import zlib
from enum import Enum, Flag

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import CompressionError, StreamWriteError, FormatException
from ..streams import Stream


logger = logging.getLogger(__name__)


class GzipMethod(Enum):
    DEFLATE = 8


class GzipFlags(Flag):
    NONE     = 0
    FTEXT    = 1 << 0
    FHCRC    = 1 << 1
    FEXTRA   = 1 << 2
    FNAME    = 1 << 3
    FCOMMENT = 1 << 4
    # the remaining bits are reserved
    RESERVED5 = 1 << 5
    RESERVED6 = 1 << 6
    RESERVED7 = 1 << 7


class GzipExtraFlags(Enum):
    NONE    = 0
    SLOWEST = 2
    FASTEST = 4


OS_UNKNOWN = 255
MAX_MTIME = 0xffffffff


class GzipHeader(Chunk):
    magic       = fields.StringField(2, default=b'\x1f\x8b', is_magic=True)
    method      = fields.StructField('B', enum=GzipMethod, default=GzipMethod.DEFLATE, compliant=Compliant.ENUM)
    flags       = fields.StructField('B', enum=GzipFlags, default=GzipFlags.NONE)
    mtime       = fields.StructField('I')
    extra_flags = fields.StructField('B')
    os          = fields.StructField('B', default=OS_UNKNOWN)


class GzipTrailer(Chunk):
    crc32 = fields.StructField('I')
    isize = fields.StructField('I')


class GzipWriter(object):
    '''File-like object compressing what is written into it.

    close() MUST be called, otherwise the stream is truncated; it doesn't
    close the underlying file object.'''

    def __init__(self, fileobj, level=9, mtime=0):
        self.fileobj = fileobj
        self.level = level
        self.mtime = mtime
        self.crc = 0
        self.isize = 0
        self.closed = False
        self._header_written = False
        try:
            self._compressor = zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)
        except (zlib.error, ValueError) as e:
            raise CompressionError(f'unable to initialize the compressor with level {level}: {e}') from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()

    def _write(self, data):
        try:
            self.fileobj.write(data)
        except OSError as e:
            raise StreamWriteError(f'unable to write compressed data: {e}') from e

    def _write_header(self):
        header = GzipHeader()
        # MTIME is 32 bits, zero means no timestamp
        if 0 <= self.mtime <= MAX_MTIME:
            header.mtime.value = self.mtime
        else:
            logger.debug('timestamp %d doesn\'t fit into the gzip header, omitted' % self.mtime)

        if self.level == 9:
            header.extra_flags.value = GzipExtraFlags.SLOWEST.value
        elif self.level == 1:
            header.extra_flags.value = GzipExtraFlags.FASTEST.value

        self._write(header.pack())
        self._header_written = True

    def write(self, data):
        if self.closed:
            raise CompressionError('write on a closed gzip stream')

        if not self._header_written:
            self._write_header()

        self.crc = zlib.crc32(data, self.crc)
        self.isize += len(data)

        try:
            compressed = self._compressor.compress(data)
        except zlib.error as e:
            raise CompressionError(f'unable to compress data: {e}') from e

        if compressed:
            self._write(compressed)

        return len(data)

    def flush(self):
        '''It only flushes the underlying file object: flushing the compressor
        would change the output.'''
        if hasattr(self.fileobj, 'flush'):
            try:
                self.fileobj.flush()
            except OSError as e:
                raise StreamWriteError(f'unable to flush compressed data: {e}') from e

    def close(self):
        if self.closed:
            return

        if not self._header_written:
            self._write_header()

        try:
            remaining = self._compressor.flush()
        except zlib.error as e:
            raise CompressionError(f'unable to complete the compressed stream: {e}') from e

        self._write(remaining)

        trailer = GzipTrailer()
        trailer.crc32.value = self.crc & 0xffffffff
        trailer.isize.value = self.isize & 0xffffffff
        self._write(trailer.pack())

        self.closed = True

        logger.debug('gzip stream closed: %d bytes in, crc32 %08x' % (self.isize, self.crc))


def compress(data, level=9, mtime=0):
    output = io.BytesIO()
    with GzipWriter(output, level=level, mtime=mtime) as writer:
        writer.write(data)

    return output.getvalue()


def _read_zero_terminated(stream):
    data = []
    while True:
        c = stream.read_exactly(1)
        if not c:
            raise CompressionError('truncated gzip header')
        if c == b'\x00':
            return b''.join(data)
        data.append(c)


def decompress(data):
    '''Decompress the first member of a gzip stream verifying its integrity.'''
    stream = data if isinstance(data, Stream) else Stream(data)

    try:
        header = GzipHeader(stream, compliant=Compliant.MAGIC | Compliant.ENUM)
    except FormatException as e:
        raise CompressionError(f'invalid gzip header ({e})') from e

    flags = header.flags.value
    if not isinstance(flags, GzipFlags):
        raise CompressionError(f'invalid gzip flags 0x{flags:02x}')

    if flags & GzipFlags.FEXTRA:
        length = stream.read_exactly(2)
        if len(length) != 2:
            raise CompressionError('truncated gzip header')
        stream.read_exactly(int.from_bytes(length, 'little'))
    if flags & GzipFlags.FNAME:
        name = _read_zero_terminated(stream)
        logger.debug('gzip stream for file \'%s\'' % name.decode('latin1'))
    if flags & GzipFlags.FCOMMENT:
        _read_zero_terminated(stream)
    if flags & GzipFlags.FHCRC:
        stream.read_exactly(2)

    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        result = decompressor.decompress(stream.read_all())
    except zlib.error as e:
        raise CompressionError(f'unable to decompress data: {e}') from e

    if not decompressor.eof:
        raise CompressionError('truncated gzip stream')

    try:
        trailer = GzipTrailer(decompressor.unused_data[:8])
    except FormatException as e:
        raise CompressionError('truncated gzip trailer') from e

    if trailer.crc32.value != zlib.crc32(result) & 0xffffffff:
        raise CompressionError('gzip CRC32 mismatch')

    if trailer.isize.value != len(result) & 0xffffffff:
        raise CompressionError('gzip size mismatch')

    return result
