'''
# Tape ARchive

Sequential archive format: each member is a 512 bytes header followed by its
content padded to a multiple of 512 bytes. The end of the archive is indicated
by two blocks filled with zeros.

We write the POSIX.1-1988 "ustar" variant of the header

    offset  size  field
         0   100  name
       100     8  mode
       108     8  uid
       116     8  gid
       124    12  size
       136    12  mtime
       148     8  chksum
       156     1  typeflag
       157   100  linkname
       257     6  magic ("ustar\\0")
       263     2  version ("00")
       265    32  uname
       297    32  gname
       329     8  devmajor
       337     8  devminor
       345   155  prefix
       500    12  (padding)

All the numbers are written in octal with leading zeros and a terminating NUL;
the checksum is the sum of the bytes of the header taken as unsigned, computed
with the checksum field itself filled with spaces.

See <https://pubs.opengroup.org/onlinepubs/9699919799/utilities/pax.html#tag_20_92_13_06>.
'''
import logging
from enum import Enum

from bitstring import BitArray

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import StreamWriteError, UnpackException
from ..streams import Stream


logger = logging.getLogger(__name__)

BLOCK_SIZE = 512
NAME_SIZE = 100
PREFIX_SIZE = 155


class TarEntryType(Enum):
    REGULAR   = '0'
    HARDLINK  = '1'
    SYMLINK   = '2'
    CHARACTER = '3'
    BLOCK     = '4'
    DIRECTORY = '5'
    FIFO      = '6'


class TarNumericField(fields.IntegerStringField):
    """Octal number zero padded and NUL terminated.

    GNU tar extended the format so that a number too big for the octal digits
    is stored as a big-endian binary number with the high bit of the first
    byte set (the so called base-256 encoding)."""

    def __init__(self, n, **kw):
        super().__init__(n, base=8, fill='0', align='right', terminator=b'\x00', **kw)

    def encode(self, value) -> bytes:
        if len(self._format_digits(value)) <= self.width:
            return super().encode(value)

        if value >= 1 << (8 * self.length - 1):
            raise ValueError(f'value {value} doesn\'t fit into {self.length} bytes (field \'{self.name}\')')

        bits = BitArray(uint=value, length=8 * self.length)
        bits.set(True, 0)

        return bits.bytes

    def decode(self, raw) -> int:
        if raw[0] & 0x80:
            bits = BitArray(bytes=raw)
            bits.set(False, 0)
            return bits.uint

        return super().decode(raw)


# FIXME: if you don't pack the header the checksum is undefined
class TarChecksumField(fields.IntegerStringField):
    """Six octal digits followed by NUL and a space."""

    def __init__(self, **kw):
        super().__init__(8, base=8, fill='0', align='right', terminator=b'\x00 ', **kw)

    def calculate(self, block=None):
        '''Sum of the bytes of the header with this field counted as spaces.

        Without a block the header is the encoding of the actual values.'''
        if block is None:
            block = self.father.raw

        start = 0
        for _, field in self.father.get_fields():
            if field is self:
                break
            start += field.size

        return sum(block[:start]) + ord(' ') * self.size + sum(block[start + self.size:])

    def _update_value(self):
        self.value = self.calculate()


def split_path(path):
    '''Returns the couple (prefix, name) to use to store the path into
    a ustar header.'''
    encoded = path.encode('utf-8')

    if len(encoded) <= NAME_SIZE:
        return '', path

    for idx, char in enumerate(encoded):
        if char != ord('/'):
            continue

        prefix, name = encoded[:idx], encoded[idx + 1:]

        # an empty prefix would drop the leading slash of an absolute path
        if not prefix or not name or len(name) > NAME_SIZE:
            continue

        if len(prefix) > PREFIX_SIZE:
            break

        return prefix.decode('utf-8'), name.decode('utf-8')

    raise ValueError(f'path \'{path}\' is too long for a ustar header')


class TarHeader(Chunk):
    th_name     = fields.PaddedStringField(NAME_SIZE, encoding='utf-8')
    th_mode     = TarNumericField(8)
    th_uid      = TarNumericField(8)
    th_gid      = TarNumericField(8)
    th_size     = TarNumericField(12)
    th_mtime    = TarNumericField(12)
    th_chksum   = TarChecksumField()
    th_typeflag = fields.PaddedStringField(1, default=TarEntryType.REGULAR.value)
    th_linkname = fields.PaddedStringField(NAME_SIZE, encoding='utf-8')
    th_magic    = fields.PaddedStringField(6, default='ustar')
    th_version  = fields.StringField(2, default=b'00')
    th_uname    = fields.PaddedStringField(32)
    th_gname    = fields.PaddedStringField(32)
    th_devmajor = TarNumericField(8)
    th_devminor = TarNumericField(8)
    th_prefix   = fields.PaddedStringField(PREFIX_SIZE, encoding='utf-8')
    th_padding  = fields.StringField(12)

    # the bytes as read by unpack()
    block = None

    def _get_path(self):
        if self.th_prefix.value:
            return f'{self.th_prefix.value}/{self.th_name.value}'

        return self.th_name.value

    def _set_path(self, path):
        prefix, name = split_path(path)
        self.th_prefix.value = prefix
        self.th_name.value = name

    path = property(_get_path, _set_path)

    @property
    def type(self):
        # old archives use NUL for regular files
        return TarEntryType(self.th_typeflag.value or TarEntryType.REGULAR.value)

    def unpack(self, stream):
        # the checksum is verified on the bytes as read, other writers
        # can format the numbers differently from us
        self.block = stream.read_exactly(BLOCK_SIZE)
        super().unpack(Stream(self.block))

    def validate(self):
        '''GNU tar writes "ustar  " as magic, it's fine for us'''
        return self.th_magic.value.startswith('ustar') and self.th_chksum.value == self.th_chksum.calculate(self.block)


class TarEntry(object):
    '''A member of a tar archive'''

    def __init__(self, header, content):
        self.header = header
        self.content = content

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name!r}, size={self.size})>'

    @property
    def name(self):
        return self.header.path

    @property
    def mode(self):
        return self.header.th_mode.value

    @property
    def uid(self):
        return self.header.th_uid.value

    @property
    def gid(self):
        return self.header.th_gid.value

    @property
    def size(self):
        return self.header.th_size.value

    @property
    def mtime(self):
        return self.header.th_mtime.value


class TarWriter(object):
    '''Append entries to a tar stream.

    The entries are written in call order directly into the file object, the
    archive is valid only after finalize() has been called.

        writer = TarWriter(fileobj)
        writer.write_entry('./control', b'Package: foo\\n')
        writer.finalize()
    '''
    END_OF_ARCHIVE = b'\x00' * (2 * BLOCK_SIZE)

    def __init__(self, fileobj, mtime=0):
        self.fileobj = fileobj
        self.mtime = mtime
        self.finalized = False
        self.n_entries = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.finalize()

    def _write(self, data):
        try:
            self.fileobj.write(data)
        except OSError as e:
            raise StreamWriteError(f'unable to write tar data: {e}') from e

    def write_entry(self, name, content, mode=0o644, uid=0, gid=0, size=None, mtime=None,
                    uname='', gname='', entry_type=TarEntryType.REGULAR):
        '''Write the header for the entry followed by its content.

        "size" defaults to the length of content: if you pass it, it's up to you
        to make it match, otherwise the archive will be garbage.'''
        if self.finalized:
            raise StreamWriteError(f'tar archive already finalized, unable to add \'{name}\'')

        size = len(content) if size is None else size

        header = TarHeader()
        try:
            header.path = name
            header.th_mode.value = mode
            header.th_uid.value = uid
            header.th_gid.value = gid
            header.th_size.value = size
            header.th_mtime.value = self.mtime if mtime is None else mtime
            header.th_typeflag.value = entry_type.value
            header.th_uname.value = uname
            header.th_gname.value = gname
            raw = header.pack()
        except ValueError as e:
            raise StreamWriteError(f'unable to encode tar header for \'{name}\': {e}') from e

        logger.debug('entry \'%s\' mode=%o uid=%d gid=%d size=%d' % (name, mode, uid, gid, size))

        self._write(raw)
        self._write(content)

        padding = -len(content) % BLOCK_SIZE
        if padding:
            self._write(b'\x00' * padding)

        self.n_entries += 1

        return header

    def finalize(self):
        '''Write the end of archive marker, further writes are errors.'''
        if self.finalized:
            return

        self._write(self.END_OF_ARCHIVE)

        if hasattr(self.fileobj, 'flush'):
            try:
                self.fileobj.flush()
            except OSError as e:
                raise StreamWriteError(f'unable to flush tar data: {e}') from e

        self.finalized = True

        logger.debug('tar archive finalized with %d entries' % self.n_entries)


class TarReader(object):
    '''Iterate over the entries of a tar archive.

    By default the headers must have a valid checksum, otherwise MagicException
    is raised.'''

    def __init__(self, data, compliant=Compliant.MAGIC):
        self.stream = data if isinstance(data, Stream) else Stream(data)
        self.compliant = compliant

    def __iter__(self):
        while True:
            block = self.stream.read_exactly(BLOCK_SIZE)

            if len(block) == 0:
                logger.warning('tar archive without end of archive marker')
                return

            if len(block) < BLOCK_SIZE:
                raise UnpackException(chain=['header'])

            if block == b'\x00' * BLOCK_SIZE:
                return

            header = TarHeader(block, compliant=self.compliant)

            size = header.th_size.value
            content = self.stream.read_exactly(size)
            if len(content) != size:
                logger.error(f'entry \'{header.path}\' is truncated')
                raise UnpackException(chain=['content'])

            self.stream.read_exactly(-size % BLOCK_SIZE)

            yield TarEntry(header, content)

    def entries(self):
        return list(self)
