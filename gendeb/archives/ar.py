'''
# Unix archiver

Very simple format: a global header (the magic "!<arch>\\n") followed by the
members, each one introduced by a 60 bytes header made only of printable
characters

    offset  size  field
         0    16  ar_name  (space padded)
        16    12  ar_date  (decimal)
        28     6  ar_uid   (decimal)
        34     6  ar_gid   (decimal)
        40     8  ar_mode  (octal)
        48    10  ar_size  (decimal)
        58     2  ar_fmag  ("`\\n")

The data of each member starts at an even offset, so a newline is appended
to the members with odd size.

There are a couple of variants (BSD and GNU) that handle names longer than
16 characters in different ways; we don't need them: the Debian format uses
only short names and dpkg accepts them with or without the trailing slash.
'''
import logging

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import StreamWriteError, UnpackException
from ..streams import Stream


logger = logging.getLogger(__name__)

AR_MAGIC = b'!<arch>\n'
AR_PADDING = b'\n'


class ArGlobalHeader(Chunk):
    magic = fields.StringField(len(AR_MAGIC), default=AR_MAGIC, is_magic=True)


class ArHeader(Chunk):
    ar_name = fields.PaddedStringField(16, padding=b' ')
    ar_date = fields.IntegerStringField(12)
    ar_uid  = fields.IntegerStringField(6)
    ar_gid  = fields.IntegerStringField(6)
    ar_mode = fields.IntegerStringField(8, base=8)
    ar_size = fields.IntegerStringField(10)
    ar_fmag = fields.StringField(2, default=b'`\n', is_magic=True)

    @property
    def filename(self):
        '''GNU ar terminates the names with a slash'''
        name = self.ar_name.value
        return name[:-1] if name.endswith('/') else name


class ArMember(object):

    def __init__(self, header, data):
        self.header = header
        self.data = data

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name!r}, size={self.size})>'

    @property
    def name(self):
        return self.header.filename

    @property
    def size(self):
        return self.header.ar_size.value

    @property
    def mode(self):
        return self.header.ar_mode.value

    @property
    def mtime(self):
        return self.header.ar_date.value


class ArWriter(object):
    '''Strictly append-only writer for ar archives.

    Each member is written calling write_header() and then write() with exactly
    the number of bytes indicated in the header.'''

    def __init__(self, fileobj):
        self.fileobj = fileobj
        self._started = False
        self._remaining = 0
        self._needs_padding = False
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()

    def _write(self, data):
        try:
            self.fileobj.write(data)
        except OSError as e:
            raise StreamWriteError(f'unable to write ar data: {e}') from e

    def _complete_member(self):
        if self._remaining > 0:
            raise StreamWriteError(f'the previous member is missing {self._remaining} bytes')

        if self._needs_padding:
            self._write(AR_PADDING)
            self._needs_padding = False

    def write_header(self, name, size, mode=0o100644, uid=0, gid=0, mtime=0):
        if self.closed:
            raise StreamWriteError(f'ar archive already closed, unable to add \'{name}\'')

        self._complete_member()

        if not self._started:
            self._write(ArGlobalHeader().pack())
            self._started = True

        header = ArHeader()
        try:
            header.ar_name.value = name
            header.ar_date.value = mtime
            header.ar_uid.value = uid
            header.ar_gid.value = gid
            header.ar_mode.value = mode
            header.ar_size.value = size
            raw = header.pack()
        except ValueError as e:
            raise StreamWriteError(f'unable to encode ar header for \'{name}\': {e}') from e

        logger.debug('member \'%s\' with size %d' % (name, size))

        self._write(raw)

        self._remaining = size
        self._needs_padding = size % 2 == 1

        return header

    def write(self, data):
        if len(data) > self._remaining:
            raise StreamWriteError(f'write too long: {len(data)} bytes but only {self._remaining} expected')

        self._write(data)
        self._remaining -= len(data)

        return len(data)

    def close(self):
        '''Complete the last member, it doesn't close the underlying file object.'''
        if self.closed:
            return

        if not self._started:
            self._write(ArGlobalHeader().pack())
            self._started = True

        self._complete_member()
        self.closed = True


class ArReader(object):
    '''Iterate over the members of an ar archive.'''

    def __init__(self, data, compliant=Compliant.MAGIC):
        self.stream = data if isinstance(data, Stream) else Stream(data)
        self.compliant = compliant

    def __iter__(self):
        ArGlobalHeader(self.stream, compliant=self.compliant)

        while True:
            raw = self.stream.read_exactly(ArHeader().size)
            if len(raw) == 0:
                return

            header = ArHeader(raw, compliant=self.compliant)

            size = header.ar_size.value
            data = self.stream.read_exactly(size)
            if len(data) != size:
                logger.error(f'member \'{header.filename}\' is truncated')
                raise UnpackException(chain=['data'])

            if size % 2 == 1:
                self.stream.read_exactly(1)

            yield ArMember(header, data)

    def members(self):
        return list(self)
