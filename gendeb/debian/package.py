'''
# Debian binary package

A .deb file is an ar archive with three members in this exact order

 1. debian-binary: the version of the format, "2.0\\n"
 2. control.tar.gz: the control file plus the md5sums of the payload
 3. data.tar.gz: the payload, each file at the path it will be installed to

dpkg finds the version marker by position, so the order is not negotiable.
See deb(5).

The two tar archives are built in memory, then the package is written to a
temporary file in the destination directory and renamed into place only when
everything went fine.
'''
import io
import logging
import os
import tempfile

from ..config import BuildConfig
from ..archives.ar import ArReader, ArWriter
from ..archives.tar import TarReader, TarWriter
from ..common.digest import md5sum
from ..compression import gzip
from ..exceptions import OutputWriteError, StreamWriteError
from .control import render_control, parse_control
from .md5sums import Md5sums, parse_md5sums
from .spec import Specification


logger = logging.getLogger(__name__)

DEBIAN_BINARY = b'2.0\n'
MEMBER_NAMES = ('debian-binary', 'control.tar.gz', 'data.tar.gz')
MEMBER_MODE = 0o100644
CONTROL_MODE = 0o644


class DebPackage(object):
    '''Assemble a package from a Specification.

        package = DebPackage(spec, config)
        path = package.write()
    '''

    def __init__(self, spec: Specification, config: BuildConfig = None):
        self.spec = spec
        self.config = config or BuildConfig()
        self.md5sums = Md5sums()
        self.control = None
        self.data = None

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.filename!r})>'

    @property
    def filename(self):
        '''The output override if any, otherwise <Package>_<Version>_<Architecture>.deb'''
        return self.config.output or self.spec.filename

    def _open(self, buffer):
        compressor = gzip.GzipWriter(buffer, level=self.config.compression_level, mtime=self.config.archive_mtime)
        return compressor, TarWriter(compressor, mtime=self.config.archive_mtime)

    def _add_file(self, tar, entry):
        content = entry.read()
        mode = entry.permissions
        mtime = self.config.mtime if self.config.mtime is not None else entry.modification_time()

        tar.write_entry(
            entry.dest,
            content,
            mode=mode,
            uid=entry.uid,
            gid=entry.gid,
            size=len(content),
            mtime=mtime,
        )

        digest = self.md5sums.add(entry.dest, content)

        logger.debug('added \'%s\' as \'%s\' (%d bytes, md5 %s)' % (entry.name, entry.dest, len(content), digest))

    def build(self):
        '''Build control.tar.gz and data.tar.gz, returns them as a couple of bytes.

        The md5sums can be appended to the control archive only when all the
        payload files have been processed.'''
        control_buffer, data_buffer = io.BytesIO(), io.BytesIO()

        control_gz, control_tar = self._open(control_buffer)
        control_tar.write_entry('./control', render_control(self.spec.control), mode=CONTROL_MODE)

        self.md5sums = Md5sums()
        data_gz, data_tar = self._open(data_buffer)
        for entry in self.spec.files:
            self._add_file(data_tar, entry)

        control_tar.write_entry('./md5sums', self.md5sums.raw, mode=CONTROL_MODE)

        control_tar.finalize()
        control_gz.close()
        data_tar.finalize()
        data_gz.close()

        self.control = control_buffer.getvalue()
        self.data = data_buffer.getvalue()

        logger.debug('control.tar.gz is %d bytes, data.tar.gz is %d bytes' % (len(self.control), len(self.data)))

        return self.control, self.data

    def members(self):
        if self.control is None or self.data is None:
            self.build()

        return zip(MEMBER_NAMES, (DEBIAN_BINARY, self.control, self.data))

    def write_to(self, fileobj):
        '''Write the whole package into an open binary file object.'''
        with ArWriter(fileobj) as ar:
            for name, data in self.members():
                ar.write_header(name, len(data), mode=MEMBER_MODE, mtime=self.config.archive_mtime)
                ar.write(data)

    def write(self, path=None):
        '''Write the package to path (by default the one from filename) and
        returns it. If something goes wrong nothing is left at path.'''
        path = path or self.filename

        # the archives must be complete before touching the filesystem
        members = list(self.members())

        directory = os.path.dirname(os.path.abspath(path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix='.%s.' % os.path.basename(path), dir=directory)
        except OSError as e:
            raise OutputWriteError(path, e.strerror or str(e)) from e

        try:
            try:
                with os.fdopen(fd, 'wb') as f:
                    self.write_to(f)
                os.chmod(tmp_path, 0o644)
                os.replace(tmp_path, path)
            except OSError as e:
                raise OutputWriteError(path, e.strerror or str(e)) from e
            except StreamWriteError as e:
                raise OutputWriteError(path, str(e)) from e
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info('wrote %s (%s)' % (path, ', '.join('%s: %d bytes' % (name, len(data)) for name, data in members)))

        return path


def generate(config: BuildConfig) -> str:
    '''Load the specification indicated by config and write the package,
    returns the path of the package.'''
    spec = Specification.load(config)

    return DebPackage(spec, config).write()


class DebFile(object):
    '''Read back a package, mainly to inspect what we have built.'''

    def __init__(self, data):
        '''data is the content of the package or its path'''
        if isinstance(data, (str, os.PathLike)):
            with open(data, 'rb') as f:
                data = f.read()

        self.members = ArReader(data).members()
        self.control_entries = TarReader(gzip.decompress(self.member('control.tar.gz').data)).entries()
        self.data_entries = TarReader(gzip.decompress(self.member('data.tar.gz').data)).entries()

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.names})>'

    @property
    def names(self):
        return [_.name for _ in self.members]

    def member(self, name):
        for member in self.members:
            if member.name == name:
                return member

        raise KeyError(name)

    def control_entry(self, name):
        for entry in self.control_entries:
            if entry.name == name:
                return entry

        raise KeyError(name)

    @property
    def debian_binary(self) -> bytes:
        return self.member('debian-binary').data

    @property
    def control(self):
        return parse_control(self.control_entry('./control').content)

    @property
    def md5sums(self):
        return parse_md5sums(self.control_entry('./md5sums').content)

    def validate(self):
        '''The members must be the expected ones, in the expected order.'''
        return tuple(self.names) == MEMBER_NAMES and self.debian_binary == DEBIAN_BINARY

    def verify(self):
        '''Returns the names of the payload files whose digest doesn't match md5sums.'''
        md5sums = self.md5sums

        return [_.name for _ in self.data_entries if md5sums.get(_.name) != md5sum(_.content)]
