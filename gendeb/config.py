'''
Configuration of a build.

Everything the driver resolves (command line, environment) ends up in a
BuildConfig that is passed explicitly to the loader and to the assembler.
'''
import os
import logging


logger = logging.getLogger(__name__)


class BuildConfig(object):
    '''
     - spec: path of the specification document
     - version: if not None replaces the Version of the control metadata
     - output: if not None replaces the filename derived from the control metadata
     - mtime: timestamp used for every member of the package; if None the
       payload files keep their own modification time and the rest uses zero
     - compression_level: from 1 (fastest) to 9 (smallest)
    '''

    def __init__(self, spec=None, version=None, output=None, mtime=None, compression_level=9):
        self.spec = spec
        self.version = version or None
        self.output = output or None
        self.mtime = mtime
        self.compression_level = compression_level

    def __repr__(self):
        return '<%s(spec=%r, version=%r, output=%r, mtime=%r)>' % (
            self.__class__.__name__,
            self.spec,
            self.version,
            self.output,
            self.mtime,
        )

    @classmethod
    def from_environ(cls, spec, version=None, output=None, environ=None, **kwargs):
        '''Honors SOURCE_DATE_EPOCH <https://reproducible-builds.org/specs/source-date-epoch/>.'''
        environ = os.environ if environ is None else environ

        mtime = None
        epoch = environ.get('SOURCE_DATE_EPOCH')
        if epoch:
            try:
                mtime = int(epoch)
            except ValueError:
                logger.warning(f'ignoring invalid SOURCE_DATE_EPOCH={epoch!r}')

        return cls(spec=spec, version=version, output=output, mtime=mtime, **kwargs)

    @property
    def archive_mtime(self):
        '''Timestamp for the members that don't come from a file'''
        return self.mtime if self.mtime is not None else 0
