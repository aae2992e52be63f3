class GendebException(Exception):
    '''Base class to extend in order to throw exception in gendeb.'''
    pass


class FormatException(GendebException):
    '''Base class for the errors raised while decoding a binary format.

    It takes a single argument that represents the chain of the layer that
    caused the exception, innermost first.
    '''

    def __init__(self, chain):
        self.chain = chain
        super().__init__('.'.join(reversed(chain)))


class UnpackException(FormatException):
    pass


class MagicException(FormatException):
    pass


class ChunkUnpackException(FormatException):
    pass


class BuildException(GendebException):
    '''Base class for the errors that abort a package build.

    The attribute "step" names the phase of the build that failed so that
    the driver can report it.'''
    step = 'build'


class SpecParseError(BuildException):
    step = 'load'


class MissingControlKey(BuildException):
    step = 'load'

    def __init__(self, key):
        self.key = key
        super().__init__(f'missing required control key: {key}')


class FileReadError(BuildException):
    step = 'data'

    def __init__(self, path, reason=None):
        self.path = path
        msg = f'unable to read \'{path}\''
        if reason:
            msg += f': {reason}'
        super().__init__(msg)


class InvalidMode(BuildException):
    step = 'data'

    def __init__(self, mode, path=None):
        self.mode = mode
        self.path = path
        msg = f'invalid octal mode {mode!r}'
        if path:
            msg += f' for \'{path}\''
        super().__init__(msg)


class StreamWriteError(BuildException):
    step = 'archive'


class CompressionError(BuildException):
    step = 'compress'


class OutputWriteError(BuildException):
    step = 'output'

    def __init__(self, path, reason=None):
        self.path = path
        msg = f'unable to write \'{path}\''
        if reason:
            msg += f': {reason}'
        super().__init__(msg)
