import io
import logging


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/path/file objects to
    uniform its properties: mainly we need to read a fixed amount of
    data and to know where we are.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self._owned = False
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._type.__name__})>'

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb')
        self._owned = True

    def init_PosixPath(self):
        self.obj = str(self.obj)
        self.init_str()

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_file(self):
        '''Anything else must already behave like a binary file object'''
        if not hasattr(self.obj, 'read'):
            raise ValueError('\'%s\' is not something we can read from' % self.obj.__class__.__name__)

    def read_exactly(self, size):
        '''Read exactly "size" bytes, returns less only at the end of the stream.'''
        chunks = []
        missing = size
        while missing > 0:
            data = self.obj.read(missing)
            if not data:
                break
            chunks.append(data)
            missing -= len(data)

        return b''.join(chunks)

    def read_all(self):
        '''Returns all the data from the actual position to the end of the stream.'''
        return self.obj.read()

    def write(self, data):
        return self.obj.write(data)

    def close(self):
        if self._owned:
            self.obj.close()
