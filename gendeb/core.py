"""
Core module for the abstraction of a binary header

"""
from typing import Tuple, List, Dict

from .fields import Field
from .enum import Compliant
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
    MagicException,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    The fields are declared as class attributes and are packed/unpacked in the
    order of declaration.

    If some data is passed to the constructor (bytes, a path or a Stream) the
    chunk is unpacked from it, otherwise the fields are initialized with their
    defaults.
    """

    def __init__(self, data=None, **kwargs):
        self.stream = None
        if data is not None:
            self.stream = data if isinstance(data, Stream) else Stream(data)

        super().__init__(**kwargs)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if self.stream is not None:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, self.stream))
            self.unpack(self.stream)
        else:
            self.relayout()

    def get_ordered_fields_name(self) -> List[str]:
        return self._fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return {name: field.value for name, field in self.get_fields()}

    def _set_value(self, value):
        '''Chunks have not a value by themselves, it's the union of the values of their fields.'''
        if value is None:
            return

        for name, field_value in value.items():
            getattr(self, name).value = field_value

    def _get_size(self):
        '''the size parameter MUST not be set but MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields():
            size += field.size

        return size

    def _get_raw(self):
        value = b''
        for field_name, field_instance in self.get_fields():
            value += field_instance.raw

        return value

    def _set_raw(self, raw):
        self.unpack(Stream(raw))

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset the offsets.

        In practice it's like packing() but it's only interested in the sizes
        of the chunks.'''
        self.offset = offset

        size = 0
        for field_name, field_instance in self.get_fields():
            size += field_instance.relayout(offset=offset + size)

        return size

    def _update_value(self):
        for _, field in self.get_fields():
            field._update_value()

    def pack(self, stream=None, relayout=True):
        '''Encode the chunk, fields that depend on other fields (like checksums)
        are updated before the encoding.

        The raw data is returned and, if a stream is passed, also written into it.'''
        if relayout:
            self.relayout(offset=self.offset or 0)

        self._update_value()

        value = self.raw

        self.logger.debug('packed %s: %d bytes' % (self.__class__.__name__, len(value)))

        if stream is not None:
            stream.write(value)

        return value

    def unpack(self, stream):
        '''Take binary data from the stream, starting from its actual position,
        and fill each field in order of declaration.

        If the chunk defines a method validate() it's called at the end and
        a failure is fatal only if the chunk must be compliant with the magic.
        '''
        for field_name, field in self.get_fields():
            offset = stream.tell()

            try:
                field.unpack(stream)
            except MagicException as e:
                raise MagicException(chain=e.chain + [field_name]) from e
            except (UnpackException, ChunkUnpackException) as e:
                raise ChunkUnpackException(chain=e.chain + [field_name]) from e

            field.offset = offset

        if hasattr(self, 'validate'):
            ret = self.validate()
            if not ret:
                self.logger.warning(f'validation for \'{self.__class__.__name__}\' failed')
                if self.is_compliant(Compliant.MAGIC):
                    raise MagicException(chain=[])
