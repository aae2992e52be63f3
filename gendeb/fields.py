"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable without need for relayouting.

The archive formats we care about mix two kinds of encodings: binary integers
(gzip) and integers written as ASCII digits into fixed width slots (ar and tar),
so here we have a field for each one.
"""
import logging
import struct
from enum import Enum, auto

from .enum import Compliant
from .meta import FieldBase
from .exceptions import UnpackException, MagicException


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None, offset=None, \
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic
        self._value = None

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def is_compliant(self, level):
        '''Returns True if this field or (via INHERIT) one of its fathers requires
        the given level of compliance.'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def __set_offset(self, value):
        self.__offset = value

    def __get_offset(self):
        return self.__offset

    offset = property(__get_offset, __set_offset)

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}_get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError()

    def _set_raw(self, value) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}._set_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    def relayout(self, offset=0):
        self.offset = offset

        return self.size

    def _update_value(self):
        '''This is used to update the binary value before packing'''
        pass

    def pack(self, stream=None, relayout=True):
        '''Encode the field, writing it into the stream if one is passed.

        This operation is not idempotent for fields that calculate their value
        from other fields (see _update_value()).'''
        if relayout:
            self.relayout(offset=self.offset or 0)

        self._update_value()
        raw = self.raw

        if stream is not None:
            stream.write(raw)

        return raw

    def _check_magic(self):
        if self.is_magic and self.value != self.value_from_default():
            self.logger.warning(f'the magic for field \'{self.name}\' doesn\'t correspond: {self.value!r}')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(chain=[])

    def unpack(self, stream):
        raw = stream.read_exactly(self.size)
        if len(raw) != self.size:
            self.logger.error(f'field \'{self.name}\' needs {self.size} bytes, only {len(raw)} available')
            raise UnpackException(chain=[])

        self.raw = raw
        self._check_magic()


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

        return f'<{self.__class__.__name__}({self.value!r})>'

    def __str__(self):
        width = self.size * 2  # we want to be as large as possible
        formatter = '0x%%0%dx' % width
        return formatter % (self.value if not self.enum else self.value.value,)

    def value_from_default(self):
        if not self.enum:
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _set_value(self, value) -> None:
        if self.enum and not isinstance(value, self.enum):
            value = self.enum(value)

        self._value = value

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), getattr(self.value, 'value', self.value))

    def _set_raw(self, raw: bytes) -> None:
        self._value = self._unpack(raw)

    def _unpack_struct(self, value: bytes) -> int:
        try:
            unpacked_value = struct.unpack(self.get_format(), value)[0]
        except struct.error as e:
            self.logger.error(e)
            exc = MagicException if self.is_compliant(Compliant.MAGIC) else UnpackException
            raise exc(chain=[]) from e

        return unpacked_value

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise UnpackException(chain=[])

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

            return value

    def _unpack(self, raw):
        value = self._unpack_struct(raw)
        if self.enum:
            value = self._unpack_enum(value)

        return value


class StringField(Field):
    """Represent a contiguous chunk of bytes."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n or len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        if len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        self._value = value

    def _get_raw(self):
        return self.value

    def _set_raw(self, raw):
        self.value = raw


class PaddedStringField(StringField):
    """Text stored into a fixed number of bytes, padded at the end.

    A value too long for the field is truncated (and we complain about it)."""

    def __init__(self, n, padding=b'\x00', encoding='ascii', **kw):
        self.padding = padding
        self.encoding = encoding
        kw.setdefault('default', '')
        super().__init__(n=n, **kw)

    def value_from_default(self):
        return self.default

    def _set_value(self, value) -> None:
        encoded = value.encode(self.encoding)
        if len(encoded) > self.length:
            self.logger.warning(f'value {value!r} truncated to {self.length} bytes for field \'{self.name}\'')
            value = encoded[:self.length].decode(self.encoding, 'ignore')

        self._value = value

    def _get_raw(self):
        return self.value.encode(self.encoding).ljust(self.length, self.padding)

    def _set_raw(self, raw):
        if self.padding == b'\x00':
            raw = raw.split(b'\x00', 1)[0]
        else:
            raw = raw.rstrip(self.padding)

        try:
            self._value = raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            self.logger.error(e)
            raise UnpackException(chain=[]) from e


class IntegerStringField(Field):
    """An integer written as ASCII digits into a fixed number of bytes.

    Archive formats born on tapes love these: the ar(1) header uses decimal
    numbers padded with spaces, tar(1) uses octal numbers padded with zeros
    and terminated by NUL.
    """

    def __init__(self, n, base=10, fill=' ', align='left', terminator=b'', default=0, **kw):
        self.length = n
        self.base = base
        self.fill = fill
        self.align = align
        self.terminator = terminator
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._format_digits(self.value))

    @property
    def width(self):
        '''Number of digits available'''
        return self.length - len(self.terminator)

    def _format_digits(self, value) -> str:
        return format(value, 'o' if self.base == 8 else 'd')

    def encode(self, value) -> bytes:
        digits = self._format_digits(value)

        if len(digits) > self.width:
            raise ValueError(f'value {value} doesn\'t fit into {self.width} digits (field \'{self.name}\')')

        digits = digits.rjust(self.width, self.fill) if self.align == 'right' else digits.ljust(self.width, self.fill)

        return digits.encode('ascii') + self.terminator

    def decode(self, raw) -> int:
        text = raw.decode('ascii').strip(' \x00')

        return int(text, self.base) if text else 0

    def _set_value(self, value) -> None:
        if not isinstance(value, int) or value < 0:
            raise ValueError(f'field \'{self.name}\' accepts only non negative integers, not {value!r}')

        self.encode(value)  # check it fits

        self._value = value

    def _get_size(self):
        return self.length

    def _get_raw(self) -> bytes:
        return self.encode(self.value)

    def _set_raw(self, raw: bytes) -> None:
        try:
            self._value = self.decode(raw)
        except (UnicodeDecodeError, ValueError) as e:
            self.logger.error(f'field \'{self.name}\' has not a valid number: {raw!r}')
            raise UnpackException(chain=[]) from e
