import pytest

from gendeb.core import Chunk
from gendeb.enum import Compliant
from gendeb.exceptions import ChunkUnpackException, MagicException
from gendeb.fields import StructField, StringField, PaddedStringField, IntegerStringField


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = IntegerStringField(6, default=42)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.size == 6
    assert dummy.c.raw == b'42    '
    assert dummy.c.offset == 0x14

    assert dummy.size == 0x1a
    assert dummy.layout == {
        'a': (0, 4),
        'b': (4, 16),
        'c': (20, 6),
    }
    assert len(dummy.raw) == dummy.size
    assert dummy.pack() == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'42    '
    )


def test_chunk_instances_are_independent():
    class Dummy(Chunk):
        a = StructField('I')

    first, second = Dummy(), Dummy()
    first.a.value = 1

    assert first.a is not second.a
    assert second.a.value == 0


def test_chunk_set_value_via_attribute():
    class Dummy(Chunk):
        a = IntegerStringField(4)

    dummy = Dummy()
    dummy.a = 12

    assert dummy.a.value == 12
    assert dummy.raw == b'12  '


def test_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x10)
        field_b = StructField("I")

    class Son(Father):
        field_c = StringField(0x08)

    son = Son(b'A' * 16 + b'\x01\x02\x03\x04' + b'ABCDEFGH')

    assert [_ for _, __ in son.get_fields()] == ['field_a', 'field_b', 'field_c']
    assert son.field_b.value == 0x04030201
    assert son.field_c.value == b'ABCDEFGH'


class Record(Chunk):
    magic  = StringField(2, default=b'MZ', is_magic=True)
    length = IntegerStringField(4, base=8, fill='0', align='right')
    label  = PaddedStringField(8, padding=b' ')


def test_unpack():
    record = Record(b'MZ0755hello   ')

    assert record.magic.value == b'MZ'
    assert record.length.value == 0o755
    assert record.label.value == 'hello'
    assert record.label.offset == 6
    assert record.pack() == b'MZ0755hello   '


def test_unpack_wrong_magic():
    # not compliant: we only complain about it
    record = Record(b'XX0755hello   ')
    assert record.magic.value == b'XX'

    with pytest.raises(MagicException) as exc:
        Record(b'XX0755hello   ', compliant=Compliant.MAGIC)

    assert exc.value.chain == ['magic']


def test_unpack_truncated():
    with pytest.raises(ChunkUnpackException) as exc:
        Record(b'MZ07')

    assert exc.value.chain == ['length']


def test_validate_hook():
    class Validated(Chunk):
        number = IntegerStringField(2)

        def validate(self):
            return self.number.value < 50

    assert Validated(b'42').number.value == 42
    assert Validated(b'99').number.value == 99

    with pytest.raises(MagicException):
        Validated(b'99', compliant=Compliant.MAGIC)
