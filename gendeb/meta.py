'''
Machinery that turns the fields declared in the body of a Chunk subclass into
per-instance objects, remembering the order of declaration.
'''
import copy
import logging


logger = logging.getLogger(__name__)


class FieldDescriptor(object):
    """Gives each chunk instance its own copy of a declared field."""

    def __init__(self, field, name):
        self.field = field
        self.field.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        name = self.field.name
        if name not in instance.__dict__:
            instance.__dict__[name] = self.field.create(father=instance)

        return instance.__dict__[name]

    def __set__(self, instance, value):
        # a field replaces the declared one, anything else is its new value
        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            instance.__dict__[self.field.name] = value
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if name in cls.__dict__:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class MetaChunk(type):
    '''Collects the fields of the class body (and of the parent chunks) into
    the "_fields" list, in order.'''

    def __new__(mcs, name, bases, attrs):
        declared = {key: value for key, value in attrs.items() if isinstance(value, FieldBase)}
        for key in declared:
            del attrs[key]

        cls = super().__new__(mcs, name, bases, attrs)
        cls._fields = []

        for parent in bases:
            for field_name in getattr(parent, '_fields', []):
                if field_name not in cls._fields:
                    cls._fields.append(field_name)

        for field_name, field in declared.items():
            logger.debug('field \'%s\' for chunk \'%s\'' % (field_name, name))
            if field_name in cls._fields:
                # redefinition of a field of the parent
                setattr(cls, field_name, FieldDescriptor(field, field_name))
                continue

            field.contribute_to_chunk(cls, field_name)
            cls._fields.append(field_name)

        return cls
