'''
The specification document describing a package, in JSON

    {
        "Control": {
            "Package": "hello",
            "Version": "1.0",
            "Architecture": "amd64",
            "Maintainer": "Someone <someone@example.com>",
            "Description": "says hello"
        },
        "Files": [
            {"Name": "build/hello", "Dest": "/usr/bin/hello", "Mode": "0755", "Uid": 0, "Gid": 0}
        ]
    }

"Mode" is an octal string and defaults to "0644", "Uid" and "Gid" default to zero.
'''
import json
import logging
import os
import re
from typing import Dict, List

from ..exceptions import (
    SpecParseError,
    MissingControlKey,
    FileReadError,
    InvalidMode,
)


logger = logging.getLogger(__name__)

REQUIRED_CONTROL_KEYS = ('Package', 'Version', 'Architecture')

OCTAL_RE = re.compile(r'^[0-7]+$')


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


class FileEntry(object):
    '''A payload file: where it's now (name) and where it will be installed (dest).'''

    def __init__(self, name, dest, mode='0644', uid=0, gid=0):
        self.name = name
        self.dest = dest
        self.mode = mode
        self.uid = uid
        self.gid = gid

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name!r} -> {self.dest!r}, mode={self.mode})>'

    @classmethod
    def from_dict(cls, obj, index=0):
        if not isinstance(obj, dict):
            raise SpecParseError(f'Files[{index}] must be an object')

        for key in ('Name', 'Dest'):
            if not isinstance(obj.get(key), str) or not obj[key]:
                raise SpecParseError(f'Files[{index}].{key} must be a non empty string')

        for key in ('Uid', 'Gid'):
            if key in obj and not _is_int(obj[key]):
                raise SpecParseError(f'Files[{index}].{key} must be an integer')

        return cls(
            obj['Name'],
            obj['Dest'],
            mode=obj.get('Mode', '0644'),
            uid=obj.get('Uid', 0),
            gid=obj.get('Gid', 0),
        )

    @property
    def permissions(self) -> int:
        '''The mode as integer'''
        if not isinstance(self.mode, str) or not OCTAL_RE.match(self.mode):
            raise InvalidMode(self.mode, self.name)

        return int(self.mode, 8)

    def read(self) -> bytes:
        try:
            with open(self.name, 'rb') as f:
                return f.read()
        except OSError as e:
            raise FileReadError(self.name, e.strerror or str(e)) from e

    def modification_time(self) -> int:
        try:
            return int(os.stat(self.name).st_mtime)
        except OSError as e:
            raise FileReadError(self.name, e.strerror or str(e)) from e


class Specification(object):
    '''What goes into a package: control metadata and payload files.'''

    def __init__(self, control: Dict[str, str], files: List[FileEntry] = None):
        self.control = control
        self.files = files or []

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.package}_{self.version}, {len(self.files)} files)>'

    @classmethod
    def from_dict(cls, document):
        if not isinstance(document, dict):
            raise SpecParseError('the specification must be an object')

        control = document.get('Control')
        if not isinstance(control, dict):
            raise SpecParseError('Control must be an object')

        for key, value in control.items():
            if not isinstance(value, str):
                raise SpecParseError(f'Control.{key} must be a string')

        files = document.get('Files')
        if files is None:
            files = []
        if not isinstance(files, list):
            raise SpecParseError('Files must be a list')

        return cls(dict(control), [FileEntry.from_dict(_, index=idx) for idx, _ in enumerate(files)])

    @classmethod
    def from_path(cls, path):
        try:
            with open(path, 'rb') as f:
                document = json.load(f)
        except OSError as e:
            raise SpecParseError(f'unable to read \'{path}\': {e.strerror or e}') from e
        except ValueError as e:
            raise SpecParseError(f'\'{path}\' is not a valid JSON document: {e}') from e

        return cls.from_dict(document)

    @classmethod
    def load(cls, config):
        '''Parse the specification indicated by the configuration, apply its
        overrides and validate the result.'''
        logger.debug('loading specification from \'%s\'' % config.spec)

        spec = cls.from_path(config.spec)
        spec.apply(config)
        spec.validate()

        return spec

    def apply(self, config):
        if config.version:
            logger.info(f'overriding version {self.control.get("Version")!r} with {config.version!r}')
            self.control['Version'] = config.version

    def validate(self):
        for key in REQUIRED_CONTROL_KEYS:
            if key not in self.control:
                raise MissingControlKey(key)

    @property
    def package(self):
        return self.control.get('Package')

    @property
    def version(self):
        return self.control.get('Version')

    @property
    def architecture(self):
        return self.control.get('Architecture')

    @property
    def filename(self):
        '''The canonical name of the package file'''
        return '%s_%s_%s.deb' % (self.package, self.version, self.architecture)
