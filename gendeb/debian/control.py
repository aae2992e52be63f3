'''
The control file: the metadata of the package as "Key: value" lines, see
deb-control(5).

The fields are written in the order they have in the specification document
so the same document produces always the same control file.
'''
from typing import Dict


def render_control(control: Dict[str, str]) -> bytes:
    '''One "key: value" line for each entry; no escaping is done so a value
    containing a newline must already be formatted as a continuation line.'''
    text = ''.join('%s: %s\n' % (key, value) for key, value in control.items())

    return text.encode('utf-8')


def parse_control(data) -> Dict[str, str]:
    '''Read back a single paragraph of control data.

    Continuation lines (starting with space or tab) are appended to the value
    of the previous field.'''
    text = data.decode('utf-8') if isinstance(data, bytes) else data

    control = {}
    key = None
    for line in text.splitlines():
        if not line.strip():
            continue

        if line[0] in ' \t':
            if key is None:
                raise ValueError(f'continuation line without a field: {line!r}')
            control[key] += '\n' + line
            continue

        key, sep, value = line.partition(':')
        if not sep:
            raise ValueError(f'malformed control line: {line!r}')

        key = key.strip()
        control[key] = value.strip()

    return control
