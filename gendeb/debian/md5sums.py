'''
The md5sums control file: one line "<md5 in hex>  <path>" for each payload file.
'''
from typing import Dict

from ..common.digest import md5sum


class Md5sums(object):
    '''Accumulate the digests in the order the files are added.'''

    def __init__(self):
        self.lines = []

    def __len__(self):
        return len(self.lines)

    def add(self, path, data) -> str:
        digest = md5sum(data)
        self.lines.append('%s  %s\n' % (digest, path))

        return digest

    @property
    def raw(self) -> bytes:
        return ''.join(self.lines).encode('utf-8')


def parse_md5sums(data) -> Dict[str, str]:
    '''Returns the mapping path -> digest'''
    text = data.decode('utf-8') if isinstance(data, bytes) else data

    result = {}
    for line in text.splitlines():
        if not line:
            continue

        digest, sep, path = line.partition('  ')
        if not sep:
            raise ValueError(f'malformed md5sums line: {line!r}')

        result[path] = digest

    return result
