'''
Content digests used by the md5sums control file.

dpkg uses the md5sums file only to check the integrity of the installed files
(see debsums(1)), it's not a security measure so MD5 is still what is expected.
'''
import hashlib


def md5sum(data: bytes) -> str:
    '''Returns the MD5 digest of data as lowercase hexadecimal text.'''
    return hashlib.md5(data).hexdigest()
