"""
# gendeb: Debian binary packages from a declarative specification.

A Debian package is three binary formats nested into each other

 1. an "ar" archive containing three members in a fixed order:
    debian-binary, control.tar.gz and data.tar.gz
 2. gzip streams wrapping the two tar archives
 3. tar archives containing the control metadata and the payload

Each header of these formats is described declaratively as a Chunk made of
Fields, the same way a struct is described in C. Two basic operations are
defined for a Chunk and its fields:

 1. pack(): encode the high-level representation into binary data.

 2. unpack(): read binary data from a stream and build the high-level
    representation of it.

to these we add one more

 3. relayout(): recalculate offset and size of each field, it's implied
    by a packing unless indicated otherwise.

The package assembly itself lives in gendeb.debian.package.
"""
