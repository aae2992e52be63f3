from enum import Flag


class Compliant(Flag):
    '''How strictly the data being unpacked must follow the format.

     - ENUM: a value not present in the enum of a field is an error
     - MAGIC: a wrong magic (or a failed validate()) is an error
     - INHERIT: look also at the enclosing chunk
    '''
    NONE    = 0
    ENUM    = 1 << 0
    MAGIC   = 1 << 1
    INHERIT = 1 << 2
