from .spec import Specification, FileEntry, REQUIRED_CONTROL_KEYS
from .package import DebPackage, DebFile, generate
