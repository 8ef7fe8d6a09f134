"""rosmsg - Codec for the ROS1 ROSMSG wire format."""

from importlib.metadata import PackageNotFoundError, version

from .proto import *

try:
    __version__ = version("rosmsg")
except PackageNotFoundError:
    __version__ = "(local)"
