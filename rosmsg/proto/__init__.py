"""ROSMSG encoding, decoding and framing."""

from .budget import MAX_LENGTH as MAX_LENGTH
from .budget import ByteBudget as ByteBudget
from .decoder import Decoder as Decoder
from .encoder import Encoder as Encoder
from .errors import *
from .framing import Framer as Framer
from .framing import from_bytes as from_bytes
from .framing import from_reader as from_reader
from .framing import from_str as from_str
from .framing import to_bytes as to_bytes
from .framing import to_writer as to_writer
from .schema import Char as Char
from .schema import rosmsg_field as rosmsg_field
from .schema import struct_type as struct_type
from .schema import type_for as type_for
from .serialization import Struct as Struct
from .types import *
