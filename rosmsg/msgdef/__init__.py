"""ROS message definition parsing."""

from .compiler import BUILTIN_TYPES as BUILTIN_TYPES
from .compiler import TypeCompiler as TypeCompiler
from .compiler import compile_definition as compile_definition
from .compiler import compile_type as compile_type
from .parser import DefinitionError as DefinitionError
from .parser import parse as parse
from .parser import parse_type as parse_type
from .types import *
