'''
Bind command-line options to the attributes of a command before it executes.
'''
from .binding import OptionBinding
from .command import Command
from .errors import (
    BindingError,
    BindingTypeMismatchError,
    ConversionError,
    InvalidBindingError,
    NoConverterError,
    OptionValidationError,
)
from .parser import CommandApplication, add_command, execute
from .types import ConvertType, DateTimeOffset, Float32, OptionKind
