'''
defined the option descriptors and the conversion tags used to bind command options.
'''
from argparse import Action, Namespace
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, List, NewType, Optional

from .errors import InvalidBindingError

Float32 = NewType('Float32', float)
DateTimeOffset = NewType('DateTimeOffset', datetime)


def is_shortcut(name: str) -> bool:
    '''
        Check whether the option name is a shortcut.

        Args:
            - name: `str`, the name of option.

        Returns:
            True if the name is a shortcut option, otherwise False.
    '''
    if '_' in name or len(name) > 1:
        return False

    return True


class OptionKind(Enum):
    '''
        The value arity of a command option.

        - Flag: no value, the option is either present or not.
        - Single: one value.
        - Multiple: repeatable, one value per occurrence.
    '''
    Flag = 'flag'
    Single = 'single'
    Multiple = 'multiple'


class ConvertType(Enum):
    '''
        The closed set of types the conversion registry converts raw strings into.

        The value of each member is the name used to describe the type to the user.
    '''
    String = 'string'
    Boolean = 'boolean'
    Int32 = 'integer'
    Double = 'double'
    Single = 'float'
    Uuid = 'uuid'
    DateTime = 'datetime'
    DateTimeOffset = 'datetime with offset'
    TimeSpan = 'timespan'


@dataclass(frozen=True)
class TargetType:
    '''
        A conversion tag together with its nullability.

        A nullable target converts an empty or missing raw value to `None` instead of
        parsing it.
    '''
    kind: ConvertType
    nullable: bool = False

    def __str__(self) -> str:
        return self.kind.value + ('?' if self.nullable else '')


@dataclass
class OptionDescriptor:
    '''
        The template, description and kind identifying one command-line option.

        Attributes:
        - template (str):
            The option template, e.g. `-n|--number <value>` or `-g|--greet`.
        - description (str):
            The help text of the option.
        - kind (OptionKind):
            The value arity of the option.
    '''
    template: str
    description: str = ''
    kind: OptionKind = OptionKind.Single

    def __post_init__(self):
        if not self.template or not self.template.strip():
            raise InvalidBindingError('The option template must not be empty.')
        if self.kind is OptionKind.Flag and self._placeholder is not None:
            raise InvalidBindingError(
                f'The flag option "{self.template}" cannot take a value.'
            )

    @property
    def _names(self) -> List[str]:
        names = self.template.split(None, 1)[0]
        return [name for name in names.split('|') if name]

    @property
    def _placeholder(self) -> Optional[str]:
        parts = self.template.split(None, 1)
        if len(parts) < 2:
            return None
        return parts[1].strip()

    @property
    def options(self) -> List[str]:
        final_options = []
        for name in self._names:
            if name.startswith('-'):
                final_options.append(name)
            elif is_shortcut(name):
                final_options.append('-' + name)
            else:
                final_options.append('--' + name)

        return final_options

    @property
    def metavar(self) -> Optional[str]:
        if self.kind is OptionKind.Flag:
            return None
        placeholder = self._placeholder
        if placeholder is None:
            return 'value'
        return placeholder.strip('<>') or 'value'

    @property
    def long_name(self) -> str:
        options = self.options
        for option in options:
            if option.startswith('--'):
                return option[2:]
        return options[0].lstrip('-')


class CommandOption:
    '''
        The option object produced by the parsing engine for one descriptor.

        Wraps the argparse action registered for the descriptor. Once the command line is
        parsed, the option is bound to the resulting namespace and exposes the raw
        value(s) in the shape its kind dictates.
    '''

    def __init__(self, descriptor: OptionDescriptor, action: Action) -> None:
        self.descriptor = descriptor
        self.action = action
        self._namespace: Optional[Namespace] = None

    @property
    def option_type(self) -> OptionKind:
        return self.descriptor.kind

    @property
    def template(self) -> str:
        return self.descriptor.template

    @property
    def long_name(self) -> str:
        return self.descriptor.long_name

    def bind(self, namespace: Namespace) -> None:
        self._namespace = namespace

    def _raw(self) -> Any:
        if self._namespace is None:
            return None
        return getattr(self._namespace, self.action.dest, None)

    def value(self) -> Optional[str]:
        return self._raw()

    @property
    def values(self) -> List[str]:
        raw = self._raw()
        if raw is None:
            return []
        return list(raw)

    def has_value(self) -> bool:
        return bool(self._raw())

    def __repr__(self) -> str:
        return f'CommandOption({self.template!r}, {self.option_type.name})'
