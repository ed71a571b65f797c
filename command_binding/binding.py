'''
bind one declared command option to one attribute of a command instance.
'''
import inspect
import logging
from functools import partial
from typing import Any, Callable, Optional, Tuple, get_type_hints

from .errors import (
    BindingError,
    BindingTypeMismatchError,
    ConversionError,
    InvalidBindingError,
    OptionValidationError,
)
from .types import CommandOption, OptionKind
from .utils import is_assignable

logger = logging.getLogger(__name__)

Validator = Callable[[Any], Optional[str]]


def resolve_setter(command: Any,
                   setter: Any) -> Tuple[Callable[[Any], None], Any]:
    '''
        Resolve the setter of a binding once, at declaration time.

        Parameters:
        - command (`Any`): the instance owning the attribute.
        - setter (`Union[str, Callable]`):
            Either the name of an attribute (or property with a setter) of `command`,
            or a callable taking the value to assign.

        Returns:
        - `Tuple[Callable, Any]`: the write function and the annotated type of the
            attribute (`None` when unknown).

        Raises:
        - `InvalidBindingError`: if the setter is not a writable attribute.
    '''
    if setter is None:
        raise InvalidBindingError('The setter of a binding must not be None.')
    if callable(setter):
        return setter, None
    if not isinstance(setter, str) or not setter.isidentifier():
        raise InvalidBindingError(
            f'The setter {setter!r} is neither an attribute name nor a callable.'
        )

    cls = type(command)
    attr = inspect.getattr_static(cls, setter, None)
    if isinstance(attr, property):
        if attr.fset is None:
            raise InvalidBindingError(
                f'The property "{setter}" of {cls.__name__} has no setter.'
            )
        hint = get_type_hints(attr.fget).get('return', None)
    else:
        if callable(attr):
            raise InvalidBindingError(
                f'The attribute "{setter}" of {cls.__name__} is a method.'
            )
        hints = get_type_hints(cls)
        if setter not in hints and attr is None and setter not in vars(
            command
        ):
            raise InvalidBindingError(
                f'The attribute "{setter}" is not declared on {cls.__name__}.'
            )
        hint = hints.get(setter, None)

    return partial(setattr, command, setter), hint


class OptionBinding:
    '''
        The binding of one option to one attribute of one command.

        Once the parsing engine has populated the option, `apply` reads the raw value(s),
        converts them, validates the converted value and assigns it to the command.

        Parameters:
        - command (`Command`): the command owning the attribute.
        - option (`CommandOption`): the option registered with the parsing engine.
        - setter (`Union[str, Callable]`): the attribute name, or a callable assigning the value.
        - validator (`Optional[Callable]`, optional):
            Called with the converted value, returns an error message or a falsy value.
        - converter (`Optional[Callable]`, optional):
            Converts the raw value (a string for single options, a list of strings for
            multiple options, a boolean for flags). Without a converter the raw value is
            assigned as-is, which requires a compatible attribute type.
        - type (`Any`, optional): the type of the attribute, inferred from the annotation
            of a named attribute when not provided.
    '''

    def __init__(
        self,
        command: Any,
        option: CommandOption,
        setter: Any,
        validator: Optional[Validator] = None,
        converter: Optional[Callable] = None,
        type: Any = None
    ) -> None:
        if command is None:
            raise InvalidBindingError('The command of a binding must not be None.')
        if option is None:
            raise InvalidBindingError('The option of a binding must not be None.')
        self.command = command
        self.option = option
        self.setter, hint = resolve_setter(command, setter)
        self.name = setter if isinstance(setter, str) else getattr(
            setter, '__name__', repr(setter)
        )
        self.type = type if type is not None else hint
        self.validator = validator
        self.converter = converter

    def _read(self) -> Any:
        kind = self.option.option_type
        if kind is OptionKind.Single:
            return self.option.value()
        elif kind is OptionKind.Multiple:
            return self.option.values
        else:
            return self.option.has_value()

    def _convert(self) -> Any:
        raw = self._read()
        if self.converter is None:
            if not is_assignable(self.type, self.option.option_type):
                raise BindingTypeMismatchError(
                    f'You cannot bind directly from the option {self.option.long_name} '
                    f'with type {self.option.option_type.name} to an attribute of type '
                    f'{self.type!r}, without providing a suitable converter.'
                )
            return raw
        try:
            return self.converter(raw)
        except BindingError:
            raise
        except (ValueError, TypeError, OverflowError) as e:
            raise ConversionError(
                raw, self.type if self.type is not None else self.name
            ) from e

    def _validate(self, value: Any) -> None:
        if self.validator is None:
            return
        validation_error = self.validator(value)
        if validation_error:
            raise OptionValidationError(validation_error)

    def apply(self) -> Any:
        '''
            Convert, validate and assign the parsed value of the option.

            Returns:
            - The assigned value.

            Raises:
            - `ConversionError`, `OptionValidationError` or `BindingTypeMismatchError`,
                with `template` set to the template of the option. The attribute is not
                assigned in that case.
        '''
        try:
            value = self._convert()
            self._validate(value)
        except BindingError as e:
            if e.template is None:
                e.template = self.option.template
            logger.info('Binding of "%s" failed: %s', self.name, e.message)
            raise

        self.setter(value)
        logger.debug('Bound %s to "%s": %r', self.option, self.name, value)

        return value

    def __repr__(self) -> str:
        return f'OptionBinding({self.option.template!r} -> {self.name!r})'
