'''
errors raised while declaring and applying option bindings.
'''
from typing import Any, Optional


class NoConverterError(TypeError):
    '''
        Raised when the conversion registry has no converter for the requested type.

        This is a configuration mistake of the command author and is raised while the
        command registers its options, before any command-line input is parsed.
    '''

    def __init__(self, type: Any) -> None:
        super(NoConverterError, self).__init__(
            f'Unable to create converter for type {type!r}'
        )
        self.type = type


class InvalidBindingError(ValueError):
    '''
        Raised when an option binding cannot be constructed, e.g. the setter does not
        resolve to a writable attribute.
    '''


class BindingError(Exception):
    '''
        Base class of the errors raised while applying a binding to the parsed input.

        Attributes:
        - message (`str`): the human readable problem.
        - template (`Optional[str]`): the template of the offending option, filled in by
            the binding that failed.
    '''

    def __init__(self, message: str, template: Optional[str] = None) -> None:
        super(BindingError, self).__init__(message)
        self.message = message
        self.template = template

    def __str__(self) -> str:
        if self.template is None:
            return self.message
        return f'argument {self.template}: {self.message}'


class ConversionError(BindingError):
    '''
        Raised when a raw command-line value cannot be converted to the target type.
    '''

    def __init__(self, value: Any, target: Any, template: Optional[str] = None):
        super(ConversionError, self).__init__(
            f'invalid {target} value: {value!r}', template
        )
        self.value = value
        self.target = target


class OptionValidationError(BindingError):
    '''
        Raised when the validator of an option rejects the converted value.
    '''


class BindingTypeMismatchError(BindingError):
    '''
        Raised when an option without a converter is bound to an incompatible attribute.
    '''
