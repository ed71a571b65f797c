'''
The base class of commands whose options are bound to their own attributes.
'''
import asyncio
import inspect
import logging
import warnings
from abc import ABC, abstractmethod
from functools import partial
from threading import Event
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from .binding import OptionBinding, Validator
from .errors import BindingError
from .types import OptionKind
from .utils import get_multiple_converter, get_single_converter

if TYPE_CHECKING:
    from .parser import CommandApplication

logger = logging.getLogger(__name__)


class Command(ABC):
    '''
        A named unit of command-line functionality.

        Subclasses declare their options in `add_options`, binding each one to an
        attribute, and implement `execute`. When the command is selected on the command
        line, every binding is applied in declaration order before `execute` runs.

        Example:
        ```python
        class CountCommand(Command):
            number: int = 0

            def __init__(self):
                super().__init__('count', 'Count up to a number.')

            def add_options(self, application):
                self.add_single_option(
                    application, '-n|--number <value>', 'The number to count', 'number',
                    lambda n: None if 1 <= n <= 10 else 'The number must be between 1 and 10'
                )

            def execute(self, token):
                print(*range(1, self.number + 1))
                return 0
        ```
    '''

    def __init__(self, name: str, description: Optional[str] = None) -> None:
        self.name = name
        self.description = description
        self._bindings: List[OptionBinding] = []
        self._application: Optional['CommandApplication'] = None

    @property
    def bindings(self) -> Tuple[OptionBinding, ...]:
        return tuple(self._bindings)

    @property
    def registered(self) -> bool:
        return self._application is not None

    def add_options(self, application: 'CommandApplication') -> None:
        '''
            Declare the options of the command on the given application.

            Called exactly once, while the command is registered.
        '''

    @abstractmethod
    def execute(self, token: Event) -> int:
        '''
            Run the command once all options have been bound.

            Parameters:
            - token (`threading.Event`): set when the caller requests cancellation.

            Returns:
            - `int`: the exit code, 0 for success. May also be a coroutine resolving to it.
        '''

    def add_boolean_option(
        self,
        application: 'CommandApplication',
        template: str,
        description: str,
        setter: Any,
        validator: Optional[Validator] = None,
        converter: Optional[Callable[[bool], Any]] = None,
        type: Any = None
    ) -> OptionBinding:
        '''
            Bind a flag to a boolean attribute of the command, `True` when the flag is present.
        '''
        option = application.option(template, description, OptionKind.Flag)
        return self.add_binding(
            OptionBinding(
                self,
                option,
                setter,
                validator=validator,
                converter=converter,
                type=type
            )
        )

    def add_single_option(
        self,
        application: 'CommandApplication',
        template: str,
        description: str,
        setter: Any,
        validator: Optional[Validator] = None,
        converter: Optional[Callable[[Optional[str]], Any]] = None,
        type: Any = None
    ) -> OptionBinding:
        '''
            Bind a single value option to an attribute of the command.

            The converter is looked up from the type of the attribute (or `type`) unless
            one is given, so an unsupported type fails here rather than at parse time.
        '''
        option = application.option(template, description, OptionKind.Single)
        binding = OptionBinding(
            self, option, setter, validator=validator, converter=converter, type=type
        )
        if binding.converter is None and binding.type is not None:
            binding.converter = get_single_converter(binding.type)

        return self.add_binding(binding)

    def add_multiple_option(
        self,
        application: 'CommandApplication',
        template: str,
        description: str,
        setter: Any,
        validator: Optional[Validator] = None,
        converter: Optional[Callable[[List[str]], Any]] = None,
        type: Any = None
    ) -> OptionBinding:
        '''
            Bind a repeatable option to a list attribute of the command.

            The attribute receives one element per occurrence on the command line, and an
            empty list when the option is not supplied.
        '''
        option = application.option(template, description, OptionKind.Multiple)
        binding = OptionBinding(
            self, option, setter, validator=validator, converter=converter, type=type
        )
        if binding.converter is None and binding.type is not None:
            binding.converter = get_multiple_converter(binding.type)

        return self.add_binding(binding)

    def add_binding(self, binding: OptionBinding) -> OptionBinding:
        if binding is None:
            raise ValueError('The binding must not be None.')
        if any(b.name == binding.name for b in self._bindings):
            warnings.warn(
                f'The attribute "{binding.name}" of command "{self.name}" is bound more than once.',
                UserWarning
            )
        self._bindings.append(binding)

        return binding

    def apply_bindings(self) -> None:
        for binding in self._bindings:
            binding.apply()

    def register(
        self, application: 'CommandApplication'
    ) -> 'CommandApplication':
        '''
            Add the command to the application.

            Creates the sub-command, declares the options and installs the execute hook.

            Returns:
            - `CommandApplication`: the application created for the command.
        '''
        if self._application is not None:
            raise RuntimeError(f'The command "{self.name}" is already registered.')

        command = application.command(self.name, self.description)
        self.add_options(command)
        command.on_execute(partial(self._on_execute, command))
        self._application = command
        logger.debug(
            'Registered command "%s" with %d option(s)', self.name,
            len(self._bindings)
        )

        return command

    def _on_execute(self, application: 'CommandApplication', token: Event) -> int:
        try:
            self.apply_bindings()
        except BindingError as e:
            return application.fail(e)

        result = self.execute(token)
        if inspect.isawaitable(result):
            result = asyncio.run(result)

        return result
