'''
A custom ArgumentParser hosting commands and binding their options before execution.
'''
import itertools
import logging
from argparse import ArgumentParser, HelpFormatter
from functools import partial
from threading import Event
from typing import Any, Callable, Iterable, List, Optional, Sequence, Type, Union

from .command import Command
from .errors import BindingError
from .types import CommandOption, OptionDescriptor, OptionKind

logger = logging.getLogger(__name__)

_ON_EXECUTE = '_command_binding_on_execute'
_option_ids = itertools.count()


class CommandApplication(ArgumentParser):
    '''
        A command-line application made of commands whose options are bound to attributes.

        Each command registered with `add_command` becomes a sub-command (itself a
        `CommandApplication`). `execute` parses the command line, applies the bindings
        of the selected command and runs it, returning its exit code.

        Example:
        ```python
        application = CommandApplication(prog='tool')
        add_command(application, CountCommand)

        sys.exit(application.execute())
        ```
    '''

    def __init__(
        self,
        prog: Optional[str] = None,
        usage: Optional[str] = None,
        description: Optional[str] = None,
        epilog: Optional[str] = None,
        parents: Sequence[ArgumentParser] = [],
        formatter_class=HelpFormatter,
        prefix_chars: str = "-",
        fromfile_prefix_chars: Optional[str] = None,
        argument_default: Any = None,
        conflict_handler: str = "error",
        add_help: bool = True,
        allow_abbrev: bool = True,
        exit_on_error: bool = True
    ) -> None:
        super(CommandApplication, self).__init__(
            prog=prog,
            usage=usage,
            description=description,
            epilog=epilog,
            parents=parents,
            formatter_class=formatter_class,
            prefix_chars=prefix_chars,
            fromfile_prefix_chars=fromfile_prefix_chars,
            argument_default=argument_default,
            conflict_handler=conflict_handler,
            add_help=add_help,
            allow_abbrev=allow_abbrev,
            exit_on_error=exit_on_error
        )
        self._options: List[CommandOption] = []
        self._commands = None

    @property
    def options(self) -> List[CommandOption]:
        return list(self._options)

    def option(
        self, template: str, description: Optional[str], kind: OptionKind
    ) -> CommandOption:
        '''
            Declare an option from its template, e.g. `-n|--number <value>`.

            Returns:
            - `CommandOption`: the option holding the raw value(s) once parsed.
        '''
        descriptor = OptionDescriptor(template, description or '', kind)
        kwargs = {
            'help': descriptor.description.replace('%', '%%'),
            'dest': f'_option_{next(_option_ids)}',
        }
        if kind is OptionKind.Flag:
            kwargs['action'] = 'store_true'
        elif kind is OptionKind.Single:
            kwargs['metavar'] = descriptor.metavar
        else:
            kwargs['action'] = 'append'
            kwargs['metavar'] = descriptor.metavar
        action = self.add_argument(*descriptor.options, **kwargs)

        option = CommandOption(descriptor, action)
        self._options.append(option)
        logger.debug('Declared option %s on "%s"', option, self.prog)

        return option

    def command(
        self, name: str, description: Optional[str] = None
    ) -> 'CommandApplication':
        '''
            Create the sub-command `name`, with the help option enabled.
        '''
        if self._commands is None:
            self._commands = self.add_subparsers(
                title='commands', metavar='<command>'
            )

        return self._commands.add_parser(
            name,
            help=description,
            description=description,
            add_help=True,
            exit_on_error=self.exit_on_error
        )

    def on_execute(self, callback: Callable[[Event], int]) -> None:
        '''
            Install the callback run when this (sub-)command is selected.
        '''
        self.set_defaults(**{_ON_EXECUTE: partial(self._dispatch, callback)})

    def _dispatch(
        self, callback: Callable[[Event], int], namespace, token: Event
    ) -> int:
        for option in self._options:
            option.bind(namespace)

        return callback(token)

    def fail(self, error: BindingError):
        '''
            Report a binding failure to the user.

            Prints the usage and the error and exits with status 2, the same as any other
            parsing error, unless `exit_on_error` is disabled, in which case the error is
            raised again.
        '''
        logger.info('Command "%s" aborted: %s', self.prog, error)
        if not self.exit_on_error:
            raise error
        self.error(str(error))

    def execute(
        self,
        args: Optional[Sequence[str]] = None,
        token: Optional[Event] = None
    ) -> int:
        '''
            Parse the command-line arguments and run the selected command.

            Parameters:
            - args (`Optional[Sequence[str]]`, optional):
                Command-line arguments to be parsed. If not provided, sys.argv is used.
            - token (`Optional[threading.Event]`, optional):
                The cancellation signal forwarded to the command. A new event is created
                if not provided.

            Returns:
            - `int`: the exit code of the command, or 0 after printing the help when no
                command was selected.
        '''
        namespace = self.parse_args(args=args)
        handler = getattr(namespace, _ON_EXECUTE, None)
        if handler is None:
            self.print_help()
            return 0

        return handler(namespace, token if token is not None else Event())


def add_command(
    application: CommandApplication, command: Union[Command, Type[Command]]
) -> CommandApplication:
    '''
        Add a command to the application.

        Parameters:
        - application (`CommandApplication`): the application to which to add the command.
        - command (`Union[Command, Type[Command]]`):
            The command, or a command class with a constructor taking no arguments.

        Returns:
        - `CommandApplication`: the application created for the command.
    '''
    if isinstance(command, type):
        command = command()

    return command.register(application)


def execute(
    commands: Iterable[Union[Command, Type[Command]]],
    args: Optional[Sequence[str]] = None,
    token: Optional[Event] = None,
    **parser_meta
) -> int:
    application = CommandApplication(**parser_meta)
    for command in commands:
        add_command(application, command)

    return application.execute(args, token)
