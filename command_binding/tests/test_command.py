from threading import Event
from typing import Dict, List, Optional

import pytest

from ..command import Command
from ..errors import ConversionError, NoConverterError, OptionValidationError
from ..parser import CommandApplication, add_command, execute


class CountCommand(Command):
    number: int = 0
    numbers_to_omit: List[int] = []
    greet: bool = False

    def __init__(self):
        super().__init__('test', 'Perform a test count.')
        self.executed = False
        self.token = None

    def add_options(self, application):
        self.add_single_option(
            application, '-n|--number <value>', 'The number to count', 'number',
            lambda number: None
            if 1 <= number <= 10 else 'The number must be between 1 and 10'
        )
        self.add_multiple_option(
            application, '-o|--omit <value>',
            'Omit the number from the count (allows multiple)',
            'numbers_to_omit'
        )
        self.add_boolean_option(
            application, '-g|--greet', 'Add a polite greeting', 'greet'
        )

    def execute(self, token):
        self.executed = True
        self.token = token
        if self.greet:
            print('Hello! Delightful to see you.')

        numbers = [
            str(i) for i in range(1, self.number + 1)
            if i not in self.numbers_to_omit
        ]
        print(f'Testing {",".join(numbers)}')
        return 0


class AsyncCommand(Command):
    code: int = 0

    def __init__(self):
        super().__init__('async', 'Exit with the given code.')

    def add_options(self, application):
        self.add_single_option(application, '-c|--code <code>', 'The code', 'code')

    async def execute(self, token):
        return self.code


class NoOptionCommand(Command):

    def __init__(self):
        super().__init__('noop')

    def execute(self, token):
        return 7


class MappingCommand(Command):
    mapping: Dict[str, str] = None

    def __init__(self):
        super().__init__('mapping')

    def add_options(self, application):
        self.add_single_option(application, '-m|--mapping <json>', 'A mapping', 'mapping')

    def execute(self, token):
        return 0


class CollectCommand(Command):
    tags: List[str] = None
    sizes: Optional[List[int]] = None

    def __init__(self):
        super().__init__('collect', 'Collect tags and sizes.')

    def add_options(self, application):
        self.add_multiple_option(application, '-t|--tag <tag>', 'A tag', 'tags')
        self.add_multiple_option(application, '-s|--size <size>', 'A size', 'sizes')

    def execute(self, token):
        return len(self.tags) + len(self.sizes)


@pytest.fixture
def command():
    return CountCommand()


@pytest.fixture
def application(command):
    application = CommandApplication(prog='demo', exit_on_error=False)
    add_command(application, command)
    return application


def test_count_with_all_options(application, command, capsys):
    assert application.execute(['test', '-n', '5', '-o', '2', '-o', '4', '-g']) == 0

    assert command.number == 5
    assert command.numbers_to_omit == [2, 4]
    assert command.greet is True
    assert capsys.readouterr().out.splitlines() == [
        'Hello! Delightful to see you.', 'Testing 1,3,5'
    ]


def test_count_with_defaults(application, command, capsys):
    assert application.execute(['test', '--number', '3']) == 0

    assert command.numbers_to_omit == []
    assert command.greet is False
    assert capsys.readouterr().out == 'Testing 1,2,3\n'


def test_validation_failure_skips_execute(application, command):
    with pytest.raises(OptionValidationError) as exc_info:
        application.execute(['test', '-n', '15'])

    assert exc_info.value.message == 'The number must be between 1 and 10'
    assert exc_info.value.template == '-n|--number <value>'
    assert not command.executed
    assert command.number == 0


def test_conversion_failure_skips_execute(application, command):
    with pytest.raises(ConversionError) as exc_info:
        application.execute(['test', '-n', 'abc'])

    assert exc_info.value.value == 'abc'
    assert 'integer' in str(exc_info.value)
    assert not command.executed


def test_missing_number_fails_validation(application, command):
    with pytest.raises(OptionValidationError) as exc_info:
        application.execute(['test'])

    assert exc_info.value.message == 'The number must be between 1 and 10'
    assert not command.executed


def test_later_binding_failure_keeps_execute_from_running(application, command):
    with pytest.raises(ConversionError):
        application.execute(['test', '-n', '4', '-o', 'x'])

    assert command.number == 4
    assert not command.executed


def test_binding_failure_is_reported_to_the_user(capsys):
    command = CountCommand()
    application = CommandApplication(prog='demo')
    add_command(application, command)

    with pytest.raises(SystemExit) as exc_info:
        application.execute(['test', '-n', '15'])

    assert exc_info.value.code == 2
    err = capsys.readouterr().err
    assert 'usage: demo test' in err
    assert 'argument -n|--number <value>: The number must be between 1 and 10' in err
    assert not command.executed

    with pytest.raises(SystemExit):
        application.execute(['test', '-n', 'abc'])

    err = capsys.readouterr().err
    assert "invalid integer value: 'abc'" in err
    assert not command.executed


def test_token_is_forwarded(application, command):
    token = Event()
    application.execute(['test', '-n', '1'], token=token)
    assert command.token is token

    application.execute(['test', '-n', '1'])
    assert isinstance(command.token, Event)
    assert command.token is not token


def test_async_execute():
    assert execute([AsyncCommand], ['async', '-c', '3'], exit_on_error=False) == 3


def test_command_without_options():
    application = CommandApplication(prog='demo', exit_on_error=False)
    add_command(application, NoOptionCommand)
    add_command(application, CountCommand())

    assert application.execute(['noop']) == 7


def test_no_command_prints_help(application, capsys):
    assert application.execute([]) == 0
    out = capsys.readouterr().out
    assert 'usage: demo' in out
    assert 'Perform a test count.' in out


def test_command_help_lists_options(application, capsys):
    with pytest.raises(SystemExit) as exc_info:
        application.execute(['test', '--help'])

    assert exc_info.value.code == 0
    out = capsys.readouterr().out
    assert '--number value' in out
    assert '-g, --greet' in out
    assert 'Omit the number from the count (allows multiple)' in out


def test_register_once(application, command):
    assert command.registered
    assert [binding.name for binding in command.bindings] == [
        'number', 'numbers_to_omit', 'greet'
    ]

    with pytest.raises(RuntimeError):
        add_command(application, command)


def test_unsupported_type_aborts_registration():
    application = CommandApplication(prog='demo', exit_on_error=False)
    with pytest.raises(NoConverterError):
        add_command(application, MappingCommand)


def test_multiple_option_without_occurrences_is_empty_list():
    command = CollectCommand()
    application = CommandApplication(prog='demo', exit_on_error=False)
    add_command(application, command)

    assert application.execute(['collect']) == 0
    assert command.tags == []
    assert command.sizes == []

    assert application.execute(['collect', '-s', '3', '-t', 'a', '-s', '1']) == 3
    assert command.tags == ['a']
    assert command.sizes == [3, 1]
