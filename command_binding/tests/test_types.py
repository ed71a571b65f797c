import pytest

from ..errors import InvalidBindingError
from ..parser import CommandApplication
from ..types import OptionDescriptor, OptionKind


def test_option_descriptor():
    single = OptionDescriptor('-n|--number <value>', 'The number', OptionKind.Single)
    assert single.options == ['-n', '--number']
    assert single.metavar == 'value'
    assert single.long_name == 'number'

    flag = OptionDescriptor('-g|--greet', 'Greet', OptionKind.Flag)
    assert flag.options == ['-g', '--greet']
    assert flag.metavar is None
    assert flag.long_name == 'greet'

    bare = OptionDescriptor('o|omit <number>', kind=OptionKind.Multiple)
    assert bare.options == ['-o', '--omit']
    assert bare.metavar == 'number'

    short_only = OptionDescriptor('-x')
    assert short_only.long_name == 'x'
    assert short_only.metavar == 'value'


@pytest.mark.parametrize(
    'template, kind', [
        ('', OptionKind.Single),
        ('   ', OptionKind.Multiple),
        ('-g|--greet <value>', OptionKind.Flag),
    ]
)
def test_invalid_option_descriptor(template, kind):
    with pytest.raises(InvalidBindingError):
        OptionDescriptor(template, '', kind)


def test_command_option_values():
    application = CommandApplication(prog='tool', exit_on_error=False)
    single = application.option('-n|--number <value>', 'number', OptionKind.Single)
    multiple = application.option('-o|--omit <value>', 'omit', OptionKind.Multiple)
    flag = application.option('-g|--greet', 'greet', OptionKind.Flag)

    assert single.value() is None
    assert multiple.values == []
    assert not flag.has_value()

    namespace = application.parse_args(['--omit', '2', '-n', '5', '-o', '4', '-g'])
    for option in application.options:
        option.bind(namespace)

    assert single.value() == '5'
    assert multiple.values == ['2', '4']
    assert flag.has_value()

    namespace = application.parse_args([])
    for option in application.options:
        option.bind(namespace)

    assert single.value() is None
    assert multiple.values == []
    assert not flag.has_value()
