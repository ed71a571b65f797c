import sys
from threading import Event
from typing import List

from command_binding import Command, CommandApplication, add_command


class TestCommand(Command):
    number: int = 0
    numbers_to_omit: List[int] = []
    greet: bool = False

    def __init__(self):
        super().__init__('test', 'Perform a test count.')

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

    def execute(self, token: Event) -> int:
        if self.greet:
            print('Hello! Delightful to see you.')

        numbers = [
            str(i) for i in range(1, self.number + 1)
            if i not in self.numbers_to_omit
        ]
        print(f'Testing {",".join(numbers)}')
        return 0


if __name__ == '__main__':
    # Try e.g. `python demo.py test -n 10 -o 3 -o 5 -o 7 --greet`
    application = CommandApplication()
    add_command(application, TestCommand)

    sys.exit(application.execute())
