"""
The stack-based programming language that evolved programs are written in.

Programs are flat sequences of Prog items: either an integer literal, which is
pushed onto the data stack, or a builtin Command, which pops its operands and
pushes a result. There is no looping or branching, so a program of length N
always finishes in exactly N steps.
"""

from enum import Enum
from typing import List, Sequence, Union


INT_BITS = 32
INT_MIN = -(1 << (INT_BITS - 1))
INT_MAX = (1 << (INT_BITS - 1)) - 1


class Command(Enum):
    """A builtin command. The value is the token used in the text form."""
    ADD = "+"
    SUB = "-"
    MULT = "*"
    DIV = "/"
    DUP = "dup"
    SWAP = "swap"


# Either a piece of data or a command
Prog = Union[int, Command]

COMMANDS = tuple(Command)

_BINARY_COMMANDS = (Command.ADD, Command.SUB, Command.MULT, Command.DIV)


class ProgramParseError(ValueError):
    """Exception raised when program text contains an unknown token."""
    pass


def wrap_int(value: int) -> int:
    """Wrap an integer into the signed 32-bit range (two's complement)."""
    return ((value - INT_MIN) & ((1 << INT_BITS) - 1)) + INT_MIN


def _trunc_div(a: int, b: int) -> int:
    if b == 0:
        return 0
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q


class Stack:
    """
    A stack to run programs on, plus the queue of commands yet to be executed.

    Both buffers grow and shrink from their end. Execution state survives
    between calls, so a program may be run in several slices and resumed.
    """

    def __init__(self):
        # The data on the stack (no commands), top of stack last
        self.data: List[int] = []
        # Pending progs, next to execute last
        self.commands: List[Prog] = []

    @property
    def pending(self) -> int:
        """Number of progs still waiting to be executed."""
        return len(self.commands)

    def push(self, value: int):
        self.data.append(wrap_int(value))

    def pop(self) -> int:
        """Pop data off the stack, or get 0 from an empty stack."""
        if not self.data:
            return 0
        return self.data.pop()

    def run(self, command: Command):
        """Run a single builtin command against the data stack."""
        if command in _BINARY_COMMANDS:
            b = self.pop()
            a = self.pop()
            if command is Command.ADD:
                result = a + b
            elif command is Command.SUB:
                result = a - b
            elif command is Command.MULT:
                result = a * b
            else:
                result = _trunc_div(a, b)
            self.push(result)
        elif command is Command.DUP:
            a = self.pop()
            self.push(a)
            self.push(a)
        elif command is Command.SWAP:
            b = self.pop()
            a = self.pop()
            self.push(b)
            self.push(a)
        else:
            raise ValueError(f"Unknown command: {command!r}")

    def queue_program(self, program: Sequence[Prog]):
        """Queue a program so its progs are consumed left to right."""
        self.commands.extend(reversed(program))

    def run_next(self) -> bool:
        """Execute the next pending prog. Returns False if nothing was pending."""
        if not self.commands:
            return False
        prog = self.commands.pop()
        if isinstance(prog, Command):
            self.run(prog)
        else:
            self.push(prog)
        return True

    def run_all(self) -> int:
        """Run until no progs are pending. Returns the number of steps taken."""
        steps = 0
        while self.run_next():
            steps += 1
        return steps

    def run_until(self, max_steps: int) -> int:
        """Run at most max_steps progs. Returns the number of steps taken."""
        steps = 0
        while steps < max_steps and self.run_next():
            steps += 1
        return steps

    def run_program(self, program: Sequence[Prog]) -> int:
        self.queue_program(program)
        return self.run_all()


def render_prog(prog: Prog) -> str:
    if isinstance(prog, Command):
        return prog.value
    return str(prog)


def render_program(program: Sequence[Prog]) -> str:
    """Render a program as space-separated tokens, e.g. ``1 - -30 dup``."""
    return " ".join(render_prog(p) for p in program)


_TOKENS = {command.value: command for command in Command}


def parse_program(text: str) -> List[Prog]:
    """
    Parse the text form produced by render_program back into progs.

    Raises:
        ProgramParseError: If a token is neither a command nor an integer,
            or is an integer outside the 32-bit range
    """
    program: List[Prog] = []
    for token in text.split():
        command = _TOKENS.get(token.lower())
        if command is not None:
            program.append(command)
            continue
        try:
            value = int(token)
        except ValueError:
            raise ProgramParseError(f"Unknown token in program: {token!r}")
        if not INT_MIN <= value <= INT_MAX:
            raise ProgramParseError(
                f"Literal out of range [{INT_MIN}, {INT_MAX}]: {token!r}"
            )
        program.append(value)
    return program
