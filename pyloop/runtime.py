from typing import List


class AssertionFailure(Exception):
    """
    Raised by the assertion primitive when its condition does not hold.
    Fatal to the run, never caught by an engine.
    """

    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


class IterationLimitReached(Exception):
    def __init__(self, limit):
        Exception.__init__(self, 'loop iteration limit of %d reached' % limit)
        self.limit = limit


class ProgramError(Exception):
    """
    Static rejection of a program (unsupported construct, break outside of a loop, ...)
    """

    def __init__(self, message, node=None):
        self.lineno = getattr(node, 'lineno', None)
        if self.lineno is not None:
            message = '%d: %s' % (self.lineno, message)
        Exception.__init__(self, message)


def render_value(value) -> str:
    match value:
        case True:
            return 'true'
        case False:
            return 'false'
        case None:
            return 'undefined'
        case _:
            return str(value)


class Trace:
    """
    Observable output stream of a program run. Every call of the print
    primitive appends exactly one line.
    """

    def __init__(self, echo=False):
        self.lines : List[str] = list()
        self.echo = echo

    def emit(self, *values):
        line = ''.join(render_value(v) for v in values)
        self.lines.append(line)
        if self.echo:
            print(line)

    def since(self, mark : int) -> List[str]:
        return self.lines[mark:]

    def __len__(self):
        return len(self.lines)

    def __str__(self):
        return '\n'.join(self.lines)


def check_assertion(condition, message=None):
    if not condition:
        raise AssertionFailure(message if message is not None else 'assertion failed')
