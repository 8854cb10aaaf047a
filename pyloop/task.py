
from typing import List, Optional

import os

class Task:
    def __init__(self, program : str, output_directory : str, max_iterations=None, expected_trace : Optional[List[str]] = None):
        # base name of program
        self.program = program
        self.program_name = os.path.splitext(os.path.basename(program))[0]
        self.max_iterations = max_iterations
        self.expected_trace = expected_trace
        self.output_directory = os.path.join(output_directory, self.program_name)

    @staticmethod
    def task_from_args(program, args):
        return Task(program, args.output_directory, args.max_iterations)

    @staticmethod
    def task_from_yml(yml, base_dir, args):
        expected = yml.get('expected_trace')
        result = Task(
                os.path.join(base_dir, yml['input_files'].split(' ')[0]),  # only accept single program for now
                args.output_directory,
                yml.get('max_iterations', args.max_iterations),
                [str(line) for line in expected] if expected is not None else None
        )
        return result

    def __str__(self):
        return '%s' % self.program

from enum import Enum

class Status(Enum):
    OK = 0,
    TIMEOUT = 1,
    ABORTED_BY_USER = 2,
    ERROR = 3,
    SYNTAX_INVALID = 4

    def __str__(self):
        return Enum.__str__(self).replace('Status.', '')


from pyloop.verdict import Verdict

class Result:
    def __init__(self, verdict=Verdict.UNKNOWN, message=None):
        self.verdict = verdict
        self.message = message
        self.return_value = None
        self.trace : List[str] = []
        self.status = Status.OK
