
from enum import Enum

class Verdict(Enum):
    """
    Outcome of checking one program run:
    TRUE if the run finished without a failing assertion and produced the expected trace,
    FALSE on the first violation, UNKNOWN if the run did not finish.
    """
    TRUE = 0
    FALSE = 1
    UNKNOWN = 2

    def __and__(self, other):
        if Verdict.FALSE in (self, other):
            return Verdict.FALSE
        if Verdict.UNKNOWN in (self, other):
            return Verdict.UNKNOWN
        return Verdict.TRUE

    def __str__(self):
        return Enum.__str__(self).replace('Verdict.', '')
