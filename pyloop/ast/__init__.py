
from pyloop.ast.nodes import DoWhile, CFor

from pyloop.ast.LowerLoopMarkers import LowerLoopMarkers
from pyloop.ast.EnsureLoopScoping import EnsureLoopScoping
from pyloop.ast.ExpandAugAssign import ExpandAugAssign
from pyloop.ast.ASTChecker import ASTChecker
