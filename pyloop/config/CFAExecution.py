from pyloop.cfaexecutor import CFAExecutor
from pyloop.cfa import CFANode

def get_engine(tree, trace=None, max_iterations=None, **params):
    assert tree
    CFANode.index = 0  # reset the CFA node indices to produce identical output on re-execution
    return CFAExecutor.from_tree(tree, trace, max_iterations)
