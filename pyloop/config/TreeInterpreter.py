from pyloop.interpreter import LoopInterpreter

def get_engine(tree, trace=None, max_iterations=None, **params):
    assert tree
    return LoopInterpreter(tree, trace, max_iterations)
