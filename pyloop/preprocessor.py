from pyloop.ast import LowerLoopMarkers, EnsureLoopScoping, ExpandAugAssign, ASTChecker

import ast


def transformers():
    # fresh instances, EnsureLoopScoping numbers the loops it renames
    return [
        LowerLoopMarkers(),
        EnsureLoopScoping(),
        ExpandAugAssign(),
    ]

def preprocess_ast(tree : ast.AST) -> ast.AST:
    for t in transformers():
        tree = t.visit(tree)
        tree = ast.fix_missing_locations(tree)
    return tree

def prepare_ast(tree : ast.Module) -> ast.Module:
    tree = preprocess_ast(tree)
    ASTChecker().visit(tree)
    return tree

def load_program(source : str, filename : str = '<program>') -> ast.Module:
    """
    parse, preprocess and check a program, raises SyntaxError or ProgramError
    """
    return prepare_ast(ast.parse(source, filename=filename))
