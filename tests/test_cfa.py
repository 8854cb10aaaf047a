import ast
import textwrap

from pyloop.cfa import CFACreator, CFAEdge, CFANode, Instruction, InstructionType, TraverseCFA, GraphableCFANode
from pyloop.preprocessor import load_program
from pyloop.utils.visual import cfa_to_dot, ASTVisualizer


def cfa_of(source : str) -> CFACreator:
    cfa = CFACreator()
    cfa.visit(load_program(textwrap.dedent(source)))
    return cfa

def edges_of(cfa : CFACreator):
    return [e for r in cfa.roots for e in TraverseCFA.bfs_edges(r)]

def edge_labelled(cfa, text):
    matching = [e for e in edges_of(cfa) if text in e.label()]
    assert len(matching) == 1, [e.label() for e in matching]
    return matching[0]


def test_side_effecting_test_is_evaluated_once_per_visit():
    cfa = cfa_of('''
        i = 0
        while postinc(i) < 10:
            pass
    ''')
    evaluation = edge_labelled(cfa, '__cond_0 = postinc(i) < 10')
    assert evaluation.instruction.kind == InstructionType.STATEMENT

    assumptions = evaluation.successor.leaving_edges
    assert sorted(e.label() for e in assumptions) == ['3: [__cond_0]', '3: [not __cond_0]']
    assert all(e.instruction.kind == InstructionType.ASSUMPTION for e in assumptions)


def test_pure_test_needs_no_temporary():
    cfa = cfa_of('''
        while i < 10:
            i = i + 1
    ''')
    assert not any('__cond' in e.label() for e in edges_of(cfa))


def test_break_leads_to_loop_exit():
    cfa = cfa_of('''
        while i < 3:
            break
        x = 1
    ''')
    leave = edge_labelled(cfa, '[not i < 3]')
    jump = edge_labelled(cfa, 'break')
    assert jump.successor is leave.successor
    assert [e.label() for e in jump.successor.leaving_edges] == ['4: x = 1']


def test_continue_in_counted_loop_leads_to_update():
    cfa = cfa_of('''
        with counted(k := 0, k < 3, postinc(k)):
            continue
    ''')
    jump = edge_labelled(cfa, 'continue')
    [update] = jump.successor.leaving_edges
    assert update.label() == '2: postinc(k__loop1)'


def test_continue_in_do_while_leads_to_test():
    cfa = cfa_of('''
        with do_while(postinc(i) < 3):
            continue
    ''')
    jump = edge_labelled(cfa, 'continue')
    [evaluation] = jump.successor.leaving_edges
    assert evaluation.label() == '2: __cond_0 = postinc(i) < 3'


def test_break_in_nested_loop_targets_innermost_loop():
    cfa = cfa_of('''
        while a:
            while b:
                break
            x = 1
    ''')
    jump = edge_labelled(cfa, 'break')
    assert [e.label() for e in jump.successor.leaving_edges] == ['5: x = 1']


def test_loop_entries_are_marked():
    cfa = cfa_of('''
        with do_while(i < 3):
            pass
    ''')
    entries = [e for e in edges_of(cfa) if getattr(e.instruction, 'loop_entry', False)]
    # the first entry and the back edge of the test
    assert sorted(e.label() for e in entries) == ['2: [i < 3]', '< do >']
    assert entries[0].successor is entries[1].successor


def test_counted_loop_without_test():
    cfa = cfa_of('''
        with counted():
            break
    ''')
    entry = edge_labelled(cfa, 'for (;;)')
    assert entry.instruction.kind == InstructionType.NOP
    assert len(entry.predecessor.leaving_edges) == 1


def test_one_root_per_function():
    cfa = cfa_of('''
        def f():
            return 1

        def main():
            print(f())
    ''')
    assert len(cfa.roots) == 3
    assert cfa.entry_point is cfa.function_entry_point['main']
    [trace] = cfa.entry_point.leaving_edges
    assert trace.instruction.kind == InstructionType.TRACE


def test_merge_moves_edges():
    a, b, c = CFANode(), CFANode(), CFANode()
    edge = CFAEdge(c, b, Instruction.nop(ast.Pass()))
    CFANode.merge(a, b)
    assert edge.successor is a
    assert b.entering_edges == []


def test_cfa_to_dot():
    cfa = cfa_of('''
        def main():
            i = 0
            while postinc(i) < 2:
                continue
    ''')
    dot = cfa_to_dot([GraphableCFANode(r) for r in cfa.roots], names=['', 'main'])
    source = dot.source
    assert 'main' in source
    assert '__cond_0 = postinc(i) < 2' in source
    assert 'continue' in source


def test_ast_visualizer():
    visualizer = ASTVisualizer()
    visualizer.visit(load_program('with do_while(x):\n    pass'))
    assert 'DoWhile' in visualizer.graph.source
