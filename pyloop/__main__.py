#!/usr/bin/env python

from pyloop import configs
from pyloop import harness

from pyloop.preprocessor import load_program
from pyloop.cfa import CFACreator, CFANode, GraphableCFANode, TraverseCFA
from pyloop.runtime import Trace, AssertionFailure, IterationLimitReached, ProgramError

from pyloop.verdict import Verdict
from pyloop.task import Task, Result, Status

from pyloop.utils.visual import cfa_to_dot, ASTVisualizer

from pyloop import log

import ast
import astpretty

import os
import sys

import yaml


def write_graphs(tree, output_dir, render=False):
    # visualize ast
    astvisitor = ASTVisualizer()
    astvisitor.visit(tree)

    # compute cfa
    log.printer.log_status('computing CFA')
    CFANode.index = 0  # reset the CFA node indices to produce identical output on re-execution
    cfa_creator = CFACreator()
    cfa_creator.visit(tree)
    names = [''] + list(cfa_creator.function_entry_point.keys())
    dot = cfa_to_dot([ GraphableCFANode(r) for r in cfa_creator.roots ], names=names)
    log.printer.log_debug(1, 'CFA has', sum(len(list(TraverseCFA.bfs_edges(r))) for r in cfa_creator.roots), 'edges')

    if render:
        astvisitor.graph.render(os.path.join(output_dir, 'ast'), cleanup=True)
        dot.render(os.path.join(output_dir, 'cfa'), cleanup=True)
    else:
        astvisitor.graph.save(os.path.join(output_dir, 'ast.gv'))
        dot.save(os.path.join(output_dir, 'cfa.gv'))


def execute(engine, result : Result, expected_trace=None):
    ''' run the program on an engine and record status and verdict in result '''
    try:
        result.return_value = engine.run_program()
        result.verdict = Verdict.TRUE
    except AssertionFailure as x:
        result.verdict = Verdict.FALSE
        result.message = x.message
    except IterationLimitReached as x:
        result.status = Status.TIMEOUT
        result.verdict = Verdict.UNKNOWN
        result.message = str(x)
    except BaseException as x:
        result.status = Status.ERROR
        raise x
    finally:
        result.trace = list(engine.trace.lines)

    if expected_trace is not None and result.verdict == Verdict.TRUE and result.trace != expected_trace:
        result.verdict = Verdict.FALSE
        result.message = 'unexpected trace'
    return result


def run_task(task : Task, config : str, args) -> Result:
    result = Result()

    log.printer.log_task(task.program_name, [config])

    # read program file
    with open(task.program) as file:
        source = file.read()

    # prepare output directory
    output_dir = os.path.join(task.output_directory, config)
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    # write program
    with open(os.path.join(output_dir, 'program.py'), 'w') as out_prog:
        out_prog.write(source)

    # parse program into ast, lower loop headers and check it
    log.printer.log_status('parsing')
    try:
        tree = load_program(source, filename=task.program)
    except (SyntaxError, ProgramError) as x:
        result.status = Status.SYNTAX_INVALID
        result.message = str(x)
        return result

    # prettyprint ast
    with open(os.path.join(output_dir, 'program-preprocessed.txt'), 'w') as out_file:
        out_file.write(astpretty.pformat(tree, show_offsets=False))

    write_graphs(tree, output_dir, render=args.render)

    log.printer.log_status('running')
    trace = Trace(echo=not (args.quiet or args.compact))
    engine = configs.load_engine(config).get_engine(tree, trace=trace, max_iterations=task.max_iterations)
    try:
        execute(engine, result, task.expected_trace)
    finally:
        with open(os.path.join(output_dir, 'trace.txt'), 'w') as out_trace:
            out_trace.write('\n'.join(trace.lines))

    return result


def run_oracle(config : str, args) -> Result:
    ''' run the conformance fixture, then every scenario on its own '''
    result = Result()
    log.printer.log_task('oracle', [config])

    trace = Trace(echo=not (args.quiet or args.compact))
    execute(harness.make_engine(config, trace=trace, max_iterations=args.max_iterations), result, harness.EXPECTED_TRACE)
    log.printer.log_intermediate_result('oracle fixture', str(result.status), str(result.verdict))
    if result.verdict != Verdict.TRUE:
        return result

    try:
        harness.check_scenarios(harness.make_engine(config, max_iterations=args.max_iterations))
    except AssertionFailure as x:
        result.verdict = Verdict.FALSE
        result.message = x.message
    except IterationLimitReached as x:
        result.status = Status.TIMEOUT
        result.verdict = Verdict.UNKNOWN
        result.message = str(x)
    return result


def log_result(name, config, result : Result):
    msg = [' (%s)' % config]
    if result.message:
        msg.append(': ' + result.message)
    log.printer.log_result(name, str(result.status), str(result.verdict), *msg)


def main(args):
    aborted = False
    verdict = Verdict.TRUE

    log.init_printer(args)

    if args.list_configs:
        for name in configs.available_engines():
            print(name)
        return 0

    if not args.program and not args.oracle:
        parser.print_usage()
        return 2

    config_names = args.config if args.config else ['TreeInterpreter']

    tasks = []
    for program in args.program:
        # process program argument
        extension = os.path.splitext(os.path.basename(program))[1]
        if extension == '.yml':
            with open(program, 'r') as file:
                task_yml = yaml.safe_load(file)
                tasks.append(Task.task_from_yml(task_yml, os.path.dirname(program), args))
        else:
            tasks.append(Task.task_from_args(program, args))

    try:
        if args.oracle:
            for config in config_names:
                result = run_oracle(config, args)
                log_result('oracle', config, result)
                verdict &= result.verdict

        for task in tasks:
            for config in config_names:
                result = run_task(task, config, args)
                log_result(task.program_name, config, result)
                verdict &= result.verdict
    except KeyboardInterrupt:
        log.printer.log_result('', str(Status.ABORTED_BY_USER), str(Verdict.UNKNOWN))
        aborted = True

    return 0 if verdict == Verdict.TRUE and not aborted else 1


from pyloop.params import parser


def cli():
    args = parser.parse_args()
    sys.exit(main(args))


if __name__ == '__main__':
    cli()
