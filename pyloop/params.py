import argparse


parser = argparse.ArgumentParser(prog='pyloop', description='runs loop programs with exact break/continue semantics')
parser.add_argument('program', help='the programs (.py) or task files (.yml) to run', nargs='*')

parser.add_argument('-o', '--output-directory', help='directory to write results to', type=str, default='out')

parser.add_argument('-c', '--config', action='append', help='which execution engine to use, can be given more than once (default: TreeInterpreter, use --list-configs to get a list of available ones)')
parser.add_argument('--list-configs', help='list the available execution engines', action='store_true')

parser.add_argument('--max-iterations', help='maximum number of loop body entries per run', type=int, default=100000)

parser.add_argument('--oracle', help='run the break/continue conformance fixture', action='store_true')
parser.add_argument('--render', help='render AST and CFA graphs (needs the graphviz binaries)', action='store_true')

parser.add_argument('--compact', help='print less output (only program and verdict)', action='store_true')
parser.add_argument('--quiet', help='do not echo the trace of the programs', action='store_true')
parser.add_argument('--log-level', help='level of debugging output', type=int, default='0')

parser.add_argument('-v', '--version', help='show version', action='version', version='%(prog)s 0.1')
