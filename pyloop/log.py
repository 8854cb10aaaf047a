

class LogPrinter:
    def __init__(self, compact=False, log_level=0):
        self.compact = compact
        self.log_level = log_level

    @staticmethod
    def from_args(args):
        return LogPrinter(args.compact, args.log_level)

    def log_status(self, *msg):
        if not self.compact:
            print('\r',  *msg, end='')

    def log_task(self, program_name, configs):
        if not self.compact:
            conf = str(configs[0]) if len(configs) == 1 else configs
            print('Running ', program_name, 'using', conf)

    #
    def log_debug(self, level, *msg):
        if not self.compact and self.log_level >= level:
            print(*msg)

    def log_result(self, programname, status, verdict, *msg):
        if not self.compact:
            print('\n', programname, ': ', status, ' ', verdict, *msg, sep='')
        else:
            print(programname, ': ', status, ' ', verdict, *msg, sep='')

    def log_intermediate_result(self, programname, status, verdict, *msg):
        if not self.compact and self.log_level >= 1:
            print('\n', programname, ': ', status, ' ', verdict, *msg, sep='')


# global object for printing messages
printer = LogPrinter()

def init_printer(args):
    """
    initialize global printer object from args
    """
    global printer
    printer = LogPrinter.from_args(args)
