import sys

from parsley import *

SHELL = (
    "!used as shell interpreter, i.e. used in a script file like this:\n"
    "\n"
    "    #!/usr/local/bin/ace -s\n"
    "    #\n"
    "    <ace commands>\n"
    "    # end\n"
    "\n"
    "The source file is set to standard input, the target file is\n"
    "set to standard output. Commands are read from the script file,\n"
    "and all reports are sent to /dev/null."
)

SPECS = (
    str_spec("command", "c", "defines command input file, uses standard in if not specified."),
    str_spec("report", "r", "defines report output file, uses standard error if not specified."),
    str_spec("option", "o", "initial command string, e.g. '%Q'.").with_default("").with_envvar("ACE_OPTION"),
    enum_spec("mode", "m", "line ending mode.", ("unix", "dos", "mac")).with_default("unix"),
    int_spec("width", "w", "maximum line width.").with_range(1, 1024).with_default(80),
    flag_spec("shell", "s", SHELL),
    flag_spec("quiet", "q", "quiet, i.e. suppress output of copyright info on program start.").with_envvar("ACE_QUIET"),
    flag_spec("license", "l", "display licence information and exit.", singleton=True),
    version(),
    help(),
)


def main(arguments, environ=None, *, stdout=None, stderr=None):
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    parser = Parsley(SPECS, separator=True, nomore=True)
    if not parser.process(arguments, environ=environ):
        report(parser.error, file=stderr)
        print(file=stderr)
        parser.print_help(stderr)
        return 2

    options = parser.options
    if options["help"].flag:
        parser.print_help(stdout)
        return 0
    if options["version"].flag:
        print("parsley %s" % __version__, file=stdout)
        return 0
    if options["license"].flag:
        print("parsley is released under the %s license." % __license__, file=stdout)
        return 0

    for name in options:
        print("%-10s %r" % (name, options[name]), file=stdout)
    print("params: %s" % join(parser.parameters), file=stdout)
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
