"""Built-in functions. They are consulted after the environment chain, so a user binding shadows a builtin."""

from lim.runtime.objects import ARRAY, STRING, Builtin, Error, Integer, NULL


def lim_len(*args):
    if len(args) != 1:
        return Error(f"wrong number of arguments. got={len(args)}, want=1")

    arg, = args
    if arg.type == ARRAY:
        return Integer(len(arg.elements))
    if arg.type == STRING:
        return Integer(len(arg.value))
    return Error(f"argument to `len` not supported, got {arg.type}")


def lim_print(*args):
    """Writes the display form of each argument, separated by spaces, followed by a newline."""
    print(*(arg.inspect() for arg in args))
    return NULL


BUILTINS = {
    "len": Builtin("len", lim_len),
    "print": Builtin("print", lim_print),
}
