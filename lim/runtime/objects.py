"""Runtime values of the lim language.

Objects compare by identity. TRUE, FALSE and NULL are created once here and shared by the whole process, so the
evaluator can compare booleans and null with `is`. ReturnValue and Error are ordinary objects too: they travel through
the same return channel as every other value and the evaluator checks for them after each step.
"""

from abc import ABC, abstractmethod

INTEGER = "INTEGER"
BOOLEAN = "BOOLEAN"
STRING = "STRING"
ARRAY = "ARRAY"
FUNCTION = "FUNCTION"
BUILTIN = "BUILTIN"
NULL_OBJ = "NULL"
RETURN_VALUE = "RETURN_VALUE"
ERROR = "ERROR"


class LimObject(ABC):
    """Superclass of every runtime value."""
    TYPE = None

    @property
    def type(self):
        return self.TYPE

    @abstractmethod
    def inspect(self):
        """Returns the display form of this value, as written by print."""

    def __repr__(self):
        return f"{type(self).__name__}({self.inspect()})"


class Integer(LimObject):
    TYPE = INTEGER

    def __init__(self, value):
        self.value = value

    def inspect(self):
        return str(self.value)


class Boolean(LimObject):
    """Only ever instantiated twice: see TRUE and FALSE."""
    TYPE = BOOLEAN

    def __init__(self, value):
        self.value = value

    def inspect(self):
        return "true" if self.value else "false"


class String(LimObject):
    TYPE = STRING

    def __init__(self, value):
        self.value = value

    def inspect(self):
        return self.value


class Array(LimObject):
    TYPE = ARRAY

    def __init__(self, elements):
        self.elements = elements

    def inspect(self):
        return "[" + ", ".join(el.inspect() for el in self.elements) + "]"


class Null(LimObject):
    TYPE = NULL_OBJ

    def inspect(self):
        return "null"


class Function(LimObject):
    """A user function closed over env, the environment it was defined in."""
    TYPE = FUNCTION

    def __init__(self, name, parameters, body, env):
        self.name = name
        self.parameters = parameters
        self.body = body
        self.env = env

    def inspect(self):
        params = ", ".join(param.declaration() for param in self.parameters)
        return f"fn {self.name}({params}) {self.body}"


class Builtin(LimObject):
    """A host function. fn receives the evaluated arguments and returns a LimObject."""
    TYPE = BUILTIN

    def __init__(self, name, fn):
        self.name = name
        self.fn = fn

    def inspect(self):
        return f"builtin {self.name}"


class ReturnValue(LimObject):
    """Wraps the value of a return statement until the enclosing call (or the program) unwraps it."""
    TYPE = RETURN_VALUE

    def __init__(self, value):
        self.value = value

    def inspect(self):
        return self.value.inspect()


class Error(LimObject):
    TYPE = ERROR

    def __init__(self, message):
        self.message = message

    def inspect(self):
        return f"ERROR: {self.message}"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool(value):
    """Returns the shared TRUE/FALSE object for a Python bool."""
    return TRUE if value else FALSE


def is_error(obj):
    return obj is not None and obj.type == ERROR
