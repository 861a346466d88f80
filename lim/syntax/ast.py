"""Abstract syntax tree for the lim language.

Every node keeps the token it was built from (for diagnostics) and can render itself back to lim source with str().
Rendering is chosen so that parsing str(node) gives back an equal node: prefix, infix and index expressions are fully
parenthesised, strings are quoted and blocks span lines. Equality is structural; token positions are ignored.
"""

from abc import ABC, abstractmethod

from lim.syntax.tokens import Token, TokenType


class Node(ABC):
    """Superclass of every AST node."""
    FIELDS = ()  # names of the attributes that take part in equality and display

    def __init__(self, token):
        self.token = token

    def token_literal(self):
        return self.token.literal

    @abstractmethod
    def __str__(self):
        """Renders this node as lim source text."""

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Node>(
            field=<Node>(...),
            field=[
                <Node>(...),
            ],
            field=<value>,
        )
        """
        pad = "    " * indents
        result = f"{type(self).__name__}("
        for field in self.FIELDS:
            value = getattr(self, field)
            if isinstance(value, Node):
                value = value.display(indents + 1).lstrip()
            elif isinstance(value, list):
                items = "".join(f"\n{item.display(indents + 2)}," for item in value)
                value = f"[{items}\n{pad}    ]" if value else "[]"
            else:
                value = repr(value)
            result += f"\n{pad}    {field}={value},"
        return pad + result + (f"\n{pad})" if self.FIELDS else ")")

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, field) == getattr(other, field) for field in self.FIELDS)

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}({str(self)!r})"


class Expression(Node, ABC):
    """A node that produces a value."""


class Statement(Node, ABC):
    """A node that is executed for its effect or binding."""


class Program(Node):
    """Root node: the ordered statements of a whole source text."""
    FIELDS = ("statements",)

    def __init__(self, statements=None):
        super().__init__(Token(TokenType.EOF, ""))
        self.statements = statements if statements is not None else []

    def token_literal(self):
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self):
        return "\n".join(str(stmt) for stmt in self.statements)


class Identifier(Expression):
    """A name. type_name is set for typed function parameters: 'int', 'bool', 'string', or one of these + ' []'."""
    FIELDS = ("value", "type_name")

    def __init__(self, token, value, type_name=None):
        super().__init__(token)
        self.value = value
        self.type_name = type_name

    def declaration(self):
        """Renders the identifier with its declared type, as in a parameter list."""
        if self.type_name is None:
            return self.value
        if self.type_name.endswith("[]"):
            return f"{self.type_name}{self.value}"  # int []xs
        return f"{self.type_name} {self.value}"

    def __str__(self):
        return self.value


class IntegerLiteral(Expression):
    FIELDS = ("value",)

    def __init__(self, token, value):
        super().__init__(token)
        self.value = value

    def __str__(self):
        return str(self.value)


class Boolean(Expression):
    FIELDS = ("value",)

    def __init__(self, token, value):
        super().__init__(token)
        self.value = value

    def __str__(self):
        return "true" if self.value else "false"


class StringVal(Expression):
    """String literal. The value never contains a double quote (the lexer has no escapes)."""
    FIELDS = ("value",)

    def __init__(self, token, value):
        super().__init__(token)
        self.value = value

    def __str__(self):
        return f'"{self.value}"'


class NullLiteral(Expression):

    def __str__(self):
        return "null"


class ArrayLiteral(Expression):
    FIELDS = ("elements",)

    def __init__(self, token, elements):
        super().__init__(token)
        self.elements = elements

    def __str__(self):
        return "[" + ", ".join(str(el) for el in self.elements) + "]"


class PrefixExpression(Expression):
    FIELDS = ("operator", "right")

    def __init__(self, token, operator, right):
        super().__init__(token)
        self.operator = operator
        self.right = right

    def __str__(self):
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    FIELDS = ("left", "operator", "right")

    def __init__(self, token, left, operator, right):
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


class CallExpression(Expression):
    """function(arguments). function is any expression that evaluates to something callable."""
    FIELDS = ("function", "arguments")

    def __init__(self, token, function, arguments):
        super().__init__(token)
        self.function = function
        self.arguments = arguments

    def __str__(self):
        return f"{self.function}(" + ", ".join(str(arg) for arg in self.arguments) + ")"


class IndexExpression(Expression):
    FIELDS = ("left", "index")

    def __init__(self, token, left, index):
        super().__init__(token)
        self.left = left
        self.index = index

    def __str__(self):
        return f"({self.left}[{self.index}])"


class DeclareStatement(Statement):
    """Typed variable declaration: <KIND> name = value. Subclasses fix KIND and the ZERO value used when the
    declaration has no initializer.
    """
    FIELDS = ("name", "value")
    KIND = None

    def __init__(self, token, name, value=None):
        super().__init__(token)
        self.name = name
        self.value = value if value is not None else self.zero()

    @classmethod
    def zero(cls):
        """Returns a fresh literal node holding this kind's zero value."""

    def __str__(self):
        return f"{self.KIND} {self.name} = {self.value}"


class IntStatement(DeclareStatement):
    KIND = "int"

    @classmethod
    def zero(cls):
        return IntegerLiteral(Token(TokenType.INT, "0"), 0)


class BoolStatement(DeclareStatement):
    KIND = "bool"

    @classmethod
    def zero(cls):
        return Boolean(Token(TokenType.FALSE, "false"), False)


class StringStatement(DeclareStatement):
    KIND = "string"

    @classmethod
    def zero(cls):
        return StringVal(Token(TokenType.STRING, ""), "")


class ArrayStatement(Statement):
    """Typed array declaration: <kind> []name = value."""
    FIELDS = ("kind", "name", "value")

    def __init__(self, token, kind, name, value=None):
        super().__init__(token)
        self.kind = kind
        self.name = name
        self.value = value if value is not None else ArrayLiteral(Token(TokenType.LBRACK, "["), [])

    def __str__(self):
        return f"{self.kind} []{self.name} = {self.value}"


class ReturnStatement(Statement):
    """return [value]. A bare return yields null."""
    FIELDS = ("return_value",)

    def __init__(self, token, return_value=None):
        super().__init__(token)
        self.return_value = return_value

    def __str__(self):
        if self.return_value is None:
            return "return"
        return f"return {self.return_value}"


class ExpressionStatement(Statement):
    FIELDS = ("expression",)

    def __init__(self, token, expression):
        super().__init__(token)
        self.expression = expression

    def __str__(self):
        return str(self.expression)


class BlockStatement(Statement):
    FIELDS = ("statements",)

    def __init__(self, token, statements=None):
        super().__init__(token)
        self.statements = statements if statements is not None else []

    def __str__(self):
        body = "".join(f"{stmt}\n" for stmt in self.statements)
        return "{\n" + body + "}"


class IfStatement(Statement):
    """One link of an if / else if / else chain. condition is None for the terminal else link. The chain is built
    front to back by the parser, so next_case never points at an earlier link.
    """
    FIELDS = ("condition", "consequence", "next_case")

    def __init__(self, token, condition, consequence, next_case=None):
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.next_case = next_case

    def chain(self):
        """Yields every link of the chain starting at this one."""
        link = self
        while link is not None:
            yield link
            link = link.next_case

    def __str__(self):
        parts = []
        for idx, link in enumerate(self.chain()):
            if link.condition is None:
                parts.append(f"else {link.consequence}")
            else:
                parts.append(("" if idx == 0 else "else ") + f"if {link.condition} {link.consequence}")
        return " ".join(parts)


class FunctionStatement(Statement):
    """fn name(parameters) return_type { body }. Parameters are Identifiers carrying their declared type."""
    FIELDS = ("name", "parameters", "return_type", "body")

    def __init__(self, token, name, parameters, return_type, body):
        super().__init__(token)
        self.name = name
        self.parameters = parameters
        self.return_type = return_type
        self.body = body

    def signature(self):
        params = ", ".join(param.declaration() for param in self.parameters)
        result = f"fn {self.name}({params})"
        if self.return_type:
            result += f" {self.return_type}"
        return result

    def __str__(self):
        return f"{self.signature()} {self.body}"
