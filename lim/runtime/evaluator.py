"""Tree-walking evaluator for the lim language.

evaluate(node, env) handles every AST node type and returns a LimObject, or None for statements that only bind names
(declarations). Errors are Error objects, never Python exceptions: every step checks its operands with is_error and
hands an Error straight back, and blocks stop at the first Error or ReturnValue they see. A ReturnValue is unwrapped
exactly once, by the function call (or the program) that encloses it.

Recursion in the evaluated program is recursion in Python, so a runaway lim program ends in RecursionError.
"""

from lim.runtime.builtins import BUILTINS
from lim.runtime.objects import (ARRAY, BUILTIN, ERROR, FALSE, FUNCTION, INTEGER, NULL, RETURN_VALUE, STRING,
                                 Array, Error, Function, Integer, ReturnValue, String, is_error, native_bool)
from lim.syntax import ast

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def evaluate(node, env):
    """Evaluates node in env."""
    if isinstance(node, ast.Program):
        return _eval_program(node, env)

    elif isinstance(node, ast.ExpressionStatement):
        return evaluate(node.expression, env)

    elif isinstance(node, ast.BlockStatement):
        return _eval_block_statement(node, env)

    elif isinstance(node, ast.DeclareStatement):
        value = evaluate(node.value, env)
        if is_error(value):
            return value
        env.set(node.name.value, value)
        return None

    elif isinstance(node, ast.ArrayStatement):
        value = evaluate(node.value, env)
        if is_error(value):
            return value
        return env.set(node.name.value, value)

    elif isinstance(node, ast.ReturnStatement):
        if node.return_value is None:
            return ReturnValue(NULL)
        value = evaluate(node.return_value, env)
        if is_error(value):
            return value
        return ReturnValue(value)

    elif isinstance(node, ast.IfStatement):
        return _eval_if_statement(node, env)

    elif isinstance(node, ast.FunctionStatement):
        env.set(node.name, Function(node.name, node.parameters, node.body, env))
        return None

    elif isinstance(node, ast.IntegerLiteral):
        return Integer(node.value)

    elif isinstance(node, ast.Boolean):
        return native_bool(node.value)

    elif isinstance(node, ast.StringVal):
        return String(node.value)

    elif isinstance(node, ast.NullLiteral):
        return NULL

    elif isinstance(node, ast.ArrayLiteral):
        elements = _eval_expressions(node.elements, env)
        if isinstance(elements, Error):
            return elements
        return Array(elements)

    elif isinstance(node, ast.Identifier):
        return _eval_identifier(node, env)

    elif isinstance(node, ast.PrefixExpression):
        right = evaluate(node.right, env)
        if is_error(right):
            return right
        return _eval_prefix_expression(node.operator, right)

    elif isinstance(node, ast.InfixExpression):
        left = evaluate(node.left, env)
        if is_error(left):
            return left
        right = evaluate(node.right, env)
        if is_error(right):
            return right
        return _eval_infix_expression(node.operator, left, right)

    elif isinstance(node, ast.CallExpression):
        function = evaluate(node.function, env)
        if is_error(function):
            return function
        args = _eval_expressions(node.arguments, env)
        if isinstance(args, Error):
            return args
        return apply_function(function, args)

    elif isinstance(node, ast.IndexExpression):
        left = evaluate(node.left, env)
        if is_error(left):
            return left
        index = evaluate(node.index, env)
        if is_error(index):
            return index
        return _eval_index_expression(left, index)

    raise TypeError(f"cannot evaluate {type(node).__name__} node")


def _eval_program(program, env):
    """Runs statements in order. A top-level return ends the program with the returned value."""
    result = None
    for stmt in program.statements:
        result = evaluate(stmt, env)

        if result is not None and result.type == RETURN_VALUE:
            return result.value
        if is_error(result):
            return result
    return result if result is not None else NULL


def _eval_block_statement(block, env):
    """Runs statements in order, stopping at (and passing on, still wrapped) the first ReturnValue or Error."""
    result = None
    for stmt in block.statements:
        result = evaluate(stmt, env)

        if result is not None and result.type in (RETURN_VALUE, ERROR):
            return result
    return result if result is not None else NULL


def _eval_if_statement(link, env):
    for link in link.chain():
        if link.condition is None:
            return evaluate(link.consequence, env)

        condition = evaluate(link.condition, env)
        if is_error(condition):
            return condition
        if is_truthy(condition):
            return evaluate(link.consequence, env)
    return NULL


def is_truthy(obj):
    """Only null and false are falsy. Integer zero, empty strings and empty arrays are all truthy."""
    return obj is not NULL and obj is not FALSE


def _eval_expressions(expressions, env):
    """Evaluates expressions left to right. Returns the list of values, or the first Error encountered."""
    result = []
    for expr in expressions:
        evaluated = evaluate(expr, env)
        if is_error(evaluated):
            return evaluated
        result.append(evaluated)
    return result


def _eval_identifier(node, env):
    value = env.get(node.value)
    if value is not None:
        return value

    builtin = BUILTINS.get(node.value)
    if builtin is not None:
        return builtin

    return Error(f"identifier not found: {node.value}")


def apply_function(fn, args):
    """Calls a user function or builtin with already evaluated args."""
    if fn.type == BUILTIN:
        return fn.fn(*args)

    if fn.type != FUNCTION:
        return Error(f"not a function: {fn.type}")

    if len(args) != len(fn.parameters):
        return Error(f"wrong number of arguments to `{fn.name}`: got={len(args)}, want={len(fn.parameters)}")

    call_env = fn.env.enclosed()
    for param, arg in zip(fn.parameters, args):
        call_env.set(param.value, arg)

    evaluated = evaluate(fn.body, call_env)
    if evaluated.type == RETURN_VALUE:
        return evaluated.value
    return evaluated


def _eval_prefix_expression(operator, right):
    if operator == "!":
        return native_bool(not is_truthy(right))

    if operator in ("-", "+"):
        if right.type != INTEGER:
            return Error(f"unknown operator: {operator}{right.type}")
        return Integer(wrap_int64(-right.value if operator == "-" else right.value))

    return Error(f"unknown operator: {operator}{right.type}")


def _eval_infix_expression(operator, left, right):
    if left.type == INTEGER and right.type == INTEGER:
        return _eval_integer_infix_expression(operator, left.value, right.value)

    if left.type == STRING and right.type == STRING:
        if operator == "+":
            return String(left.value + right.value)
        return Error(f"unknown operator: {left.type} {operator} {right.type}")

    if operator == "==":
        return native_bool(left is right)
    if operator == "!=":
        return native_bool(left is not right)

    if left.type != right.type:
        return Error(f"type mismatch: {left.type} {operator} {right.type}")
    return Error(f"unknown operator: {left.type} {operator} {right.type}")


def _eval_integer_infix_expression(operator, left, right):
    if operator == "+":
        return Integer(wrap_int64(left + right))
    elif operator == "-":
        return Integer(wrap_int64(left - right))
    elif operator == "*":
        return Integer(wrap_int64(left * right))
    elif operator in ("/", "%"):
        if right == 0:
            return Error("division by zero")
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        if operator == "/":
            return Integer(wrap_int64(quotient))
        return Integer(wrap_int64(left - right * quotient))
    elif operator == "<":
        return native_bool(left < right)
    elif operator == ">":
        return native_bool(left > right)
    elif operator == "<=":
        return native_bool(left <= right)
    elif operator == ">=":
        return native_bool(left >= right)
    elif operator == "==":
        return native_bool(left == right)
    elif operator == "!=":
        return native_bool(left != right)
    return Error(f"unknown operator: {INTEGER} {operator} {INTEGER}")


def _eval_index_expression(left, index):
    if left.type != ARRAY:
        return Error(f"index operator not supported: {left.type}")
    if index.type != INTEGER:
        return Error(f"array index must be {INTEGER}, got {index.type}")

    length = len(left.elements)
    if not 0 <= index.value < length:
        return Error(f"index out of range: {index.value} (length {length})")
    return left.elements[index.value]


def wrap_int64(value):
    """Wraps value into the signed 64-bit range, two's complement style."""
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return (value - INT64_MIN) % 2 ** 64 + INT64_MIN
