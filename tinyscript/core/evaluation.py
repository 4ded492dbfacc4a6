"""Tree-walking evaluation of parsed tinyscript programs.

Evaluation rules:
    - Values are Python ints (arbitrary precision, so there is no overflow). Integers double as booleans: conditions
      are true when non-zero, and "==" / "<" evaluate to 1 or 0.
    - There is a single flat scope: blocks don't introduce new variables, and "let" inside a loop body binds in the
      same Environment as "let" at the top level.
    - "let" binds or overwrites. Plain assignment only overwrites, so assigning to an undeclared name is an error.
    - Built-in calls happen in program order. If evaluation raises, the output holds exactly what was printed before
      the failing statement.
"""

from tinyscript.core.syntax import (Assignment, BinaryOp, FunctionCall, IfElse, Literal, VariableDeclaration,
                                    VariableReference, WhileLoop)
from tinyscript.lang.error import GenericException, UndefinedVariable, UnknownFunction


class Environment:
    """Flat mapping of variable name to int value. Lives for one evaluation unless passed explicitly to another."""

    def __init__(self):
        self.bindings = {}

    def declare(self, name, value):
        """Binds name to value, overwriting any previous binding."""
        self.bindings[name] = value

    def assign(self, name, value, position=None):
        """Overwrites existing binding of name. Raises UndefinedVariable if name was never declared."""
        if name not in self.bindings:
            raise UndefinedVariable(name, position)
        self.bindings[name] = value

    def lookup(self, name, position=None):
        """Returns value bound to name. Raises UndefinedVariable if name was never declared."""
        try:
            return self.bindings[name]
        except KeyError:
            raise UndefinedVariable(name, position) from None

    def __contains__(self, name):
        return name in self.bindings

    def __repr__(self):
        return f"Environment({self.bindings!r})"


class Evaluator:
    """Executes Programs statement by statement. Every value passed to print is appended to self.output and handed to
    sink (if given) as soon as it is produced.
    """

    def __init__(self, sink=None, error_handler=None):
        self.sink = sink
        self.error_handler = error_handler  # only used for warnings
        self.builtins = {"print": self._print}

        self.environment = None
        self.output = []

    def evaluate(self, program, environment=None):
        """Runs program against environment (a fresh Environment if None) and returns the printed values in order."""
        self.environment = Environment() if environment is None else environment
        self.output = []

        self.execute_block(program)
        return self.output

    def execute_block(self, statements):
        for statement in statements:
            self.execute(statement)

    def execute(self, statement):
        """Executes a single statement for its effect on self.environment and self.output."""
        if isinstance(statement, VariableDeclaration):
            value = self.evaluate_expression(statement.initializer)
            if statement.name in self.environment and self.error_handler is not None:
                msg = "'{}' redeclared, previous value is overwritten"
                self.error_handler.warn(msg, statement.name, position=statement.name_position,
                                        length=len(statement.name))
            self.environment.declare(statement.name, value)

        elif isinstance(statement, Assignment):
            value = self.evaluate_expression(statement.expression)
            self.environment.assign(statement.name, value, statement.position)

        elif isinstance(statement, IfElse):
            if self.evaluate_expression(statement.condition) != 0:
                self.execute_block(statement.then_branch)
            else:
                self.execute_block(statement.else_branch)

        elif isinstance(statement, WhileLoop):
            while self.evaluate_expression(statement.condition) != 0:
                self.execute_block(statement.body)

        elif isinstance(statement, FunctionCall):
            if statement.name not in self.builtins:
                raise UnknownFunction(statement.name, statement.position)
            arguments = [self.evaluate_expression(argument) for argument in statement.arguments]
            self.builtins[statement.name](*arguments)

        else:
            raise GenericException("unsupported statement '{}'", repr(statement), internal=True)

    def evaluate_expression(self, expression):
        """Returns the int value of expression in self.environment."""
        if isinstance(expression, Literal):
            return expression.value

        elif isinstance(expression, VariableReference):
            return self.environment.lookup(expression.name, expression.position)

        elif isinstance(expression, BinaryOp):
            left = self.evaluate_expression(expression.left)
            right = self.evaluate_expression(expression.right)

            if expression.op == "+":
                return left + right
            elif expression.op == "==":
                return 1 if left == right else 0
            elif expression.op == "<":
                return 1 if left < right else 0

            raise GenericException("unsupported operator '{}'", expression.op, internal=True)

        raise GenericException("unsupported expression '{}'", repr(expression), internal=True)

    def _print(self, value):
        """Built-in print: records value and forwards it to the sink."""
        self.output.append(value)
        if self.sink is not None:
            self.sink(value)


def run(program, sink=None):
    """Evaluates program with a fresh Environment and returns the list of printed values."""
    return Evaluator(sink).evaluate(program)
