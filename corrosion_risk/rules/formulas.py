"""
Output Formula Evaluator — Sandboxed Arithmetic Over Ratings

Norm outputs are textual formulas such as `values.Z1 + values.Z2`.
Formulas are parsed once into a restricted expression tree and
interpreted against the rating mapping. No formula text is ever handed
to a general-purpose evaluator.

Grammar:
- numeric literals, parentheses
- binary + - * / // % **, unary + -
- `values.CODE` and `values["CODE"]` lookups (the only identifier)

Constraints:
- One bad formula never aborts its siblings: failed outputs default to 0
- Every configured output name appears in the result
- Outputs cannot reference other outputs
"""

import ast
import logging
import math
import operator
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Tuple, Union

from corrosion_risk.schemas import OutputDefinition


logger = logging.getLogger(__name__)

Number = Union[int, float]

# The only name a formula may use
VALUES_IDENTIFIER = "values"

# Output value when a formula cannot be evaluated
FAILED_OUTPUT_VALUE = 0

# Largest exponent accepted by **
MAX_EXPONENT = 64

# Longest formula text accepted (characters)
MAX_FORMULA_LENGTH = 4096


class FormulaError(ValueError):
    """A formula could not be compiled or evaluated."""


# ============================================================================
# Expression tree
# ============================================================================

@dataclass(frozen=True)
class Literal:
    value: Number


@dataclass(frozen=True)
class Lookup:
    key: str


@dataclass(frozen=True)
class Unary:
    symbol: str
    operand: "Node"


@dataclass(frozen=True)
class Binary:
    symbol: str
    left: "Node"
    right: "Node"


Node = Union[Literal, Lookup, Unary, Binary]


def _power(base: Number, exponent: Number) -> Number:
    if abs(exponent) > MAX_EXPONENT:
        raise FormulaError(f"exponent {exponent} exceeds limit of {MAX_EXPONENT}")
    return float(base) ** float(exponent)


BINARY_OPERATORS: Dict[type, Tuple[str, Callable[[Number, Number], Number]]] = {
    ast.Add: ("+", operator.add),
    ast.Sub: ("-", operator.sub),
    ast.Mult: ("*", operator.mul),
    ast.Div: ("/", operator.truediv),
    ast.FloorDiv: ("//", operator.floordiv),
    ast.Mod: ("%", operator.mod),
    ast.Pow: ("**", _power),
}

UNARY_OPERATORS: Dict[type, Tuple[str, Callable[[Number], Number]]] = {
    ast.UAdd: ("+", operator.pos),
    ast.USub: ("-", operator.neg),
}

_BINARY_BY_SYMBOL = {symbol: fn for symbol, fn in BINARY_OPERATORS.values()}
_UNARY_BY_SYMBOL = {symbol: fn for symbol, fn in UNARY_OPERATORS.values()}


# ============================================================================
# Compilation
# ============================================================================

@dataclass(frozen=True)
class CompiledFormula:
    """A parsed formula ready for repeated evaluation."""
    source: str
    root: Node
    references: FrozenSet[str]

    def evaluate(self, ratings: Mapping[str, Number]) -> Number:
        """
        Evaluate against a rating mapping.

        Raises:
            FormulaError: missing key, non-numeric rating, arithmetic failure,
                or non-finite result
        """
        try:
            result = _evaluate(self.root, ratings)
        except ZeroDivisionError:
            raise FormulaError("division by zero")
        except OverflowError:
            raise FormulaError("numeric overflow")
        except RecursionError:
            raise FormulaError("formula is nested too deeply")

        if not isinstance(result, (int, float)):
            raise FormulaError(f"non-numeric result {result!r}")
        if isinstance(result, float) and not math.isfinite(result):
            raise FormulaError(f"non-finite result {result}")
        return result


def _normalise_source(formula: str) -> str:
    """Accept legacy `return ...;` formulas."""
    text = formula.strip()
    if text.startswith("return "):
        text = text[len("return "):].strip()
    while text.endswith(";"):
        text = text[:-1].rstrip()
    return text


def _lookup_key(node: ast.AST) -> str:
    """Rating key of a `values.X` / `values["X"]` node."""
    if isinstance(node, ast.Attribute):
        target, key = node.value, node.attr
    elif isinstance(node, ast.Subscript):
        target, index = node.value, node.slice
        if not (isinstance(index, ast.Constant) and isinstance(index.value, (str, int))):
            raise FormulaError("rating keys must be written as literals")
        if isinstance(index.value, bool):
            raise FormulaError("rating keys must be written as literals")
        key = str(index.value)
    else:
        raise FormulaError(f"unsupported expression: {type(node).__name__}")

    if not (isinstance(target, ast.Name) and target.id == VALUES_IDENTIFIER):
        raise FormulaError(f"only '{VALUES_IDENTIFIER}' may be accessed")
    return key


def _translate(node: ast.AST) -> Node:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(f"unsupported literal: {node.value!r}")
        return Literal(node.value)

    if isinstance(node, ast.BinOp):
        entry = BINARY_OPERATORS.get(type(node.op))
        if entry is None:
            raise FormulaError(f"unsupported operator: {type(node.op).__name__}")
        return Binary(entry[0], _translate(node.left), _translate(node.right))

    if isinstance(node, ast.UnaryOp):
        entry = UNARY_OPERATORS.get(type(node.op))
        if entry is None:
            raise FormulaError(f"unsupported operator: {type(node.op).__name__}")
        return Unary(entry[0], _translate(node.operand))

    if isinstance(node, (ast.Attribute, ast.Subscript)):
        return Lookup(_lookup_key(node))

    if isinstance(node, ast.Name):
        raise FormulaError(
            f"unknown name '{node.id}'; ratings are read as {VALUES_IDENTIFIER}.CODE"
        )

    raise FormulaError(f"unsupported expression: {type(node).__name__}")


def _collect_references(node: Node) -> FrozenSet[str]:
    if isinstance(node, Lookup):
        return frozenset({node.key})
    if isinstance(node, Unary):
        return _collect_references(node.operand)
    if isinstance(node, Binary):
        return _collect_references(node.left) | _collect_references(node.right)
    return frozenset()


@lru_cache(maxsize=512)
def compile_formula(formula: str) -> CompiledFormula:
    """
    Parse a formula into a restricted expression tree.

    Raises:
        FormulaError: empty or oversized formula, syntax error or
            disallowed construct
    """
    if not isinstance(formula, str):
        raise FormulaError("formula must be text")
    source = _normalise_source(formula)
    if not source:
        raise FormulaError("formula is empty")
    if len(source) > MAX_FORMULA_LENGTH:
        raise FormulaError(f"formula exceeds {MAX_FORMULA_LENGTH} characters")

    try:
        tree = ast.parse(source, mode="eval")
        root = _translate(tree.body)
        references = _collect_references(root)
    except FormulaError:
        raise
    except SyntaxError as e:
        raise FormulaError(f"syntax error: {e.msg}") from e
    except (RecursionError, MemoryError) as e:
        raise FormulaError("formula is nested too deeply") from e
    except ValueError as e:
        # e.g. NUL bytes in the source
        raise FormulaError(f"unparseable formula: {e}") from e

    return CompiledFormula(source=source, root=root, references=references)


def _evaluate(node: Node, ratings: Mapping[str, Number]) -> Number:
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Lookup):
        if node.key not in ratings:
            raise FormulaError(f"no rating for '{node.key}'")
        value = ratings[node.key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FormulaError(f"rating '{node.key}' is not numeric")
        return value
    if isinstance(node, Unary):
        return _UNARY_BY_SYMBOL[node.symbol](_evaluate(node.operand, ratings))
    return _BINARY_BY_SYMBOL[node.symbol](
        _evaluate(node.left, ratings),
        _evaluate(node.right, ratings),
    )


# ============================================================================
# Output evaluation
# ============================================================================

def evaluate_formula(formula: str, ratings: Mapping[str, Number]) -> Number:
    """Compile (cached) and evaluate one formula. Raises FormulaError."""
    return compile_formula(formula).evaluate(ratings)


def evaluate_outputs_detailed(
    ratings: Mapping[str, Number],
    output_config: Iterable[OutputDefinition],
) -> Tuple[Dict[str, Number], Dict[str, str]]:
    """
    Evaluate every output, collecting per-output failures.

    Returns:
        (outputs, errors) where outputs has an entry for every configured
        name and errors maps failed names to a message
    """
    outputs: Dict[str, Number] = {}
    errors: Dict[str, str] = {}

    for output in output_config:
        try:
            outputs[output.name] = evaluate_formula(output.formula, ratings)
        except FormulaError as e:
            logger.warning(f"Output '{output.name}' failed ({output.formula!r}): {e}")
            outputs[output.name] = FAILED_OUTPUT_VALUE
            errors[output.name] = str(e)

    return outputs, errors


def evaluate_outputs(
    ratings: Mapping[str, Number],
    output_config: Iterable[OutputDefinition],
) -> Dict[str, Number]:
    """
    Compute named output scores from a rating mapping.

    Failed formulas are logged and default to 0; this never raises.
    """
    outputs, _ = evaluate_outputs_detailed(ratings, output_config)
    return outputs
