"""Evaluation of literal expressions attached to decorators."""

from __future__ import annotations

from typing import Callable, Dict

from tree_sitter import Node

from ..errors import LiteralEvaluationError
from ..logging import get_logger
from ..models import (
    ArrayValue,
    BoolValue,
    LiteralValue,
    NumberValue,
    ObjectValue,
    SourceModule,
    StringValue,
    UnknownValue,
)
from .tree_sitter import line_of, named, node_text, string_value

logger = get_logger("literals")

_Evaluator = Callable[["LiteralEvaluator", Node, SourceModule], LiteralValue]


class LiteralEvaluator:
    """Converts object, array, string, number and boolean syntax to literal values.

    Unsupported expressions become :class:`UnknownValue` at the node where
    they occur, so the rest of the surrounding literal still evaluates.
    """

    def evaluate(self, node: Node, module: SourceModule) -> LiteralValue:
        try:
            return self._dispatch(node, module)
        except LiteralEvaluationError as exc:
            logger.warning("%s", exc)
            return UnknownValue(exc.kind)

    def _dispatch(self, node: Node, module: SourceModule) -> LiteralValue:
        evaluator = _EVALUATORS.get(node.type)
        if evaluator is None:
            raise LiteralEvaluationError(node.type, module.path, line_of(node))
        return evaluator(self, node, module)

    def _object(self, node: Node, module: SourceModule) -> LiteralValue:
        result = ObjectValue()
        for child in named(node):
            if child.type != "pair":
                logger.warning(
                    "%s",
                    LiteralEvaluationError(child.type, module.path, line_of(child)),
                )
                continue
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is None or value is None:
                continue
            try:
                name = self._key(key, module)
            except LiteralEvaluationError as exc:
                logger.warning("%s", exc)
                continue
            result.set(name, self.evaluate(value, module))
        return result

    def _array(self, node: Node, module: SourceModule) -> LiteralValue:
        return ArrayValue([self.evaluate(child, module) for child in named(node)])

    def _string(self, node: Node, module: SourceModule) -> LiteralValue:
        return StringValue(string_value(node, module.source))

    def _number(self, node: Node, module: SourceModule) -> LiteralValue:
        return NumberValue(parse_number(node_text(node, module.source)))

    def _true(self, node: Node, module: SourceModule) -> LiteralValue:
        return BoolValue(True)

    def _false(self, node: Node, module: SourceModule) -> LiteralValue:
        return BoolValue(False)

    def _key(self, node: Node, module: SourceModule) -> str:
        if node.type == "string":
            return string_value(node, module.source)
        if node.type == "number":
            return str(parse_number(node_text(node, module.source)))
        if node.type in {"property_identifier", "identifier"}:
            return node_text(node, module.source)
        raise LiteralEvaluationError(node.type, module.path, line_of(node))


_EVALUATORS: Dict[str, _Evaluator] = {
    "object": LiteralEvaluator._object,
    "array": LiteralEvaluator._array,
    "string": LiteralEvaluator._string,
    "number": LiteralEvaluator._number,
    "true": LiteralEvaluator._true,
    "false": LiteralEvaluator._false,
}


def parse_number(text: str) -> int | float:
    """Parse a JavaScript numeric literal."""
    cleaned = text.replace("_", "").rstrip("n")
    lower = cleaned.lower()
    if lower.startswith(("0x", "0o", "0b")):
        return int(lower, 0)
    try:
        return int(cleaned)
    except ValueError:
        return float(cleaned)


__all__ = ["LiteralEvaluator", "parse_number"]
