"""
Argoparse config trees: flatten a nested declaration, rebuild the decoded result.

A config tree is caller-provided nesting of
- Param values,
- lists/tuples of config values,
- mappings of name → config value.

parse_config() walks it once, depth first (mapping key order, then sequence order),
assigning each Param an index in 'ordered_params'. The same order drives positional
binding, so arguments bind in declaration order. reconstruct() maps the flat list of
decoded values back onto the original shape.

    >>> from argoparse import flags
    >>> config = parse_config({"db": {"host": flags.string("host"), "port": flags.integer("port")}})
    >>> reconstruct(config.tree, ["localhost", 5432])
    {'db': {'host': 'localhost', 'port': 5432}}
"""
from collections.abc import Mapping
from typing import NamedTuple

from .params import Kind, Param


class ParamNode(NamedTuple):
    index: int


class ArrayNode(NamedTuple):
    children: tuple


class NestedNode(NamedTuple):
    tree: dict


class ConfigInternal(NamedTuple):
    flags: tuple
    arguments: tuple
    ordered_params: tuple
    tree: dict


def parse_config(config, /):
    """
    Flatten a config mapping into a ConfigInternal.

    Raises
    - TypeError: when config (or any nested value) is neither a param, a list/tuple,
      nor a mapping with string keys.
    """
    ordered = []
    flags = []
    arguments = []

    def walk(mapping):
        if not isinstance(mapping, Mapping):
            raise TypeError(f"config must be a mapping, not {type(mapping).__name__}")
        tree = {}
        for key, value in mapping.items():
            if not isinstance(key, str):
                raise TypeError("config keys must be strings")
            tree[key] = visit(value)
        return tree

    def visit(value):
        if isinstance(value, Param):
            ordered.append(value)
            (arguments if value.kind is Kind.ARGUMENT else flags).append(value)
            return ParamNode(len(ordered) - 1)
        if isinstance(value, list | tuple):
            return ArrayNode(tuple(map(visit, value)))
        return NestedNode(walk(value))

    tree = walk({} if config is None else config)
    return ConfigInternal(tuple(flags), tuple(arguments), tuple(ordered), tree)


def _value(node, results):
    match node:
        case ParamNode(index=index):
            return results[index]
        case ArrayNode(children=children):
            return [_value(child, results) for child in children]
        case NestedNode(tree=tree):
            return reconstruct(tree, results)


def reconstruct(tree, results, /):
    return {key: _value(node, results) for key, node in tree.items()}


__all__ = (
    "ParamNode",
    "ArrayNode",
    "NestedNode",
    "ConfigInternal",
    "parse_config",
    "reconstruct",
)
