from __future__ import annotations

from typing import Iterator, Optional, Tuple

from zmes_parser.models.parameters import Parameter


def find_parameter(parameter: Parameter, name: str) -> Optional[Parameter]:
    """First immediate child of ``parameter`` named ``name`` (shallow search)."""
    for child in parameter.children:
        if child.name == name:
            return child
    return None


def find_parameter_deep(parameter: Parameter, name: str) -> Optional[Parameter]:
    """
    First node named ``name`` in a pre-order walk starting at ``parameter`` itself.

    Exact name match; stops at the first hit.
    """
    stack = [parameter]
    while stack:
        node = stack.pop()
        if node.name == name:
            return node
        stack.extend(reversed(node.children))
    return None


def iter_parameters(parameter: Parameter) -> Iterator[Tuple[Tuple[str, ...], Parameter]]:
    """Pre-order walk yielding (path of names from the root, parameter)."""
    stack = [((parameter.name,), parameter)]
    while stack:
        path, node = stack.pop()
        yield path, node
        for child in reversed(node.children):
            stack.append((path + (child.name,), child))
