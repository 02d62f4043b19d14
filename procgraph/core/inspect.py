"""
Callable inspection used to invoke callback functions.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, List, Sequence, Tuple, TYPE_CHECKING

from .nodes import ArgumentBindingError
from .parameters import Parameter

if TYPE_CHECKING:
    from .builder import ProcessBuilder

BUILDER_ARGUMENT = "builder"


class InspectionError(ArgumentBindingError):
    """Raised when a callback signature cannot be satisfied."""


def bind_callback_arguments(
    func: Callable[..., Any],
    builder: "ProcessBuilder",
    parameters: Sequence[Parameter],
) -> Tuple[List[Any], Dict[str, Any]]:
    """Return (args, kwargs) for calling ``func`` as a callback.

    Function arguments named like a callback parameter receive that
    parameter, an argument called ``builder`` receives the nested
    builder, and every other argument takes the next unclaimed callback
    parameter in declared order.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return list(parameters), {}

    by_name = {param.name: param for param in parameters}
    signature_params = list(signature.parameters.values())
    claimed = {sp.name for sp in signature_params if sp.name in by_name}
    pool = [param for param in parameters if param.name not in claimed]

    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    positional = True
    for sp in signature_params:
        if sp.kind is inspect.Parameter.VAR_POSITIONAL:
            if positional:
                args.extend(pool)
                pool = []
            continue
        if sp.kind is inspect.Parameter.VAR_KEYWORD:
            continue

        if sp.name == BUILDER_ARGUMENT:
            value: Any = builder
        elif sp.name in by_name:
            value = by_name[sp.name]
        elif pool:
            value = pool.pop(0)
        elif sp.default is not inspect.Parameter.empty:
            positional = False
            continue
        else:
            raise InspectionError(
                f"Callback {getattr(func, '__name__', func)!r} expects argument "
                f"'{sp.name}' but only {[p.name for p in parameters]} are provided"
            )

        if sp.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[sp.name] = value
        elif positional:
            args.append(value)
        elif sp.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise InspectionError(
                f"Cannot bind positional-only argument '{sp.name}' after a skipped default"
            )
        else:
            kwargs[sp.name] = value
    return args, kwargs


def invoke_callback(
    func: Callable[..., Any],
    builder: "ProcessBuilder",
    parameters: Sequence[Parameter],
) -> Any:
    args, kwargs = bind_callback_arguments(func, builder, parameters)
    return func(*args, **kwargs)


__all__ = [
    "BUILDER_ARGUMENT",
    "InspectionError",
    "bind_callback_arguments",
    "invoke_callback",
]
