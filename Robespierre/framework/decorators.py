"""
The ``@command`` decorator: turns a function with typed parameters into
command code the framework can call with ``(ctx, message, args)``.

Example:
    @command
    async def add(ctx, message, a: str, b: str):
        await reply(ctx, message, str(int(a) + int(b)))

    @command(config={"args": ArgsConfig().delimiter(",")})
    async def split(ctx, message, args: Args[str, str]):
        ...
"""

import functools
import inspect
import logging
import typing
from typing import Any, Callable, Dict, List, Optional

from Robespierre.framework.extractors import (
    Msg,
    extract_args,
    is_arg_type,
    is_from_message_type,
    resolve_arg,
)
from Robespierre.framework.lexer import ArgsConfig

logger = logging.getLogger(__name__)


class _ArgRun:
    """Consecutive bare ``Arg`` parameters, extracted over one lexer."""

    def __init__(self, config: Optional[ArgsConfig]):
        self.arg_types: List[type] = []
        self.config = config

    async def extract(self, ctx, msg):
        return await extract_args(ctx, msg, self.arg_types, self.config)


class _FromMessageParam:
    def __init__(self, tp: type, config: Any):
        self.tp = tp
        self.config = config if config is not None else tp.default_config()

    async def extract(self, ctx, msg):
        return (await self.tp.from_message(ctx, msg, self.config),)


def _build_plan(func: Callable, config: Dict[str, Any]) -> list:
    hints = typing.get_type_hints(func)
    params = list(inspect.signature(func).parameters.values())[2:]

    unknown = set(config) - {p.name for p in params}
    if unknown:
        raise TypeError(f"config given for unknown parameters of {func.__name__}: {sorted(unknown)}")

    plan = []
    for param in params:
        tp = hints.get(param.name)
        if tp is None:
            raise TypeError(f"parameter {param.name!r} of {func.__name__} has no type annotation")

        if is_from_message_type(tp):
            plan.append(_FromMessageParam(tp, config.get(param.name)))
        elif is_arg_type(tp):
            param_config = config.get(param.name)
            run = plan[-1] if plan and isinstance(plan[-1], _ArgRun) else None
            # a per-parameter config starts its own lexer
            if run is None or param_config is not None or run.config is not None:
                run = _ArgRun(param_config)
                plan.append(run)
            run.arg_types.append(resolve_arg(tp))
        else:
            raise TypeError(f"parameter {param.name!r} of {func.__name__}: {tp!r} is not extractable")
    return plan


def command(func: Optional[Callable] = None, *, config: Optional[Dict[str, Any]] = None):
    """
    Wrap ``async def f(ctx, message, *params)`` into command code.

    Each parameter after the first two must be annotated with a
    :class:`~Robespierre.framework.extractors.FromMessage` type or an
    :class:`~Robespierre.framework.extractors.Arg` type (including plain
    types such as ``str`` or ``User``). Bare ``Arg`` parameters next to each
    other share one lexer, so an ``Option`` that does not match hands its
    token to the following parameter.

    Args:
        func: The function, when used as ``@command`` without arguments
        config: Per-parameter lexer configuration, keyed by parameter name

    Raises:
        TypeError: When a parameter cannot be extracted
    """

    def decorator(f: Callable):
        plan = _build_plan(f, config or {})

        @functools.wraps(f)
        async def code(ctx, message, args: str) -> None:
            msg = Msg(message, args)
            values = []
            for step in plan:
                values.extend(await step.extract(ctx, msg))
            await f(ctx, message, *values)

        code.description = inspect.getdoc(f)
        return code

    if func is not None:
        return decorator(func)
    return decorator


__all__ = ['command']
