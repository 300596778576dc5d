"""Named, remote-invocable commands exposed to the UI layer.

A command is an async function registered by name. Callers pass an argument
mapping keyed by the camelCase form of each parameter (`accountId` for
`account_id`); values are validated against the parameter annotations before
the handler runs, in strict mode (no "7" for an int). Failures surface as
`CommandError` carrying a plain message.
"""

from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from tradejournal.infrastructure.logging.logging import command_context, get_logger


Handler = Callable[..., Awaitable[Any]]

_MISSING = object()


class CommandError(Exception):
    """A command failed; `message` is what the caller gets back."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownCommandError(CommandError):
    pass


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class CommandParam:
    name: str
    key: str
    adapter: TypeAdapter
    default: Any = _MISSING


@dataclass(frozen=True)
class Command:
    name: str
    handler: Handler
    params: List[CommandParam]

    def parse_args(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        for p in self.params:
            if p.key in args:
                raw = args[p.key]
            elif p.default is not _MISSING:
                kwargs[p.name] = p.default
                continue
            else:
                raise CommandError(f"command {self.name} missing required key {p.key}")

            try:
                kwargs[p.name] = p.adapter.validate_python(raw, strict=True)
            except ValidationError as e:
                raise CommandError(f"invalid args `{p.key}` for command `{self.name}`: {_first_error(e)}")
        return kwargs


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    err = errors[0]
    loc = ".".join(str(x) for x in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


def to_result(value: Any) -> Any:
    """Turn a handler's return value into something json.dumps accepts."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [to_result(v) for v in value]
    return value


class CommandRegistry:
    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def command(self, fn: Optional[Handler] = None, *, name: Optional[str] = None) -> Any:
        """Register an async function as a command (usable as `@registry.command`)."""

        def register(handler: Handler) -> Handler:
            if not inspect.iscoroutinefunction(handler):
                raise TypeError(f"command handler {handler.__name__} must be async")
            cmd_name = name or handler.__name__
            if cmd_name in self._commands:
                raise ValueError(f"command already registered: {cmd_name}")
            self._commands[cmd_name] = Command(cmd_name, handler, _params_of(handler))
            return handler

        if fn is not None:
            return register(fn)
        return register

    def names(self) -> List[str]:
        return sorted(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    async def invoke(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        cmd = self._commands.get(name)
        if cmd is None:
            raise UnknownCommandError(f"command {name} not found")

        log = get_logger("commands")
        with command_context(name):
            try:
                kwargs = cmd.parse_args(args or {})
                result = await cmd.handler(**kwargs)
            except CommandError as e:
                log.warning("command_failed", error=e.message)
                raise
            log.info("command_invoked")
            return to_result(result)


def _params_of(handler: Handler) -> List[CommandParam]:
    hints = typing.get_type_hints(handler)
    params: List[CommandParam] = []
    for p in inspect.signature(handler).parameters.values():
        annotation = hints.get(p.name, Any)
        default = p.default if p.default is not inspect.Parameter.empty else _MISSING
        params.append(CommandParam(p.name, to_camel(p.name), TypeAdapter(annotation), default))
    return params
