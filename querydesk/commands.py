"""
JSON command boundary for the host shell.

The desktop shell invokes the core by command name with a JSON object of
arguments and expects a JSON-compatible reply. ``CommandRouter.invoke`` never
raises: success comes back as ``{"ok": True, "data": ...}`` and every failure
(unknown command, invalid arguments, core error) as
``{"ok": False, "error": "<message>"}``.

Argument names follow the shell's conventions; both ``conn_string`` and the
camelCase ``connString`` are accepted.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from querydesk import operations
from querydesk.errors import QueryDeskError
from querydesk.infrastructure.registry import ConnectionRegistry
from querydesk.utils.logging import get_logger

log = get_logger(__name__)

Envelope = Dict[str, Any]


class _Args(BaseModel):
    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "forbid",
    }


class ConnectArgs(_Args):
    conn_string: str = Field(..., alias="connString", min_length=1)
    name: Optional[str] = None


class HandleArgs(_Args):
    id: str = Field(..., min_length=1)


class ExecuteArgs(_Args):
    id: str = Field(..., min_length=1)
    sql: str


class NoArgs(_Args):
    pass


def _success(data: Any) -> Envelope:
    return {"ok": True, "data": data}


def _failure(message: str) -> Envelope:
    return {"ok": False, "error": message}


def _describe_validation_error(command: str, exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
        for err in exc.errors()
    )
    return f"Invalid arguments for '{command}': {problems}"


class CommandRouter:
    """
    Routes named commands to the core operations over one registry.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry
        self._handlers: Dict[str, Callable[[Mapping[str, Any]], Awaitable[Any]]] = {
            "connect": self._connect,
            "disconnect": self._disconnect,
            "execute": self._execute,
            "get_tables": self._get_tables,
            "list_connections": self._list_connections,
        }

    @property
    def commands(self) -> List[str]:
        return sorted(self._handlers)

    async def invoke(self, command: str, args: Optional[Mapping[str, Any]] = None) -> Envelope:
        """
        Run ``command`` with ``args`` and wrap the outcome in an envelope.
        """
        handler = self._handlers.get(command)
        if handler is None:
            return _failure(f"Unknown command '{command}'. Available: {', '.join(self.commands)}")

        try:
            data = await handler(args or {})
        except ValidationError as exc:
            return _failure(_describe_validation_error(command, exc))
        except QueryDeskError as exc:
            log.debug("Command failed", extra={"command": command, "error": str(exc)})
            return _failure(str(exc))
        return _success(data)

    async def _connect(self, args: Mapping[str, Any]) -> str:
        parsed = ConnectArgs.model_validate(args)
        return await operations.connect(self.registry, parsed.conn_string, name=parsed.name)

    async def _disconnect(self, args: Mapping[str, Any]) -> bool:
        parsed = HandleArgs.model_validate(args)
        return await operations.disconnect(self.registry, parsed.id)

    async def _execute(self, args: Mapping[str, Any]) -> Any:
        parsed = ExecuteArgs.model_validate(args)
        return await operations.execute(self.registry, parsed.id, parsed.sql)

    async def _get_tables(self, args: Mapping[str, Any]) -> Any:
        parsed = HandleArgs.model_validate(args)
        return await operations.get_tables(self.registry, parsed.id)

    async def _list_connections(self, args: Mapping[str, Any]) -> Any:
        NoArgs.model_validate(args)
        return [
            info.model_dump(mode="json") for info in operations.list_connections(self.registry)
        ]


__all__ = ["CommandRouter", "ConnectArgs", "ExecuteArgs", "HandleArgs"]
