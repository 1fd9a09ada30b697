import asyncio
import importlib
import inspect
import logging
from typing import Any, Callable


class HandlerError(Exception):
    """The hot folder handler raised or did not finish in time."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Handler failed for {file_name}: {reason}")


def load_handler(target: str) -> Callable[[dict], Any]:
    """
    Import a handler from "package.module:function".

    Raises:
        ValueError: malformed target or the attribute is not callable
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Handler must look like 'module:function', got {target!r}")

    module = importlib.import_module(module_name)
    handler = getattr(module, attribute, None)
    if not callable(handler):
        raise ValueError(f"Handler {target!r} is not callable")
    return handler


class HandlerRunner:
    """Runs the user handler for one file with a timeout. Sync handlers run on a worker thread."""

    def __init__(self, handler: Callable[[dict], Any], timeout_seconds: float):
        self._handler = handler
        self._timeout = timeout_seconds

    async def call(self, file_info: dict) -> Any:
        name = file_info.get("name", "<unknown>")
        try:
            if inspect.iscoroutinefunction(self._handler):
                call = self._handler(file_info)
            else:
                call = asyncio.to_thread(self._handler, file_info)
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise HandlerError(name, f"timed out after {self._timeout}s") from e
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logging.error(f"Handler raised for {name}: {e!r}")
            raise HandlerError(name, repr(e)) from e
