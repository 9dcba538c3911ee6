"""
ScriptExecutor - Runs submitted script text as the body of an async function.

The script sees three names besides Python's builtins:

- ``browser``:  the Playwright Browser acquired for this request
- ``chromium``: the Playwright Chromium browser type (launch / connect_over_cdp)
- ``require``:  ``importlib.import_module`` for pulling in further modules

Top-level ``await`` and ``return`` are allowed. This is not a sandbox: the
caller is trusted, and the script can do anything those names and the
builtins allow.
"""
import ast
import asyncio
import builtins
import importlib
import time
from typing import Any, Dict, Optional

from ..logging_config import get_logger
from .models import ExecutionOutcome

logger = get_logger("script_runner.browser.executor")

SCRIPT_FILENAME = "<script>"
SCRIPT_FUNCTION_NAME = "__script__"
CAPABILITY_NAMES = ("browser", "chromium", "require")

_WRAPPER_TEMPLATE = f"async def {SCRIPT_FUNCTION_NAME}({', '.join(CAPABILITY_NAMES)}):\n    pass\n"


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def compile_script(script: str):
    """Compile script text into an ``async def`` taking the capability names.

    Raises SyntaxError for scripts that do not parse or compile.
    """
    body = ast.parse(script, filename=SCRIPT_FILENAME, mode="exec").body
    wrapper = ast.parse(_WRAPPER_TEMPLATE, filename=SCRIPT_FILENAME, mode="exec")
    func_def = wrapper.body[0]
    # A script of only comments parses to an empty body
    func_def.body = body or [ast.Pass()]
    ast.fix_missing_locations(wrapper)

    code = compile(wrapper, SCRIPT_FILENAME, "exec")
    namespace: Dict[str, Any] = {"__builtins__": builtins, "__name__": "__script__"}
    exec(code, namespace)
    return namespace[SCRIPT_FUNCTION_NAME]


class ScriptExecutor:
    """Executes scripts and converts every fault into a failed ExecutionOutcome."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def run(self, script: str, browser: Any, chromium: Any, require=importlib.import_module) -> ExecutionOutcome:
        start = time.monotonic()

        try:
            script_function = compile_script(script)
        except (SyntaxError, ValueError) as e:
            logger.error(f"Script failed to compile: {e}")
            return ExecutionOutcome.failure(_error_message(e), self._elapsed(start))

        logger.info("Executing user script...")
        deadline = None
        try:
            coro = script_function(browser, chromium, require)
            if self.timeout is None:
                value = await coro
            else:
                async with asyncio.timeout(self.timeout) as deadline:
                    value = await coro
        except GeneratorExit:
            raise
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return self._failed(e, start)
        except BaseException as e:
            # SystemExit, KeyboardInterrupt and friends raised by the script count as failures too
            if deadline is not None and deadline.expired():
                message = f"Script timed out after {self.timeout:g} seconds"
                logger.error(message)
                return ExecutionOutcome.failure(message, self._elapsed(start))
            return self._failed(e, start)

        duration_ms = self._elapsed(start)
        logger.info_with("User script executed successfully", duration_ms=round(duration_ms, 1))
        return ExecutionOutcome.success(value, duration_ms)

    def _failed(self, e: BaseException, start: float) -> ExecutionOutcome:
        logger.error_with(f"Script execution failed: {e}", error_type=type(e).__name__)
        return ExecutionOutcome.failure(_error_message(e), self._elapsed(start))

    @staticmethod
    def _elapsed(start: float) -> float:
        return (time.monotonic() - start) * 1000
