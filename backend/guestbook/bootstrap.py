"""
Guestbook Backend: Startup Hooks
================================

What:  An explicit, ordered list of initialization steps run once before the
       server accepts requests.
How:   Each hook is a named async callable. `run_startup_hooks` awaits them
       one after another and records a HookResult per hook. The first
       failure stops the run: later hooks are skipped and StartupError is
       raised, which aborts the lifespan.

Registration order is execution order:

    hooks = StartupHooks()
    hooks.register("create_schema", database.create_schema)
    hooks.register("seed_demo_entries", partial(seed_demo_entries, database))
    await run_startup_hooks(hooks)
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Tuple

from guestbook.exceptions import StartupError

logger = logging.getLogger(__name__)

HookFn = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class HookResult:
    """Outcome of one startup hook."""
    name: str
    ok: bool
    detail: Optional[str] = None
    error: Optional[BaseException] = None
    duration_ms: float = 0.0


class StartupHooks:
    """Ordered registry of startup hooks."""

    def __init__(self) -> None:
        self._hooks: List[Tuple[str, HookFn]] = []

    def register(self, name: str, hook: HookFn) -> None:
        if any(existing == name for existing, _ in self._hooks):
            raise ValueError(f"Startup hook '{name}' is already registered")
        self._hooks.append((name, hook))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self._hooks]

    def __iter__(self) -> Iterator[Tuple[str, HookFn]]:
        return iter(list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)


async def run_hook(name: str, hook: HookFn) -> HookResult:
    """Run a single hook and turn its outcome into a HookResult."""
    start = time.perf_counter()
    try:
        value = await hook()
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error("Startup hook '%s' failed: %s", name, str(e), exc_info=True)
        return HookResult(name=name, ok=False, error=e, duration_ms=duration_ms)

    duration_ms = (time.perf_counter() - start) * 1000
    detail = str(value) if value is not None else None
    logger.info("Startup hook '%s' done in %.1fms", name, duration_ms)
    return HookResult(name=name, ok=True, detail=detail, duration_ms=duration_ms)


async def run_startup_hooks(hooks: StartupHooks) -> List[HookResult]:
    """
    Run every hook once, in registration order.

    Returns:
        One HookResult per hook, when all succeeded

    Raises:
        StartupError: the first failing hook; carries the results so far
    """
    results: List[HookResult] = []
    for name, hook in hooks:
        result = await run_hook(name, hook)
        results.append(result)
        if not result.ok:
            skipped = hooks.names[len(results):]
            if skipped:
                logger.error("Skipping remaining startup hooks: %s", ", ".join(skipped))
            raise StartupError(hook=name, results=results, cause=result.error)
    return results
