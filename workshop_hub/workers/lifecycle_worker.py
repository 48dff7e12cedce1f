"""Background loop that drives the lifecycle evaluator on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from workshop_hub.services.lifecycle import LifecycleEvaluator

LOGGER = logging.getLogger("workshop_hub.workers.lifecycle")


class LifecycleWorker:
    """Runs ``LifecycleEvaluator.tick`` every ``interval_seconds`` until shut down."""

    def __init__(self, evaluator: Optional[LifecycleEvaluator] = None, *, interval_seconds: float = 30.0) -> None:
        self._evaluator = evaluator or LifecycleEvaluator()
        self._interval = interval_seconds
        self._stopped = asyncio.Event()
        self.iterations = 0

    async def run(self) -> None:
        LOGGER.info("lifecycle_worker_started", extra={"interval_seconds": self._interval})
        while not self._stopped.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
        LOGGER.info("lifecycle_worker_stopped", extra={"iterations": self.iterations})

    async def run_once(self) -> int:
        """Evaluate once in a worker thread; failures are logged, never raised."""

        self.iterations += 1
        try:
            transitions = await asyncio.to_thread(self._evaluator.tick)
        except Exception:  # noqa: BLE001
            LOGGER.exception("lifecycle_worker_iteration_failed")
            return 0
        return len(transitions)

    def shutdown(self) -> None:
        self._stopped.set()


def main() -> None:
    """Run the evaluator as a standalone process (``python -m workshop_hub.workers.lifecycle_worker``)."""

    from workshop_hub.core.config import get_settings
    from workshop_hub.core.database import create_schema
    from workshop_hub.core.logging import configure_logging

    settings = get_settings()
    configure_logging(settings)
    create_schema()
    asyncio.run(LifecycleWorker(interval_seconds=settings.lifecycle_interval_seconds).run())


if __name__ == "__main__":  # pragma: no cover
    main()
