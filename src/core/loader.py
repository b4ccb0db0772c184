"""Build info loader: state machine, request coalescing and cached accessors.

Lifecycle: NOT_LOADED -> LOADING -> {LOADED | ERROR}. Terminal states are
never left, so a single loader performs at most one retrieval.

Every accessor doubles as a lazy trigger: reading `id()` on a fresh loader
starts the load. With an asynchronous source the accessor returns the
still-empty cache until the load completes.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any

from src.core.callbacks import Callback, CallbackQueue
from src.core.types import BuildMetadata, FailureKind, LoadFailure, LoadResult, LoadState
from src.libs.source import BaseSource, SourceFactory
from src.observability.logger import get_logger


class BuildInfoLoader:
    """Loads the build descriptor once and notifies every requester."""

    def __init__(self, source: BaseSource, logger: logging.Logger | None = None) -> None:
        self.source = source
        self.logger = logger or get_logger("loader")
        self._lock = threading.RLock()
        self._state = LoadState.NOT_LOADED
        self._metadata = BuildMetadata()
        self._pending = CallbackQueue()

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "BuildInfoLoader":
        """Build a loader with the source named in `settings.build_info.source`."""

        logger = kwargs.pop("logger", None)
        return cls(SourceFactory.create(settings, **kwargs), logger=logger)

    @property
    def state(self) -> LoadState:
        return self._state

    def request_load(self, callback: Callback | None = None) -> None:
        """Start loading, or queue `callback` until loading finishes.

        When the loader is already terminal, `callback` runs immediately on
        the calling thread.
        """

        start = False
        with self._lock:
            if self._state.is_terminal:
                run_now = True
            else:
                run_now = False
                self._pending.append(callback)
                if self._state is LoadState.NOT_LOADED:
                    self._state = LoadState.LOADING
                    start = True

        if run_now:
            if callback is not None:
                callback()
            return

        if start:
            try:
                self.source.retrieve(self._complete)
            except Exception as error:  # noqa: BLE001
                self._complete(
                    LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"exception: {error}")
                )

    def _complete(self, result: LoadResult) -> None:
        if result.failure is not None:
            self._fail(result.failure)
        elif result.metadata is not None:
            self._resolve(result.metadata)

    def _resolve(self, metadata: BuildMetadata) -> None:
        callbacks = self._finish(LoadState.LOADED, metadata)
        if callbacks is None:
            return
        self.logger.info(
            "Loaded build info (build=%s, date=%s, version=%s, tag=%s, branch=%s)",
            metadata.id,
            metadata.date,
            metadata.bundle_version,
            metadata.tag,
            metadata.branch,
        )
        self._fire(callbacks)

    def _fail(self, failure: LoadFailure) -> None:
        callbacks = self._finish(LoadState.ERROR, BuildMetadata.unavailable())
        if callbacks is None:
            return
        self.logger.error(
            "Unable to load build information from '%s': %s",
            self.source.location,
            failure.reason,
        )
        self._fire(callbacks)

    def _finish(self, state: LoadState, metadata: BuildMetadata) -> list[Callback] | None:
        with self._lock:
            if self._state.is_terminal:
                self.logger.warning("Ignoring duplicate completion in state %s", self._state.value)
                return None
            self._metadata = metadata
            self._state = state
            return self._pending.drain()

    def _fire(self, callbacks: list[Callback]) -> None:
        for callback in callbacks:
            try:
                callback()
            except Exception:  # noqa: BLE001
                self.logger.exception("Build info callback raised")

    def _ensure_requested(self) -> None:
        if self._state is LoadState.NOT_LOADED:
            self.request_load()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def id(self) -> str:
        self._ensure_requested()
        return self._metadata.id

    def date(self) -> str:
        self._ensure_requested()
        return self._metadata.date

    def tag(self) -> str:
        self._ensure_requested()
        return self._metadata.tag

    def branch(self) -> str:
        self._ensure_requested()
        return self._metadata.branch

    def bundle_version(self) -> str:
        self._ensure_requested()
        return self._metadata.bundle_version

    def is_available(self) -> bool:
        self._ensure_requested()
        return self._state is LoadState.LOADED

    def is_loading(self) -> bool:
        self._ensure_requested()
        return self._state is LoadState.LOADING

    def metadata(self) -> BuildMetadata:
        self._ensure_requested()
        return self._metadata

    def condensed(self) -> str:
        return self.metadata().condensed()

    # ------------------------------------------------------------------
    # Future bridge
    # ------------------------------------------------------------------

    def when_loaded(self) -> "Future[bool]":
        """Return a future resolved with `is_available()` once terminal."""

        future: Future[bool] = Future()
        self.request_load(lambda: future.set_result(self._state is LoadState.LOADED))
        return future

    async def ensure_loaded(self) -> bool:
        return await asyncio.wrap_future(self.when_loaded())
