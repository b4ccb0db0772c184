"""Tests for the build info loader state machine."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

import pytest

from src.core.build_date import to_file_time
from src.core.loader import BuildInfoLoader
from src.core.parser import parse_build_info
from src.core.types import UNAVAILABLE_ID, FailureKind, LoadResult, LoadState
from src.libs.source import BaseSource, CompletionHandler, FileSource, FixedSource

TICKS = to_file_time(datetime(2020, 9, 2, 13, 45, 7, tzinfo=timezone.utc))
DESCRIPTOR = f"B100\n{TICKS}\n1.2.3"


class DeferredSource(BaseSource):
    """Source that completes only when the test says so."""

    def __init__(self, text: str | None = DESCRIPTOR) -> None:
        super().__init__(settings=None)
        self.text = text
        self.retrieve_calls = 0
        self._handler: CompletionHandler | None = None

    @property
    def location(self) -> str:
        return "memory://descriptor"

    def retrieve(self, on_complete: CompletionHandler) -> None:
        self.retrieve_calls += 1
        self._handler = on_complete

    def complete(self, result: LoadResult | None = None) -> None:
        assert self._handler is not None
        self._handler(result or parse_build_info(self.text))


class ImmediateSource(DeferredSource):
    def retrieve(self, on_complete: CompletionHandler) -> None:
        self.retrieve_calls += 1
        on_complete(parse_build_info(self.text))


class ExplodingSource(DeferredSource):
    def retrieve(self, on_complete: CompletionHandler) -> None:
        self.retrieve_calls += 1
        raise RuntimeError("boom")


# -----------------------------------------------------------------------------
# State transitions
# -----------------------------------------------------------------------------


class TestLoaderStateMachine:
    def test_initial_state_is_not_loaded(self, mock_logger: Any) -> None:
        loader = BuildInfoLoader(DeferredSource(), logger=mock_logger)

        assert loader.state is LoadState.NOT_LOADED

    def test_request_load_enters_loading(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()

        assert loader.state is LoadState.LOADING
        assert source.retrieve_calls == 1

    def test_success_transitions_to_loaded(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()
        source.complete()

        assert loader.state is LoadState.LOADED
        assert loader.is_available()
        assert not loader.is_loading()
        assert loader.id() == "B100"
        assert loader.date() == "2020 Sep 02 @ 13:45:07"
        assert loader.bundle_version() == "1.2.3"
        assert loader.tag() == ""
        assert loader.branch() == ""

    def test_failure_writes_sentinel(self, mock_logger: Any) -> None:
        source = DeferredSource("B100\nNOTANUMBER\n1.2.3")
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()
        source.complete()

        assert loader.state is LoadState.ERROR
        assert not loader.is_available()
        assert loader.id() == UNAVAILABLE_ID
        assert loader.date() == ""
        assert loader.bundle_version() == ""
        assert loader.tag() == ""
        assert loader.branch() == ""

    def test_terminal_state_never_retries(self, mock_logger: Any) -> None:
        source = ImmediateSource("")
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()
        loader.request_load()
        loader.id()

        assert loader.state is LoadState.ERROR
        assert source.retrieve_calls == 1

    def test_source_exception_fails_instead_of_raising(self, mock_logger: Any) -> None:
        source = ExplodingSource()
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[str] = []

        loader.request_load(lambda: fired.append("done"))

        assert loader.state is LoadState.ERROR
        assert fired == ["done"]

    def test_duplicate_completion_is_ignored(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()
        source.complete()
        source.complete(LoadResult.failed(FailureKind.EMPTY_CONTENT, "empty content"))

        assert loader.state is LoadState.LOADED
        assert loader.id() == "B100"
        mock_logger.warning.assert_called_once()


# -----------------------------------------------------------------------------
# Lazy accessors
# -----------------------------------------------------------------------------


class TestLazyAccessors:
    @pytest.mark.parametrize(
        "accessor",
        ["id", "date", "tag", "branch", "bundle_version", "is_available", "is_loading"],
    )
    def test_accessor_triggers_single_load(self, accessor: str, mock_logger: Any) -> None:
        source = ImmediateSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        getattr(loader, accessor)()
        getattr(loader, accessor)()

        assert source.retrieve_calls == 1
        assert loader.state is LoadState.LOADED

    def test_accessor_during_async_load_returns_empty_cache(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        assert loader.id() == ""
        assert loader.is_loading()

        source.complete()

        assert loader.id() == "B100"

    def test_condensed_summary(self, mock_logger: Any) -> None:
        loader = BuildInfoLoader(
            ImmediateSource(f"B100\n{TICKS}\n1.2.3\nrc\nmain"),
            logger=mock_logger,
        )

        assert loader.condensed() == "B100 main 1.2.3 rc @2020 Sep 02 @ 13:45:07"


# -----------------------------------------------------------------------------
# Callback coalescing
# -----------------------------------------------------------------------------


class TestCallbackCoalescing:
    def test_callbacks_fire_once_in_order_after_completion(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[str] = []

        loader.request_load(lambda: fired.append("a"))
        loader.request_load(lambda: fired.append("b"))
        loader.request_load()
        loader.request_load(lambda: fired.append("c"))

        assert fired == []
        assert source.retrieve_calls == 1

        source.complete()

        assert fired == ["a", "b", "c"]

        loader.request_load(lambda: fired.append("d"))

        assert fired == ["a", "b", "c", "d"]

    def test_callbacks_fire_on_failure(self, mock_logger: Any) -> None:
        source = DeferredSource("B100")
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[bool] = []

        loader.request_load(lambda: fired.append(loader.is_available()))
        loader.request_load(lambda: fired.append(loader.is_available()))
        source.complete()

        assert fired == [False, False]

    def test_reentrant_request_resolves_synchronously(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[str] = []

        def outer() -> None:
            fired.append("outer")
            loader.request_load(lambda: fired.append("inner"))
            fired.append("after-inner")

        loader.request_load(outer)
        loader.request_load(lambda: fired.append("second"))
        source.complete()

        assert fired == ["outer", "inner", "after-inner", "second"]
        assert source.retrieve_calls == 1

    def test_failing_callback_does_not_block_others(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[str] = []

        def broken() -> None:
            raise RuntimeError("listener failed")

        loader.request_load(broken)
        loader.request_load(lambda: fired.append("ok"))
        source.complete()

        assert fired == ["ok"]
        mock_logger.exception.assert_called_once()

    def test_concurrent_threads_share_single_retrieval(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)
        fired: list[int] = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def request(index: int) -> None:
            barrier.wait()

            def record() -> None:
                with lock:
                    fired.append(index)

            loader.request_load(record)

        threads = [threading.Thread(target=request, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert source.retrieve_calls == 1
        assert fired == []

        source.complete()

        assert sorted(fired) == list(range(8))


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


class TestLoaderLogging:
    def test_success_logs_all_fields(self, mock_logger: Any) -> None:
        source = ImmediateSource(f"B100\n{TICKS}\n1.2.3\nrc\nmain")
        loader = BuildInfoLoader(source, logger=mock_logger)

        loader.request_load()

        args = mock_logger.info.call_args.args
        assert args[1:] == ("B100", "2020 Sep 02 @ 13:45:07", "1.2.3", "rc", "main")
        mock_logger.error.assert_not_called()

    def test_failure_logs_location_and_reason(self, mock_logger: Any) -> None:
        loader = BuildInfoLoader(ImmediateSource(""), logger=mock_logger)

        loader.request_load()

        args = mock_logger.error.call_args.args
        assert args[1] == "memory://descriptor"
        assert args[2] == "empty content"


# -----------------------------------------------------------------------------
# Future bridge and bootstrap
# -----------------------------------------------------------------------------


class TestFutureBridge:
    def test_when_loaded_resolves_after_completion(self, mock_logger: Any) -> None:
        source = DeferredSource()
        loader = BuildInfoLoader(source, logger=mock_logger)

        future = loader.when_loaded()
        assert not future.done()

        source.complete()

        assert future.result(timeout=1) is True

    def test_when_loaded_reports_failure(self, mock_logger: Any) -> None:
        loader = BuildInfoLoader(ImmediateSource(None), logger=mock_logger)

        assert loader.when_loaded().result(timeout=1) is False

    @pytest.mark.asyncio
    async def test_ensure_loaded_from_coroutine(self, mock_logger: Any) -> None:
        loader = BuildInfoLoader(ImmediateSource(), logger=mock_logger)

        assert await loader.ensure_loaded() is True
        assert loader.id() == "B100"


class TestFromSettings:
    def test_file_source_selected(self, make_settings: Any, tmp_path: Any) -> None:
        loader = BuildInfoLoader.from_settings(make_settings(source="file", base_dir=str(tmp_path)))

        assert isinstance(loader.source, FileSource)

    def test_fixed_source_selected(self, make_settings: Any, mock_logger: Any) -> None:
        loader = BuildInfoLoader.from_settings(make_settings(source="fixed"), logger=mock_logger)

        assert isinstance(loader.source, FixedSource)
        assert loader.id() == "EDITOR"
        assert loader.is_available()
