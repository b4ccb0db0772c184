"""Asynchronous source: fetches the descriptor over HTTP with httpx.

The fetch is scheduled on the caller's running event loop when there is
one. Without a running loop it runs on a daemon thread, and the completion
handler is invoked from that thread.

Outcome mapping:
- transport failure (connect error, DNS, reset) -> TRANSPORT_FAILURE
- non-success status -> PROTOCOL_FAILURE
- task cancelled by the caller's loop shutting down -> TRANSPORT_FAILURE
- clean response -> body handed to the parser
"""

from __future__ import annotations

import asyncio
import os
import threading
from typing import Any

import httpx

from src.core.parser import parse_build_info
from src.core.settings import BASE_URL_ENV_VAR, DEFAULT_FILENAME
from src.core.types import FailureKind, LoadResult
from src.libs.source.base_source import BaseSource, CompletionHandler


class HttpSourceError(RuntimeError):
    """Raised when the HTTP source is misconfigured."""


class HttpSource(BaseSource):
    """httpx-backed retrieval strategy.

    Parameter precedence (highest first):
    1) explicit constructor arguments
    2) settings.build_info.*
    3) environment variable `BUILD_INFO_BASE_URL`
    """

    def __init__(
        self,
        settings: Any,
        *,
        base_url: str | None = None,
        filename: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(settings, **kwargs)

        build_settings = getattr(settings, "build_info", None)
        configured_base_url = (
            base_url
            or getattr(build_settings, "base_url", None)
            or os.environ.get(BASE_URL_ENV_VAR)
        )
        if not configured_base_url:
            raise HttpSourceError("Missing required setting: build_info.base_url")

        configured_name = filename or getattr(build_settings, "filename", None) or DEFAULT_FILENAME
        self.url = f"{str(configured_base_url).rstrip('/')}/{configured_name.lstrip('/')}"

        # None keeps the request open until the server answers.
        self.timeout = timeout if timeout is not None else getattr(build_settings, "timeout", None)
        self._transport = transport
        self._task: asyncio.Task[LoadResult] | None = None
        self._thread: threading.Thread | None = None

    @property
    def location(self) -> str:
        return self.url

    def retrieve(self, on_complete: CompletionHandler) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._task = loop.create_task(self.fetch())
            # Runs even when the caller's loop cancels the task on shutdown.
            self._task.add_done_callback(lambda task: on_complete(self._task_result(task)))
            return

        self._thread = threading.Thread(
            target=asyncio.run,
            args=(self._fetch(on_complete),),
            name="build-info-fetch",
            daemon=True,
        )
        self._thread.start()

    async def _fetch(self, on_complete: CompletionHandler) -> None:
        on_complete(await self.fetch())

    @staticmethod
    def _task_result(task: "asyncio.Task[LoadResult]") -> LoadResult:
        if task.cancelled():
            return LoadResult.failed(FailureKind.TRANSPORT_FAILURE, "request cancelled")
        error = task.exception()
        if error is not None:
            return LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"exception: {error}")
        return task.result()

    async def fetch(self) -> LoadResult:
        """Issue the request and map the outcome to a `LoadResult`."""

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url)
        except httpx.RequestError as error:
            return LoadResult.failed(
                FailureKind.TRANSPORT_FAILURE,
                f"network error: {error}",
            )
        except Exception as error:  # noqa: BLE001 - every failure becomes a LoadResult
            return LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"exception: {error}")

        if not response.is_success:
            return LoadResult.failed(
                FailureKind.PROTOCOL_FAILURE,
                f"http error {response.status_code}: {response.reason_phrase}",
            )

        try:
            text = response.text
        except Exception as error:  # noqa: BLE001
            return LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"exception: {error}")

        return parse_build_info(text)
