import asyncio
import io
import os
import pathlib
from collections import defaultdict
from typing import (
    Callable,
    Dict,
    TextIO,
    TypeVar,
)

import msgspec

from storelock.logging.config.logging_config import LoggingConfig
from storelock.logging.models import Entry, Log

T = TypeVar('T', bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
WRITE_ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {error}"


class LoggerStream:
    """
    Writes Log records for one named logger.

    Records go to stdout/stderr as templated lines, or, when the stream has a
    logfile, to that file as one msgspec-encoded JSON document per line.
    All blocking IO runs in the loop's default executor.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        self._name = name or "default"
        self.template = template
        self.filename = filename
        self.directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cwd: str | None = None
        self._initialized: bool = False

        self._files: Dict[str, io.BufferedWriter] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._config = LoggingConfig()

    @property
    def name(self):
        return self._name

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            self._loop = asyncio.get_running_loop()

            if self._cwd is None:
                self._cwd = await self._loop.run_in_executor(None, os.getcwd)

            self._initialized = True

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
    ) -> str:
        if self._initialized is False:
            await self.initialize()

        logfile_path = self._to_logfile_path(filename, directory=directory)

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

        return logfile_path

    def _open_file(self, logfile_path: str):
        logfile = self._files.get(logfile_path)
        if logfile is not None and logfile.closed is False:
            return

        path = pathlib.Path(logfile_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        self._files[logfile_path] = open(path, "ab")

    async def close(self):
        await asyncio.gather(
            *[self._close_file(logfile_path) for logfile_path in list(self._files)]
        )

        self._initialized = False

    async def _close_file(self, logfile_path: str):
        async with self._file_locks[logfile_path]:
            logfile = self._files.pop(logfile_path, None)
            if logfile is not None and logfile.closed is False:
                await self._loop.run_in_executor(None, logfile.close)

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ) -> str:
        assert (
            pathlib.Path(filename).suffix == ".json"
        ), "Err. - file must be JSON file for logs."

        if directory is None:
            directory = self._config.directory or self._cwd

        return str(pathlib.Path(directory, filename).absolute())

    async def log(
        self,
        log: Log,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._config.enabled(log.entry.level) is False:
            return

        if filter and filter(log.entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        filename = self.filename
        directory = self.directory

        if path:
            logfile_path = pathlib.Path(path)
            filename = logfile_path.name
            directory = str(logfile_path.parent.absolute())

        if filename:
            await self._log_to_file(log, filename, directory)

        else:
            await self._log_to_stream(log, template or self.template)

    async def _log_to_stream(
        self,
        log: Log,
        template: str | None,
    ):
        line = log.entry.to_template(
            template or DEFAULT_TEMPLATE,
            context=log.template_context(),
        )

        try:
            await self._loop.run_in_executor(
                None,
                self._write_to_stream,
                self._config.output.resolve(),
                line,
            )

        except (OSError, ValueError):
            # Closed or detached stream, nothing left to report to.
            return

    def _write_to_stream(self, stream: TextIO, line: str):
        stream.write(line + "\n")
        stream.flush()

    async def _log_to_file(
        self,
        log: Log,
        filename: str,
        directory: str | None,
    ):
        try:
            logfile_path = await self.open_file(filename, directory=directory)

            async with self._file_locks[logfile_path]:
                await self._loop.run_in_executor(
                    None,
                    self._write_to_file,
                    log,
                    logfile_path,
                )

        except OSError as err:
            await self._report_write_error(log, err)

    def _write_to_file(self, log: Log, logfile_path: str):
        logfile = self._files.get(logfile_path)
        if logfile is None or logfile.closed:
            return

        logfile.write(msgspec.json.encode(log) + b"\n")
        logfile.flush()

    async def _report_write_error(self, log: Log, err: OSError):
        line = log.entry.to_template(
            WRITE_ERROR_TEMPLATE,
            context={
                **log.template_context(),
                "error": str(err),
            },
        )

        try:
            await self._loop.run_in_executor(
                None,
                self._write_to_stream,
                self._config.output.resolve(),
                line,
            )

        except (OSError, ValueError):
            return
