from __future__ import annotations

import asyncio
import pathlib
import sys
from typing import (
    Callable,
    Dict,
    TypeVar,
)

from storelock.logging.models import Entry, Log

from .logger_context import LoggerContext

T = TypeVar('T', bound=Entry)


def split_logfile_path(path: str | None) -> tuple[str | None, str | None]:
    """
    Split ``path`` into (filename, directory). A path without a suffix is a
    directory only.
    """
    if not path:
        return None, None

    logfile_path = pathlib.Path(path).absolute()
    if logfile_path.suffix:
        return logfile_path.name, str(logfile_path.parent)

    return None, str(logfile_path)


class Logger:
    """
    Entry point for structured logging. Entries are routed to a named
    LoggerContext, created on first use, which writes them to stdout/stderr
    or to its logfile.

    Usage:
        logger = Logger()
        logger.configure(name="storelock", path="logs/storelock.json")

        await logger.log(
            LockDebug(message="Acquired lock reports", lock_name="reports"),
            name="storelock",
        )

        await logger.close()
    """

    def __init__(self) -> None:
        self._contexts: Dict[str, LoggerContext] = {}

    def configure(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
    ):
        """Replace the context for ``name`` with one using these settings."""
        name = name or 'default'
        filename, directory = split_logfile_path(path)

        self._contexts[name] = LoggerContext(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
        )

    def context(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        nested: bool = False,
    ) -> LoggerContext:
        name = name or 'default'
        filename, directory = split_logfile_path(path)

        context = self._contexts.get(name)
        if context is None:
            context = LoggerContext(
                name=name,
                template=template,
                filename=filename,
                directory=directory,
                nested=nested,
            )
            self._contexts[name] = context

        else:
            context.update(
                template=template,
                filename=filename,
                directory=directory,
                nested=nested,
            )

        return context

    async def log(
        self,
        entry: T,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        name = name or 'default'

        # Frame of whoever called log(), recorded on the entry.
        log = Log.from_frame(entry, name, sys._getframe(1))

        async with self.context(name=name, nested=True) as stream:
            await stream.log(
                log,
                template=template,
                path=path,
                filter=filter,
            )

    async def close(self):
        await asyncio.gather(*[
            context.stream.close() for context in self._contexts.values()
        ])
