import asyncio
import functools
import os
import pathlib
import urllib.parse
import uuid
from typing import Any

import msgspec

from storelock.errors import StoreError
from storelock.logging import Logger
from storelock.logging.storelock_logging_models import StoreDebug


class FileStore:
    """
    KeyValueStore keeping one JSON document per key inside ``directory``.

    Several processes may point at the same directory. Writes land in a
    uniquely named temp file which is then renamed over the key's file, so a
    concurrent reader sees either the old document or the new one, never a
    partial write. Missing files and files that cannot be decoded read as
    absent. Any other read failure raises StoreError.
    """

    def __init__(
        self,
        directory: str | os.PathLike[str],
        logger: Logger | None = None,
    ) -> None:
        self._directory = pathlib.Path(directory).absolute()
        self._logger = logger or Logger()
        self._encoder = msgspec.json.Encoder()
        self._decoder = msgspec.json.Decoder()

    @property
    def directory(self):
        return self._directory

    def path_for(self, key: str) -> pathlib.Path:
        return self._directory / f"{urllib.parse.quote(key, safe='')}.json"

    async def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        data = await self._run(self._read, path)

        if data is None:
            return None

        try:
            return self._decoder.decode(data)

        except msgspec.DecodeError:
            await self._logger.log(
                StoreDebug(
                    message=f"Ignoring undecodable document at {path}",
                    store=str(self._directory),
                    key=key,
                ),
                name="storelock",
            )
            return None

    async def set(self, key: str, value: Any) -> None:
        await self._run(
            self._write,
            self.path_for(key),
            self._encoder.encode(value),
        )

    async def delete(self, key: str) -> None:
        await self._run(self._remove, self.path_for(key))

    async def _run(self, call, *args):
        loop = asyncio.get_running_loop()

        try:
            return await loop.run_in_executor(
                None,
                functools.partial(call, *args),
            )

        except OSError as err:
            raise StoreError(
                f"Err. - file store operation failed in {self._directory}: {err}"
            ) from err

    def _read(self, path: pathlib.Path) -> bytes | None:
        try:
            with open(path, "rb") as document:
                return document.read()

        except FileNotFoundError:
            return None

    def _write(self, path: pathlib.Path, data: bytes):
        self._directory.mkdir(parents=True, exist_ok=True)

        temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")

        try:
            with open(temp_path, "wb") as document:
                document.write(data)
                document.flush()
                os.fsync(document.fileno())

            os.replace(temp_path, path)

        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def _remove(self, path: pathlib.Path):
        path.unlink(missing_ok=True)
