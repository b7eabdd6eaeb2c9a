from .logger_stream import LoggerStream


class LoggerContext:
    """
    A named logger's stream and settings. Used as an async context manager;
    leaving a non-nested context closes the stream's logfiles.
    """

    def __init__(
        self,
        name: str,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        nested: bool = False,
    ) -> None:
        self.name = name
        self.nested = nested
        self.stream = LoggerStream(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
        )

    def update(
        self,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        nested: bool | None = None,
    ):
        """Replace only the settings that are given."""
        if template:
            self.stream.template = template

        if filename:
            self.stream.filename = filename

        if directory:
            self.stream.directory = directory

        if nested is not None:
            self.nested = nested

    async def __aenter__(self) -> LoggerStream:
        await self.stream.initialize()
        return self.stream

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.nested is False:
            await self.stream.close()
