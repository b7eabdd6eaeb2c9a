from typing import Any

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """
    Base log entry. Subclasses add typed fields and usually pin ``level``
    with a default.
    """
    message: str | None = None
    tags: set[str] = msgspec.field(default_factory=set)
    level: LogLevel

    def fields(self) -> dict[str, Any]:
        values = msgspec.structs.asdict(self)
        values["level"] = self.level.value
        return values

    def to_template(
        self,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> str:
        """
        Render ``template`` with this entry's fields. Keys in ``context``
        take precedence over fields of the same name.
        """
        return template.format(**{
            **self.fields(),
            **(context or {}),
        })
