"""Run statistics for the adapter."""

import json
from dataclasses import dataclass, asdict


@dataclass
class AdapterStats:
    lines_read: int = 0
    resets: int = 0
    corrupted_metadata: int = 0
    records_dispatched: int = 0
    broken_contexts: int = 0
    channels_created: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    def format_text(self) -> str:
        return (
            f"{self.lines_read} lines read, {self.records_dispatched} records dispatched "
            f"to {self.channels_created} channel(s), {self.corrupted_metadata} corrupted "
            f"header(s), {self.broken_contexts} broken context(s), {self.resets} reset(s)"
        )

    def format_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
