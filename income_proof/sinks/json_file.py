"""JSON Lines file sink for exporting proof events."""

import json
import logging
from pathlib import Path
from typing import Any

from income_proof.exceptions import SinkError
from income_proof.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Append records to one ``<entity_type>.jsonl`` file per entity type."""

    def __init__(self, output_dir: str | Path) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON Lines files.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._counts: dict[str, int] = {}

    def path_for(self, entity_type: str) -> Path:
        # proof.issued -> proof_issued.jsonl
        return self.output_dir / (entity_type.replace(".", "_") + ".jsonl")

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Append a batch of records."""
        file_path = self.path_for(entity_type)
        try:
            with open(file_path, "a", encoding="utf-8") as f:
                for record in records:
                    f.write(json.dumps(to_dict(record), ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            raise SinkError(f"Cannot write {file_path}: {e}") from e

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def close(self) -> None:
        """Log summary."""
        for entity_type, count in self._counts.items():
            logger.info("Wrote %d %s records to %s", count, entity_type, self.path_for(entity_type))
