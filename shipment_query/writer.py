"""
writer.py
Exports a query result set as JSONL:
1) Output filename format: `shipments_<tag>_<counter>.jsonl`
   - tag defaults to the run date, e.g. 19oct26.
   - counter auto-increments based on existing files in the output directory.
2) One JSON object per line, UTF-8:
   {"document_id": ..., "status": <canonical status>, "shipment": <record as fetched>}
3) Timestamps and other non-JSON values are serialised through `_json_default`.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from azure.storage.blob import BlobServiceClient

from .config import LOGGER_NAME
from .normalizer import normalize
from .status import canonical_status

logger = logging.getLogger(LOGGER_NAME)


def _tag_from_dt(dt: datetime) -> str:
    # 19oct26
    return dt.strftime("%d%b%y").lower()


def _json_default(o: Any) -> Any:
    """
    JSON serializer fallback for non-serializable types (e.g., pandas Timestamp).
    """
    if hasattr(o, "isoformat"):
        return o.isoformat()
    if isinstance(o, (set, frozenset, tuple)):
        return list(o)
    return str(o)


def _next_counter(output_dir: Path, tag: str) -> int:
    """
    Scan output_dir for shipments_<tag>_<n>.jsonl and return next counter.
    """
    pattern = re.compile(rf"^shipments_{re.escape(tag)}_(\d+)\.jsonl$", re.IGNORECASE)
    max_n = 0
    if output_dir.exists():
        for p in output_dir.iterdir():
            if not p.is_file():
                continue
            m = pattern.match(p.name)
            if m:
                max_n = max(max_n, int(m.group(1)))
    return max_n + 1


@dataclass(frozen=True)
class ExportWriterConfig:
    output_dir: str = "output_jsonl"
    # Raise instead of falling back to a positional id when a record has none.
    strict: bool = False


class JsonlExportWriter:
    def __init__(self, config: Optional[ExportWriterConfig] = None, logger_: Optional[logging.Logger] = None) -> None:
        self.config = config or ExportWriterConfig()
        self.logger = logger_ or logger
        self.generated_files: List[Path] = []

    def write(self, records: Iterable[Mapping[str, Any]], tag: Optional[str] = None) -> Path:
        """
        Write records to: shipments_<tag>_<counter>.jsonl

        Parameters
        ----------
        records : Iterable[Mapping]
            Shipment records, usually ``QueryResult.all_filtered``.
        tag : Optional[str]
            If not provided, uses the run date (e.g., 19oct26).

        Returns
        -------
        Path
            Path to the written JSONL file.
        """
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        tag = (tag or _tag_from_dt(datetime.now())).lower()
        counter = _next_counter(output_dir, tag)
        out_path = output_dir / f"shipments_{tag}_{counter}.jsonl"

        records_list = list(records)
        self.logger.info("Writing %d records to %s", len(records_list), out_path)

        with out_path.open("w", encoding="utf-8") as f:
            for idx, record in enumerate(records_list, start=1):
                f.write(json.dumps(self._export_doc(record, idx), ensure_ascii=False, default=_json_default))
                f.write("\n")

        self.logger.info("JSONL write complete. File=%s, lines=%d", out_path, len(records_list))
        self.generated_files.append(out_path)
        return out_path

    def _export_doc(self, record: Mapping[str, Any], fallback_index: int) -> Dict[str, Any]:
        if not isinstance(record, Mapping):
            raise TypeError(f"Each record must be a mapping. Got: {type(record)}")
        n = normalize(record)
        doc_id = n.display_id or n.id
        if not doc_id:
            if self.config.strict:
                raise ValueError(f"Record #{fallback_index} has no shipment id in strict mode.")
            doc_id = f"record_{fallback_index}"
        return {
            "document_id": str(doc_id),
            "status": canonical_status(n.raw_status),
            "shipment": dict(record),
        }

    def upload_files(self, conn_str: str, container_name: str) -> None:
        """
        Uploads all generated files to the specified Azure Blob container.
        """
        self.logger.info(f"Uploading {len(self.generated_files)} file(s) to container '{container_name}'...")
        try:
            blob_service_client = BlobServiceClient.from_connection_string(conn_str)
            container_client = blob_service_client.get_container_client(container_name)

            if not container_client.exists():
                self.logger.warning(f"Container '{container_name}' does not exist. Creating it...")
                container_client.create_container()

            for file_path in self.generated_files:
                blob_client = container_client.get_blob_client(file_path.name)
                self.logger.info(f"Uploading {file_path.name}...")
                with open(file_path, "rb") as data:
                    blob_client.upload_blob(data, overwrite=True)

            self.logger.info("All files uploaded successfully.")

        except Exception as e:
            self.logger.error(f"Upload failed: {e}", exc_info=True)
            raise
