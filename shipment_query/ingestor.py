import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from .config import LOGGER_NAME, RECORD_FILE_SUFFIXES

logger = logging.getLogger(LOGGER_NAME)


class RecordIngestor:
    """
    Loads already-exported shipment records for the query engine, either from
    a local file or from an Azure Blob container. Soft-deleted / archived
    records are expected to be excluded by the exporter.
    """

    def __init__(
        self,
        conn_str: Optional[str] = None,
        container_name: Optional[str] = None,
        download_dir: str = "downloads",
    ):
        self.conn_str = conn_str
        self.container_name = container_name
        self.download_dir = Path(download_dir)
        self.container_client = None

        if conn_str and container_name:
            try:
                blob_service_client = BlobServiceClient.from_connection_string(self.conn_str)
                self.container_client = blob_service_client.get_container_client(self.container_name)
            except Exception:
                logger.error("Failed to initialize Blob Service Client.", exc_info=True)
                raise

    def _require_container(self):
        if self.container_client is None:
            raise EnvironmentError("No Azure Blob container configured for this ingestor.")
        return self.container_client

    def find_latest_record_blob(self, prefix: Optional[str] = None) -> Tuple[str, datetime]:
        """
        Find latest record export (.jsonl / .json / .csv) in container by last_modified.
        """
        container = self._require_container()
        latest_name = None
        latest_lm = None

        try:
            logger.info(f"Scanning container '{self.container_name}' for record files...")
            for blob in container.list_blobs(name_starts_with=prefix):
                name = blob.name
                if not name or not name.lower().endswith(RECORD_FILE_SUFFIXES):
                    continue
                lm = blob.last_modified
                if latest_lm is None or lm > latest_lm:
                    latest_name = name
                    latest_lm = lm

            if not latest_name:
                raise FileNotFoundError(f"No record blobs found in container '{self.container_name}'")

            logger.info(f"Found latest record file: {latest_name} (Last Modified: {latest_lm})")
            return latest_name, latest_lm

        except FileNotFoundError:
            raise
        except Exception:
            logger.error("Error finding latest record blob.", exc_info=True)
            raise

    def download_blob(self, blob_name: str) -> Path:
        """
        Downloads a specific blob to the local download directory.
        """
        container = self._require_container()
        self.download_dir.mkdir(parents=True, exist_ok=True)
        local_path = self.download_dir / Path(blob_name).name
        try:
            logger.info(f"Downloading blob '{blob_name}' to '{local_path}'...")
            blob_client = container.get_blob_client(blob_name)
            with open(local_path, "wb") as f:
                stream = blob_client.download_blob(max_concurrency=4)
                stream.readinto(f)
            logger.info("Download completed successfully.")
            return local_path
        except ResourceNotFoundError:
            logger.error(f"Blob '{blob_name}' not found in '{self.container_name}'.")
            raise
        except Exception:
            logger.error(f"Failed to download blob '{blob_name}'.", exc_info=True)
            raise

    # -------------------------------------------------------------------------
    # Readers
    # -------------------------------------------------------------------------
    def read_records(self, path: Path) -> List[Dict[str, Any]]:
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix == ".jsonl":
            records = self.read_jsonl(path)
        elif suffix == ".json":
            records = self.read_json(path)
        elif suffix == ".csv":
            records = self.read_csv(path)
        else:
            raise ValueError(f"Unsupported record file type: {path.name}")
        logger.info(f"Loaded {len(records)} records from {path.name}.")
        return records

    @staticmethod
    def read_jsonl(path: Path) -> List[Dict[str, Any]]:
        """
        One JSON object per line. A bad line is skipped, never the whole file.
        """
        records: List[Dict[str, Any]] = []
        skipped = 0
        with open(path, "r", encoding="utf-8") as f:
            for i, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    doc = json.loads(line)
                except json.JSONDecodeError as e:
                    skipped += 1
                    logger.warning(f"Skipping malformed JSONL line {i} in {path.name}: {e}")
                    continue
                if isinstance(doc, dict):
                    records.append(doc)
                else:
                    skipped += 1
                    logger.warning(f"Skipping non-object JSONL line {i} in {path.name}.")
        if skipped:
            logger.warning(f"{skipped} line(s) skipped while reading {path.name}.")
        return records

    @staticmethod
    def read_json(path: Path) -> List[Dict[str, Any]]:
        """
        Either a list of records or an object holding them under "shipments".
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("shipments", [])
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of shipment records in {path.name}")
        return [doc for doc in data if isinstance(doc, dict)]

    @staticmethod
    def read_csv(csv_path: Path) -> List[Dict[str, Any]]:
        """
        Reads CSV with strict string types to preserve IDs and formatting.
        Empty cells are dropped so they read as absent, not as "".
        """
        logger.info(f"Reading CSV file: {csv_path}")
        try:
            # dtype=str is crucial to prevent leading zero loss in IDs
            df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, low_memory=False, encoding="utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("UTF-8 strict decoding failed. Retrying with 'iso-8859-1'...")
            df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, low_memory=False, encoding="iso-8859-1")
        logger.info(f"CSV loaded. Shape: {df.shape}")
        return [{k: v for k, v in row.items() if v != ""} for row in df.to_dict(orient="records")]

    @staticmethod
    def read_directory(path: Optional[str]) -> Dict[str, Any]:
        """
        Customer / carrier directory: a JSON object keyed by id.
        """
        if not path:
            return {}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Directory file {path} must hold a JSON object")
        logger.info(f"Loaded directory with {len(data)} entries from {path}.")
        return data
