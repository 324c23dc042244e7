import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from .config import (ALL_TAB, AZURE_ENV_VARS, DEFAULT_PAGE_SIZE,
                     LOCAL_SOURCE_ENV_VAR, LOGGER_NAME, OPTIONAL_ENV_VARS,
                     SORTABLE_KEYS)
from .engine import ShipmentQueryEngine
from .ingestor import RecordIngestor
from .models import QueryResult, SearchQuery, ShipmentRecord
from .normalizer import normalize
from .semantic import SemanticSearchEngine, looks_like_natural_language
from .writer import ExportWriterConfig, JsonlExportWriter


# Setup Logger
def setup_logging():
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    # Ensure handlers are only added once
    if not logger.handlers:
        # 1. Console Handler
        c_handler = logging.StreamHandler(sys.stdout)
        c_format = logging.Formatter("[%(levelname)s] %(asctime)s | %(message)s")
        c_handler.setFormatter(c_format)
        logger.addHandler(c_handler)

        # 2. File Handler
        try:
            log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            f_handler = logging.FileHandler(log_dir / "query.log", encoding="utf-8")
            f_format = logging.Formatter(
                "[%(levelname)s] %(asctime)s | %(module)s | %(message)s"
            )
            f_handler.setFormatter(f_format)
            logger.addHandler(f_handler)
        except OSError as e:
            print(f"Failed to setup file logging: {e}")

    return logger


logger = setup_logging()


class ShipmentQueryPipeline:
    def __init__(self):
        self.config: Dict[str, Optional[str]] = {}

    def load_configuration(self):
        logger.info("Loading configuration...")
        load_dotenv(find_dotenv(usecwd=True), override=True)

        for var in [LOCAL_SOURCE_ENV_VAR] + AZURE_ENV_VARS + OPTIONAL_ENV_VARS:
            self.config[var] = os.getenv(var) or None

        if not self.config[LOCAL_SOURCE_ENV_VAR]:
            missing = [var for var in AZURE_ENV_VARS if not self.config[var]]
            if missing:
                logger.error(f"No record source configured. Set {LOCAL_SOURCE_ENV_VAR} or {missing}")
                raise EnvironmentError(
                    f"Missing required ENV variables: set {LOCAL_SOURCE_ENV_VAR} or all of {AZURE_ENV_VARS}"
                )

        logger.info("Configuration loaded successfully.")

    def _ingest(self) -> List[ShipmentRecord]:
        local_path = self.config.get(LOCAL_SOURCE_ENV_VAR)
        if local_path:
            logger.info(f"Reading records from local file {local_path}")
            return RecordIngestor().read_records(Path(local_path))

        # Using 'WNLD' container for download
        ingestor = RecordIngestor(
            conn_str=self.config["AZURE_STORAGE_CONN_STR"],
            container_name=self.config["AZURE_STORAGE_CONTAINER_WNLD"],
        )
        blob_name = self.config.get("AZURE_BLOB_NAME")
        if not blob_name:
            blob_name, _ = ingestor.find_latest_record_blob()
        return ingestor.read_records(ingestor.download_blob(blob_name))

    def run(
        self,
        query: Optional[SearchQuery] = None,
        use_semantic: bool = False,
        output_dir: Optional[str] = None,
    ) -> QueryResult:
        total_start = time.time()
        logger.info("Starting Shipment Query Execution...")
        if not self.config:
            self.load_configuration()
        query = query or SearchQuery()

        # 1. Ingestion
        t0 = time.time()
        records = self._ingest()
        customers = RecordIngestor.read_directory(self.config.get("CUSTOMER_DIRECTORY_PATH"))
        carriers = RecordIngestor.read_directory(self.config.get("CARRIER_DIRECTORY_PATH"))
        t1 = time.time()
        logger.info(f"Step 1: Ingestion completed in {t1 - t0:.2f} seconds. Records={len(records)}")

        # 2. Query
        engine = ShipmentQueryEngine(customers=customers, carriers=carriers)
        semantic_results = None
        if use_semantic and looks_like_natural_language(query.text):
            semantic = SemanticSearchEngine().search(query.text, records)
            semantic_results = semantic.records
            for tip in semantic.suggestions:
                logger.info(f"Suggestion: {tip.label}")
        result = engine.run(records, query, semantic_results=semantic_results)
        counts = engine.tab_counts(records)
        t2 = time.time()
        logger.info(f"Tab counts: {counts}")
        logger.info(
            f"Step 2: Query completed in {t2 - t1:.2f} seconds. "
            f"Matched={result.total_count}, page={len(result.page)}"
        )

        # 3. Export
        if output_dir:
            writer = JsonlExportWriter(config=ExportWriterConfig(output_dir=output_dir))
            writer.write(result.all_filtered)
            t3 = time.time()
            logger.info(f"Step 3: Export completed in {t3 - t2:.2f} seconds.")

            # 4. Uploading
            target_container = self.config.get("AZURE_STORAGE_CONTAINER_UPLD")
            conn_str = self.config.get("AZURE_STORAGE_CONN_STR")
            if target_container and conn_str:
                writer.upload_files(conn_str=conn_str, container_name=target_container)
                logger.info(f"Step 4: Upload completed in {time.time() - t3:.2f} seconds.")
            else:
                logger.info("AZURE_STORAGE_CONTAINER_UPLD not set. Skipping upload.")

        logger.info(f"Query executed successfully in {time.time() - total_start:.2f} seconds.")
        return result


def build_query(args: argparse.Namespace) -> SearchQuery:
    """Query file (if any) first, then any flags given on the command line."""
    data: Dict[str, Any] = {}
    if args.query_file:
        with open(args.query_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    overrides = {
        "text": args.text,
        "tab_filter": args.tab,
        "sort_key": args.sort,
        "sort_direction": args.direction,
        "page": args.page,
        "page_size": args.page_size,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return SearchQuery.from_dict(data)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search, filter, sort and page exported shipment records.")
    parser.add_argument("text", nargs="?", default=None, help="free-text search")
    parser.add_argument("--tab", default=None, help=f"status tab (default '{ALL_TAB}')")
    parser.add_argument("--sort", default=None, choices=SORTABLE_KEYS)
    parser.add_argument("--direction", default=None, choices=("asc", "desc"))
    parser.add_argument("--page", type=int, default=None)
    parser.add_argument("--page-size", type=int, default=None, help=f"-1 for all (default {DEFAULT_PAGE_SIZE})")
    parser.add_argument("--query-file", default=None, help="JSON file holding a full query")
    parser.add_argument("--semantic", action="store_true", help="use natural-language search when the text reads like it")
    parser.add_argument("--output-dir", default=None, help="export the matched records as JSONL here")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        pipeline = ShipmentQueryPipeline()
        result = pipeline.run(build_query(args), use_semantic=args.semantic, output_dir=args.output_dir)
    except Exception:
        logger.error("Query execution failed.", exc_info=True)
        sys.exit(1)
    shown = [normalize(r) for r in result.page]
    print(json.dumps([n.display_id or n.id for n in shown]))


if __name__ == "__main__":
    main()
