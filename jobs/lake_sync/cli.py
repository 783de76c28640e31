"""CLI entry point for the lake sync job."""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import replace
from typing import Optional, Sequence

from common.config import get_settings
from lake_ingest.collector import ReadingCollector
from lake_ingest.core.domain.errors import FetchFailure
from lake_ingest.core.transport.page_fetcher import HtmlPageFetcher
from lake_ingest.scrape.extractor import PageExtractor, build_targets
from lake_ingest.sinks.factory import create_sinks

from .config import RunnerConfig
from .runner import PipelineRunner

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Lake sync: scrape level/temperature and publish to MQTT + InfluxDB",
    )
    p.add_argument("--url", help="source page (default LAKE_SOURCE_URL)")
    p.add_argument("--env-file", help="dotenv file to load (default LAKE_ENV_FILE or ./.env)")
    p.add_argument("--fetch-timeout", type=float, help="HTTP timeout in seconds")
    p.add_argument("--collect-timeout", type=float, help="collector deadline in seconds")
    p.add_argument(
        "--fields",
        help="comma separated fields to publish: temperature,level (default LAKE_PUBLISH_FIELDS)",
    )
    p.add_argument("--workers", type=int, help="parallel sink publishes (1 = sequential)")
    p.add_argument("--log-level", default="INFO")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    settings = get_settings(env_file=args.env_file)
    cfg = RunnerConfig.from_settings(settings)
    overrides = {}
    if args.url:
        overrides["source_url"] = args.url
    if args.fetch_timeout is not None:
        overrides["fetch_timeout_seconds"] = args.fetch_timeout
    if args.collect_timeout is not None:
        overrides["collect_timeout_seconds"] = args.collect_timeout
    if args.fields:
        overrides["publish_fields"] = tuple(
            f.strip().lower() for f in args.fields.split(",") if f.strip()
        )
    if args.workers is not None:
        overrides["publish_workers"] = max(1, args.workers)
    cfg = replace(cfg, **overrides)

    logger.info("Lake sync started")
    logger.info(
        "Config: url=%s fields=%s workers=%d collect_timeout=%.1fs",
        cfg.source_url, ",".join(cfg.publish_fields), cfg.publish_workers,
        cfg.collect_timeout_seconds,
    )

    extractor = PageExtractor(
        fetcher_factory=lambda: HtmlPageFetcher(
            timeout=cfg.fetch_timeout_seconds,
            user_agent=settings.scrape.user_agent,
        ),
        targets=build_targets(
            settings.scrape.temperature_selector,
            settings.scrape.level_selector,
        ),
    )
    runner = PipelineRunner(
        extractor=extractor,
        collector=ReadingCollector(timeout=cfg.collect_timeout_seconds),
        sinks=create_sinks(settings, rng=random.Random()),
        cfg=cfg,
    )

    try:
        result = runner.run()
    except FetchFailure as e:
        logger.error("no results found: %s", e)
        return 1
    except Exception as e:
        logger.error("Lake sync failed: %s: %s", type(e).__name__, e)
        return 1

    if result.no_data:
        print("no temp data")
        return 0

    print(result.summary, end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
