import argparse
from pathlib import Path
from typing import List, Optional

from artifact_generators.landscape_enricher import enrich_landscape_items, write_gitee_data_json
from configuration import Configuration as Config
from models.landscape import dump_landscape_items, load_landscape_items
from repo_metrics.cache import Cache
from repo_metrics.gitee.gitee_metrics_with_cache import collect_gitee_data
from timer import Timer
from loggers.main_logger import main_logger as logger

p = Path(__file__).resolve()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Collect Gitee metadata for the landscape repositories.")
    ap.add_argument("--landscape", type=Path, default=Path(Config.input_dir, Config.landscape_file_name),
                    help="landscape items JSON file")
    ap.add_argument("--output-dir", type=Path, default=Config.output_dir)
    ap.add_argument("--cache-dir", type=Path, default=Config.cache_dir)
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    main_timer = Timer("main").start()

    try:
        items = load_landscape_items(args.landscape)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error loading landscape file: {e}")
        return 1
    logger.info(f"Loaded {len(items)} landscape items from {args.landscape}")

    gitee_timer = Timer("gitee_metrics").start()
    gitee_data = collect_gitee_data(Cache(args.cache_dir), items)
    gitee_timer.stop()
    logger.info(gitee_timer.elapsed())

    enriched = enrich_landscape_items(items, gitee_data)
    logger.info(f"Enriched {enriched} repositories")

    data_path = write_gitee_data_json(gitee_data, Path(args.output_dir, Config.gitee_data_file_name))
    landscape_path = dump_landscape_items(items, Path(args.output_dir, Config.enriched_landscape_file_name))
    logger.info(f"Wrote {data_path} and {landscape_path}")

    main_timer.stop()
    logger.info(main_timer.elapsed())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
