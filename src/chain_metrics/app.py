import argparse
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, TextIO

from pydantic import ValidationError

from .config import load_config, Config
from .errors import ChainMetricsError
from .ports.block_source import BlockSource
from .adapters.chain_rest_client import ChainRestClient
from .adapters.rest_block_source import RestBlockSource
from .services.fetch.retrying_fetcher import RetryingFetcher
from .services.estimate.height_estimator import HeightEstimator
from .services.inflation.inflation_calculator import InflationCalculator
from .orchestrators.chain_metrics_usecase import run_estimate, run_inflation
from .presenters.json_presenter import JsonPresenter
from .presenters.text_presenter import TextPresenter, TARGET_FORMAT

def parse_target_time(value: str) -> datetime:
    """YYYY-MM-DDThh:mm, always UTC."""
    try:
        return datetime.strptime(value, TARGET_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"failed to parse time '{value}': expected YYYY-MM-DDThh:mm (UTC)"
        )

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chain-metrics",
                                description="Block height estimates and realized inflation for a Cosmos-SDK chain")
    p.add_argument("--node", default=None, help="Node REST URL (env CHAIN_NODE_URL)")
    p.add_argument("--denom", default=None, help="Denom whose supply is measured (env CHAIN_DENOM)")
    p.add_argument("--retries", type=int, default=None, help="Attempts per remote read (env CHAIN_RETRIES)")
    p.add_argument("--json", action="store_true", help="Print results as JSON")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    est = sub.add_parser(
        "estimate-block-height",
        help="Estimate height at a given time",
        description="Estimate the block height at a desired UTC time from several blocktime averages.",
    )
    est.add_argument("desired_time", type=parse_target_time, help="UTC time, YYYY-MM-DDThh:mm")

    infl = sub.add_parser("inflation", help="Utilities for checking realized inflation")
    infl_sub = infl.add_subparsers(dest="inflation_command", required=True)
    avg = infl_sub.add_parser(
        "avg",
        help="Realized inflation over a block range as an APR & APY",
        description="End height defaults to the latest block. A negative start is subtracted from end "
                    "(use '--' before it, e.g. `inflation avg -- -1000 3000000`).",
    )
    avg.add_argument("start", type=int, help="Start height, or -N for the last N blocks")
    avg.add_argument("end", type=int, nargs="?", default=None, help="End height (default: latest)")
    return p

@contextmanager
def _open_source(cfg: Config) -> Iterator[BlockSource]:
    with ChainRestClient(cfg.node_url, timeout=cfg.timeout_sec) as client:
        yield RestBlockSource(client, cfg.denom, timeout_sec=cfg.timeout_sec)

def main(argv: Optional[List[str]] = None, out: TextIO = sys.stdout) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(node_url=args.node, denom=args.denom, retries=args.retries)
    except ValidationError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    level = logging.INFO if args.verbose else getattr(logging, cfg.log_level, logging.WARNING)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(asctime)s %(levelname)s %(message)s")
    logging.info("using endpoint %s", cfg.node_url)

    presenter = JsonPresenter(out) if args.json else TextPresenter(out)
    try:
        with _open_source(cfg) as source:
            fetcher = RetryingFetcher(source, retries=cfg.retries, backoff_cap=cfg.backoff_cap_sec)
            if args.command == "estimate-block-height":
                estimator = HeightEstimator(fetcher, cfg.windows, max_workers=cfg.max_workers)
                result = run_estimate(estimator, args.desired_time)
            else:
                result = run_inflation(InflationCalculator(fetcher), args.start, args.end)
    except ChainMetricsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    presenter.render(result)
    return 0

if __name__ == "__main__":
    sys.exit(main())
