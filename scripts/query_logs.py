#!/usr/bin/env python3
"""
CloudFront Log Query Script
Shows access-log requests for API endpoints over the last N minutes,
downloading only the data the local cache does not already cover.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cloudfront_logs.cache.store import CacheError, CacheStore
from cloudfront_logs.query.filters import parse_endpoints
from cloudfront_logs.query.pipeline import QueryOptions, run_query
from cloudfront_logs.sync.base import FetchError
from cloudfront_logs.sync.s3_fetch import create_fetcher
from cloudfront_logs.utils.colors import Colors
from cloudfront_logs.utils.config_loader import get_available_environments, get_environment, load_config
from cloudfront_logs.utils.date_utils import format_utc, local_timezone_name, parse_minutes
from cloudfront_logs.utils.formatter import format_record, header_lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze CloudFront logs for specific API endpoints (shows real client IPs)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single endpoint (last 60 minutes)
  %(prog)s /api 60

  # Multiple endpoints (30 minutes)
  %(prog)s /api,/auth,/marketplace 30

  # IP tracing across endpoint
  %(prog)s --ip 192.168.1.100 /api 60

  # Staging environment, offline from the existing cache
  %(prog)s /health 15 --env staging --cache

Cache behavior:
  Cache files are stored as cloudfront_logs_<env>_cache.log in cache_dir.
  No flag: use the cache when it covers the window, otherwise download
           and merge the missing data ('cached' / 'smart cache').
  --cache: serve from an existing cache as-is. Missing ranges are NOT
           downloaded (the default already does that); only an empty or
           missing cache triggers a download.
  --fresh: ignore the cache for reading, download everything, rewrite it.
        """
    )
    parser.add_argument("endpoint", help="API endpoint(s) to filter, comma-separated for multiple (/api,/auth)")
    parser.add_argument("minutes", help="Number of minutes back to search")
    parser.add_argument("--ip", type=str, help="Client IP address to trace (IP mode)")
    parser.add_argument("--env", type=str, help="Environment: prod, staging or dev (default from config)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--cache", action="store_true", help="Serve from an existing cache without downloading missing ranges")
    mode.add_argument("--fresh", action="store_true", help="Force fresh download (ignore cache completely)")
    parser.add_argument("--config", type=str, help="Path to configuration file (default: config/cloudfront_logs.yaml)")
    parser.add_argument("--workers", type=int, help="Number of concurrent downloads (default from config)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    return parser


def print_progress(completed: int, total: int):
    print(f"\r{Colors.BLUE}  Progress: {completed}/{total} files processed...{Colors.NC}",
          end="", file=sys.stderr, flush=True)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    color = not args.no_color

    try:
        minutes = parse_minutes(args.minutes)
    except ValueError as e:
        print(f"{Colors.RED}Error: {e}{Colors.NC}", file=sys.stderr)
        return 1

    endpoints = parse_endpoints(args.endpoint)
    if not endpoints:
        print(f"{Colors.RED}Error: Missing required argument: endpoint{Colors.NC}", file=sys.stderr)
        return 1

    if args.ip is not None and not args.ip:
        print(f"{Colors.RED}Error: IP address required for IP tracing mode{Colors.NC}", file=sys.stderr)
        return 1

    # Load configuration
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path)

    env = args.env
    if not env:
        available = get_available_environments(config)
        env = config.get('default_environment') or (available[0] if available else 'prod')

    try:
        env_config = get_environment(config, env)
    except ValueError as e:
        print(f"{Colors.RED}Error: {e}{Colors.NC}", file=sys.stderr)
        return 1

    store = CacheStore.for_environment(config.get('cache_dir', '.'), env)
    fetcher = create_fetcher(env_config)
    workers = args.workers or config.get('max_workers', 4)

    options = QueryOptions(
        endpoints=endpoints,
        minutes=minutes,
        ip=args.ip,
        use_cache=args.cache,
        force_fresh=args.fresh,
    )

    try:
        result = run_query(options, store, fetcher, max_workers=workers, on_progress=print_progress)
    except (CacheError, FetchError, ValueError) as e:
        print(f"\n{Colors.RED}Error: {e}{Colors.NC}", file=sys.stderr)
        return 1

    if result.fetch is not None:
        print(file=sys.stderr)  # New line after progress
        print(f"{Colors.BLUE}📥 Downloaded {result.fetch.downloaded}/{result.fetch.total} files{Colors.NC}",
              file=sys.stderr)
        if result.fetch.failed:
            print(f"{Colors.YELLOW}Warning: {result.fetch.failed} file(s) could not be downloaded{Colors.NC}",
                  file=sys.stderr)
    elif result.decision.needs_fetch:
        print(f"{Colors.YELLOW}⚠️  No recent log files found.{Colors.NC}")
        return 0

    since = format_utc(result.start)
    if options.ip:
        print(f"🔍 Tracing IP {Colors.BRIGHT_RED}{options.ip}{Colors.NC} across "
              f"{Colors.CYAN}{args.endpoint}{Colors.NC} from {Colors.RED}{since}{Colors.NC} to now "
              f"({Colors.GREEN}{env}{Colors.NC} environment, {Colors.PURPLE}{result.cache_mode}{Colors.NC}):")
    else:
        print(f"🔍 All {Colors.CYAN}{args.endpoint}{Colors.NC} requests from {Colors.RED}{since}{Colors.NC} "
              f"to now (times in {Colors.YELLOW}{local_timezone_name()}{Colors.NC}, "
              f"{Colors.GREEN}{env}{Colors.NC} environment, {Colors.PURPLE}{result.cache_mode}{Colors.NC}):")

    for line in header_lines(color=color):
        print(line)
    for record in result.records:
        print(format_record(record, color=color))

    print()
    print(f"{Colors.GREEN}✅ Processing complete ({len(result.records)} requests){Colors.NC}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
