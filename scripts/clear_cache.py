#!/usr/bin/env python3
"""
Clear cached CloudFront log files for one or all environments.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cloudfront_logs.cache.store import CacheStore
from cloudfront_logs.utils.colors import Colors
from cloudfront_logs.utils.config_loader import get_known_environments, load_config


def clear_cache(cache_dir: Path, environments, confirm: bool = True) -> int:
    """
    Delete the cache files of the given environments.

    Args:
        cache_dir: Directory holding the cache files
        environments: Environment names to clear
        confirm: Whether to ask for confirmation (default: True)

    Returns:
        Number of cache files deleted
    """
    stores = [CacheStore.for_environment(cache_dir, env) for env in environments]
    stores = [store for store in stores if store.exists()]

    if not stores:
        print(f"{Colors.BLUE}No cache files found to clear{Colors.NC}")
        return 0

    total_size = sum(store.size() for store in stores)
    size_mb = total_size / (1024 * 1024)
    print(f"{Colors.BLUE}Found {len(stores):,} cache file(s) ({size_mb:.2f} MB){Colors.NC}")

    if confirm:
        response = input(f"{Colors.YELLOW}Are you sure you want to delete these cache files? (yes/no): {Colors.NC}")
        if response.lower() not in ['yes', 'y']:
            print(f"{Colors.BLUE}Cancelled{Colors.NC}")
            return 0

    deleted = 0
    for store in stores:
        try:
            if store.clear():
                deleted += 1
        except OSError as e:
            print(f"{Colors.RED}Error deleting {store.path}: {e}{Colors.NC}", file=sys.stderr)

    print(f"{Colors.GREEN}Cleared {deleted:,} cache file(s){Colors.NC}")
    return deleted


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Clear cached CloudFront log files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --env staging      # Clear the staging cache with confirmation
  %(prog)s --all --yes        # Clear every environment without confirmation
        """
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--env", type=str, help="Environment whose cache to clear")
    target.add_argument("--all", action="store_true", help="Clear caches of all environments")
    parser.add_argument("--config", type=str, help="Path to configuration file (default: config/cloudfront_logs.yaml)")
    parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    args = parser.parse_args(argv)

    config = load_config(Path(args.config) if args.config else None)
    environments = get_known_environments(config) if args.all else [args.env]

    clear_cache(Path(config.get('cache_dir', '.')), environments, confirm=not args.yes)
    return 0


if __name__ == "__main__":
    sys.exit(main())
