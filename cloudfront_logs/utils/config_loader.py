"""
Configuration loading utilities
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from .colors import Colors

# Default config path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "cloudfront_logs.yaml"

DEFAULT_ENVIRONMENTS = ('prod', 'staging', 'dev')

DEFAULTS = {
    'cache_dir': '.',
    'max_workers': 4,
    'default_environment': 'prod',
}


def load_config(config_path: Path = None) -> Dict:
    """Load tool configuration from YAML file."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        print(f"{Colors.RED}Error: Configuration file not found: {config_path}{Colors.NC}", file=sys.stderr)
        print(f"Copy {config_path.name}.template to {config_path.name} and configure your S3 bucket paths.",
              file=sys.stderr)
        sys.exit(1)

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict) or not isinstance(config.get('environments'), dict):
            print(f"{Colors.RED}Error: Invalid configuration file format{Colors.NC}", file=sys.stderr)
            sys.exit(1)

        return {**DEFAULTS, **config}
    except yaml.YAMLError as e:
        print(f"{Colors.RED}Error: Failed to parse configuration file: {e}{Colors.NC}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"{Colors.RED}Error: Failed to load configuration: {e}{Colors.NC}", file=sys.stderr)
        sys.exit(1)


def _env_overrides(env: str, environ: Mapping[str, str]) -> Dict:
    """Read <ENV>_S3_BUCKET / <ENV>_S3_PATH overrides from the process environment."""
    overrides = {}
    prefix = env.upper()
    if environ.get(f"{prefix}_S3_BUCKET"):
        overrides['s3_bucket'] = environ[f"{prefix}_S3_BUCKET"]
    if environ.get(f"{prefix}_S3_PATH"):
        overrides['s3_path'] = environ[f"{prefix}_S3_PATH"]
    return overrides


def get_environment(config: Dict, env: str, environ: Optional[Mapping[str, str]] = None) -> Dict:
    """
    Resolve the settings for one environment.

    Args:
        config: Loaded configuration
        env: Environment name (prod, staging, dev, or any name in the config)
        environ: Variables to read overrides from (default: os.environ)

    Returns:
        Environment configuration dictionary

    Raises:
        ValueError: if the environment is unknown or has no bucket/path
    """
    if environ is None:
        environ = os.environ

    environments = config.get('environments') or {}
    if env not in environments and env not in DEFAULT_ENVIRONMENTS:
        raise ValueError(f"Invalid environment: {env} (use {', '.join(get_known_environments(config))})")

    env_config = dict(environments.get(env) or {})
    env_config.update(_env_overrides(env, environ))

    if not env_config.get('s3_bucket') or not env_config.get('s3_path'):
        raise ValueError(f"S3 bucket/path not configured for environment: {env}")

    return env_config


def get_known_environments(config: Dict) -> List[str]:
    names = list(DEFAULT_ENVIRONMENTS)
    for name in config.get('environments') or {}:
        if name not in names:
            names.append(name)
    return names


def get_available_environments(config: Dict, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """Get the environments that have a bucket configured."""
    if environ is None:
        environ = os.environ

    available = []
    for name in get_known_environments(config):
        env_config = dict((config.get('environments') or {}).get(name) or {})
        env_config.update(_env_overrides(name, environ))
        if env_config.get('s3_bucket'):
            available.append(name)
    return available
