"""Screenshot, blur and publish a batch of web pages with Playwright."""

from .config import ConfigError, RunConfig, parse_args
from .cookies import CookieCacheError, CookieStore, parse_cookie_header, resolve_cookies
from .imaging import blur_image
from .logging import configure_logging, jlog, logging_context, set_global_context, targetlog
from .pipeline import TargetOutcome, process_target, run, run_targets
from .publisher import upload_image
from .urls import Target, build_targets, domain_of, is_hosted_app
from .versioning import get_version

__all__ = [
    "ConfigError",
    "CookieCacheError",
    "CookieStore",
    "RunConfig",
    "Target",
    "TargetOutcome",
    "blur_image",
    "build_targets",
    "configure_logging",
    "domain_of",
    "get_version",
    "is_hosted_app",
    "jlog",
    "logging_context",
    "parse_args",
    "parse_cookie_header",
    "process_target",
    "resolve_cookies",
    "run",
    "run_targets",
    "set_global_context",
    "targetlog",
    "upload_image",
]
