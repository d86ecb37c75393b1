"""
Configuration management for UI Harness.

Holds browser, timeout, retry, grid and reporting settings. Values passed to
the constructor (usually from a config file) are overridden by HARNESS_*
environment variables, so a single run can be redirected from the command line.
"""

import os
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from pathlib import Path

SUPPORTED_BROWSERS = ["chrome", "firefox", "edge"]
EXECUTION_MODES = ["local", "remote"]
REPORT_FORMATS = ["json", "junit"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


# field name -> (environment variable, converter)
ENV_OVERRIDES = {
    "browser": ("HARNESS_BROWSER", str),
    "headless": ("HARNESS_HEADLESS", _parse_bool),
    "environment": ("HARNESS_ENVIRONMENT", str),
    "base_url": ("HARNESS_BASE_URL", str),
    "implicit_wait": ("HARNESS_IMPLICIT_WAIT", int),
    "explicit_wait": ("HARNESS_EXPLICIT_WAIT", int),
    "page_load_timeout": ("HARNESS_PAGE_LOAD_TIMEOUT", int),
    "retry_enabled": ("HARNESS_RETRY_ENABLED", _parse_bool),
    "retry_count": ("HARNESS_RETRY_COUNT", int),
    "execution_mode": ("HARNESS_EXECUTION_MODE", str),
    "grid_url": ("HARNESS_GRID_URL", str),
    "parallel_threads": ("HARNESS_PARALLEL_THREADS", int),
    "screenshot_on_pass": ("HARNESS_SCREENSHOT_ON_PASS", _parse_bool),
    "screenshot_on_fail": ("HARNESS_SCREENSHOT_ON_FAIL", _parse_bool),
    "log_level": ("HARNESS_LOG_LEVEL", str),
    "output_dir": ("HARNESS_OUTPUT_DIR", Path),
}


@dataclass
class Config:
    """Configuration class for UI Harness with environment variable support."""

    # Environment detection
    ci_mode: bool = field(default=False)

    # Browser settings
    browser: str = field(default="chrome")
    headless: bool = field(default=False)

    # Application under test
    environment: str = field(default="qa")
    base_url: str = field(default="https://www.saucedemo.com/")
    environment_urls: Dict[str, str] = field(default_factory=dict)

    # Timeouts (seconds)
    implicit_wait: int = field(default=10)
    explicit_wait: int = field(default=20)
    page_load_timeout: int = field(default=30)

    # Retry configuration
    retry_enabled: bool = field(default=True)
    retry_count: int = field(default=1)

    # Local or Selenium Grid execution
    execution_mode: str = field(default="local")
    grid_url: str = field(default="http://localhost:4444")
    parallel_threads: int = field(default=5)

    # Screenshot settings
    screenshot_on_pass: bool = field(default=False)
    screenshot_on_fail: bool = field(default=True)

    # Reporting
    output_dir: Path = field(default_factory=lambda: Path.cwd() / "test-output")
    report_name: str = field(default="Test Execution Results")
    report_formats: List[str] = field(default_factory=lambda: ["json"])
    report_timestamp_format: str = field(default="%d-%m-%Y_%H-%M-%S")
    system_info: Dict[str, str] = field(default_factory=dict)

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")

    def __post_init__(self):
        """Apply environment overrides and normalize values."""
        if os.getenv("CI", "").lower() == "true":
            self.ci_mode = True

        for name, (env_var, convert) in ENV_OVERRIDES.items():
            raw = os.getenv(env_var)
            if raw is None or raw == "":
                continue
            try:
                setattr(self, name, convert(raw))
            except ValueError:
                # Malformed override, keep the file/default value
                continue

        self.output_dir = Path(self.output_dir)
        self.browser = str(self.browser).strip().lower()
        self.execution_mode = str(self.execution_mode).strip().lower()

        self.log_level = str(self.log_level).upper()
        if self.log_level == "WARN":
            self.log_level = "WARNING"
        if self.log_level not in VALID_LOG_LEVELS:
            self.log_level = "INFO"

        # Machine-readable logs in CI unless explicitly set otherwise
        if self.ci_mode and self.log_format == "text":
            self.log_format = "json"

    @property
    def is_remote(self) -> bool:
        """Check if sessions are created on a Selenium Grid."""
        return self.execution_mode == "remote"

    @property
    def is_ci_mode(self) -> bool:
        """Check if running in CI environment."""
        return self.ci_mode

    @property
    def effective_headless(self) -> bool:
        """Get effective headless mode; CI always runs headless."""
        return self.headless or self.ci_mode

    @property
    def max_retries(self) -> int:
        """Number of retries granted to a failed test (0 when disabled)."""
        if not self.retry_enabled:
            return 0
        return max(self.retry_count, 0)

    @property
    def url(self) -> str:
        """Get the application URL for the configured environment."""
        return self.environment_urls.get(self.environment) or self.base_url

    @property
    def screenshots_dir(self) -> Path:
        return self.output_dir / "screenshots"

    @property
    def reports_dir(self) -> Path:
        return self.output_dir / "reports"

    @property
    def logs_dir(self) -> Path:
        return self.output_dir / "logs"

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        return self.logs_dir / "automation.log"

    def ensure_directories(self) -> None:
        """Create the output directory tree if it does not exist."""
        for directory in (self.screenshots_dir, self.reports_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging."""
        return {
            "ci_mode": self.ci_mode,
            "browser": self.browser,
            "headless": self.effective_headless,
            "environment": self.environment,
            "url": self.url,
            "implicit_wait": self.implicit_wait,
            "explicit_wait": self.explicit_wait,
            "page_load_timeout": self.page_load_timeout,
            "max_retries": self.max_retries,
            "execution_mode": self.execution_mode,
            "grid_url": self.grid_url,
            "parallel_threads": self.parallel_threads,
            "screenshot_on_pass": self.screenshot_on_pass,
            "screenshot_on_fail": self.screenshot_on_fail,
            "output_dir": str(self.output_dir),
            "report_formats": list(self.report_formats),
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from defaults and environment variables."""
        return cls()

    def validate(self) -> None:
        """Validate configuration and raise ValidationError if invalid."""
        from .exceptions import ValidationError

        errors = []

        if self.browser not in SUPPORTED_BROWSERS:
            errors.append(
                f"Unsupported browser: {self.browser}. Must be one of {SUPPORTED_BROWSERS}"
            )

        if self.execution_mode not in EXECUTION_MODES:
            errors.append(
                f"Invalid execution mode: {self.execution_mode}. Must be one of {EXECUTION_MODES}"
            )

        if self.is_remote and not self.grid_url.startswith(("http://", "https://")):
            errors.append(f"Grid URL must start with http:// or https://: {self.grid_url}")

        for name in ("implicit_wait", "explicit_wait", "page_load_timeout"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must not be negative")

        if self.retry_count < 0:
            errors.append("retry_count must not be negative")

        if self.parallel_threads < 1:
            errors.append("parallel_threads must be at least 1")

        unknown_formats = [f for f in self.report_formats if f not in REPORT_FORMATS]
        if unknown_formats:
            errors.append(
                f"Invalid report formats: {unknown_formats}. Must be among {REPORT_FORMATS}"
            )

        if not self.url:
            errors.append(f"No URL configured for environment: {self.environment}")

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ValidationError(
                message,
                validation_type="config",
                violations=errors,
            )
