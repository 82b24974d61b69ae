"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from dataclasses import replace
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from bundlectl.core.config import STRATEGIES, Config, Profile
from bundlectl.core.exceptions import BundleCtlError
from bundlectl.core.logging import setup_logging
from bundlectl.core.output import OutputFormat, print_error
from bundlectl.services.uploads import UploadService

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False
        self.overrides: dict[str, Any] = {}

    def get_profile(self) -> Profile:
        """Active profile with command-line overrides applied."""
        if self.config is None:
            self.config = Config.load()
        profile = self.config.get_profile(self.profile_name)
        overrides = {k: v for k, v in self.overrides.items() if v is not None}
        return replace(profile, **overrides) if overrides else profile

    def get_service(self, *, with_signer: bool = True) -> UploadService:
        """Build an upload service for the active profile."""
        return UploadService.from_profile(self.get_profile(), with_signer=with_signer)


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="BUNDLECTL_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option("--quiet", "-q", is_flag=True, help="Only show errors")
    @click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        if ctx.config is None:
            ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


def upload_options(f: F) -> F:
    """Add per-run overrides of profile settings."""

    @click.option(
        "--strategy",
        type=click.Choice(list(STRATEGIES)),
        default=None,
        help="Submit batches as one bundle or one transaction per unit",
    )
    @click.option("--jwk", "jwk_path", type=click.Path(), help="Arweave JWK wallet file")
    @click.option("--keypair", "keypair_path", type=click.Path(), help="Solana keypair file")
    @click.option(
        "--batch-size-limit",
        type=click.IntRange(min=1),
        default=None,
        help="Batch size ceiling in MB",
    )
    @click.option("--app-name", default=None, help="App-Name tag for every unit")
    @wraps(f)
    def wrapper(
        ctx: Context,
        *args: Any,
        strategy: Optional[str],
        jwk_path: Optional[str],
        keypair_path: Optional[str],
        batch_size_limit: Optional[int],
        app_name: Optional[str],
        **kwargs: Any,
    ) -> Any:
        """Record overrides on the context and invoke the command."""
        ctx.overrides.update(
            strategy=strategy,
            jwk_path=jwk_path,
            keypair_path=keypair_path,
            batch_size_limit=batch_size_limit * 1024 * 1024 if batch_size_limit else None,
            app_name=app_name,
        )
        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exits."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except BundleCtlError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except click.ClickException:
            raise
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
