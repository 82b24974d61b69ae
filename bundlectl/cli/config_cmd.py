"""Config commands for bundlectl."""

from __future__ import annotations

from typing import Optional

import click

from bundlectl.core.config import (
    CONFIG_FILE,
    DEFAULT_BUNDLER_URL,
    DEFAULT_GATEWAY_URL,
    STRATEGIES,
    STRATEGY_BUNDLE,
    Config,
    Profile,
)
from bundlectl.core.output import (
    OutputFormat,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from bundlectl.core.validation import validate_server_url


@click.group()
def config() -> None:
    """Manage bundlectl configuration."""
    pass


@config.command("init")
@click.option("--gateway-url", default=DEFAULT_GATEWAY_URL, help="Gateway URL")
@click.option("--bundler-url", default=DEFAULT_BUNDLER_URL, help="Bundler node URL")
@click.option(
    "--strategy",
    type=click.Choice(list(STRATEGIES)),
    default=STRATEGY_BUNDLE,
    help="Default submission strategy",
)
@click.option("--jwk", "jwk_path", default=None, help="Arweave JWK wallet file")
@click.option("--keypair", "keypair_path", default=None, help="Solana keypair file")
@click.option("--profile", default="default", help="Profile name")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    gateway_url: str,
    bundler_url: str,
    strategy: str,
    jwk_path: Optional[str],
    keypair_path: Optional[str],
    profile: str,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        bundlectl config init --jwk ~/wallet.json
    """
    try:
        gateway_url = validate_server_url(gateway_url)
        bundler_url = validate_server_url(bundler_url)
    except Exception as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = Config.load(CONFIG_FILE) if CONFIG_FILE.exists() else Config()
    if cfg.has_profile(profile) and not force:
        print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
        raise SystemExit(1)

    cfg.add_profile(
        profile,
        Profile(
            gateway_url=gateway_url,
            bundler_url=bundler_url,
            strategy=strategy,
            jwk_path=jwk_path,
            keypair_path=keypair_path,
        ),
    )
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile
    cfg.save(CONFIG_FILE)

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({"profile": profile, "gateway_url": gateway_url, "strategy": strategy})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load(CONFIG_FILE)
    except Exception as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "profiles": {name: p.to_dict() for name, p in cfg.profiles.items()},
    }
    if output == "json":
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(
        {"config_file": data["config_file"], "default_profile": cfg.default_profile},
        title="Configuration",
    )
    for name, p in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"\nProfile: {name}{marker}")
        print_key_value(p.to_dict())
