import logging
import sys
from typing import Optional

import click
import uvicorn
import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from s3proxy.common.logging_config import setup_colored_logging
from s3proxy.config import BucketConfig, ProxyConfig, load_config
from s3proxy.server.app import create_app

log = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def error_exit(message: str, code: int = 1):
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(code)


def build_config(
    config_file: Optional[str],
    bind: Optional[str],
    bind_type: Optional[str],
    bucket: Optional[str],
    region: str,
    endpoint_url: Optional[str],
    page_size: Optional[int],
    non_recursive: bool,
) -> ProxyConfig:
    """Merge the YAML file (if any) with command line overrides.

    ``--bucket`` replaces the configured bucket list with a single bucket
    mounted at "/".
    """
    config = load_config(config_file) if config_file else ProxyConfig()
    overrides: dict = {}
    if bind:
        overrides["bind"] = bind
    if bind_type:
        overrides["bind_type"] = bind_type
    if bucket:
        bucket_options: dict = {"name": bucket, "region": region, "endpoint_url": endpoint_url}
        if page_size:
            bucket_options["page_size"] = page_size
        if non_recursive:
            bucket_options["recursive"] = False
        overrides["buckets"] = [BucketConfig(**bucket_options)]
    return ProxyConfig.model_validate({**config.model_dump(), **overrides})


@click.command(name="serve")
@click.option("--bind", default=None, help="Bind address (default: :8080).")
@click.option(
    "--bindtype",
    "bind_type",
    type=click.Choice(["tcp", "unix"]),
    default=None,
    help="Bind address type (default: tcp).",
)
@click.option("--bucket", envvar="S3PROXY_BUCKET", default=None, help="Bucket name to serve at /.")
@click.option("--region", envvar="S3_REGION", default="us-east-1", show_default=True, help="Bucket region.")
@click.option("--endpoint-url", default=None, help="Custom S3 endpoint (MinIO, SeaweedFS).")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="YAML configuration file with a list of buckets.",
)
@click.option("--page-size", type=click.IntRange(1, 1000), default=None, help="Keys per listing request.")
@click.option(
    "--non-recursive",
    is_flag=True,
    default=False,
    help="List only direct children of a directory.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option(
    "-u",
    "--system-env",
    is_flag=True,
    default=False,
    help="Use system environment variables only; do not load .env file.",
)
def serve(
    bind: Optional[str],
    bind_type: Optional[str],
    bucket: Optional[str],
    region: str,
    endpoint_url: Optional[str],
    config_file: Optional[str],
    page_size: Optional[int],
    non_recursive: bool,
    log_level: str,
    system_env: bool,
):
    """
    Serve S3 buckets over HTTP as browsable file trees.

    \b
    Examples:
        s3proxy serve --bucket my-bucket --region eu-west-1
        s3proxy serve --config buckets.yaml --bind 127.0.0.1:9000
    """
    setup_colored_logging(level=getattr(logging, log_level.upper()))

    if not system_env:
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(dotenv_path=env_path, override=True)
            log.info("Loaded environment variables from: %s", env_path)

    try:
        config = build_config(
            config_file, bind, bind_type, bucket, region, endpoint_url, page_size, non_recursive
        )
        bind_options = config.uvicorn_bind_options()
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        error_exit(f"Invalid configuration: {e}")

    if not config.buckets:
        error_exit("No buckets configured: pass --bucket or --config.")

    app = create_app(config)
    log.info("Listening on %s (%s)", config.bind, config.bind_type)
    uvicorn.run(app, log_level=log_level.lower(), log_config=None, **bind_options)
