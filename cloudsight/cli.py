from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, Sequence

from dotenv import load_dotenv

from .client import CloudSightClient
from .config import ClientConfig, load_config
from .errors import CloudSightError
from .job import Job
from .mock import MockCloudSightSession
from .params import Params

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudsight",
        description="Classify images with the CloudSight API",
        epilog="Credentials are read from CLOUDSIGHT_API_KEY and CLOUDSIGHT_API_SECRET "
        "(a .env file is honoured). Values in --config are overridden by the environment.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="path to a JSON configuration file",
    )
    parser.add_argument(
        "--api",
        choices=["http", "mock"],
        default="http",
        help="API backend to use (mock keeps jobs in memory)",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    submit = commands.add_parser("submit", help="send an image for classification")
    source = submit.add_mutually_exclusive_group(required=True)
    source.add_argument("image", nargs="?", default=None, help="path of the image to upload")
    source.add_argument("--url", default=None, help="URL of a remote image to classify")
    submit.add_argument("--locale", default=None, help="request locale (default: en-US)")
    submit.add_argument("--language", default=None, help="language of the annotation")
    submit.add_argument("--device-id", default=None, help="identifier of the sending device")
    submit.add_argument("--latitude", type=float, default=None)
    submit.add_argument("--longitude", type=float, default=None)
    submit.add_argument("--altitude", type=float, default=None)
    ttl = submit.add_mutually_exclusive_group()
    ttl.add_argument("--ttl", type=int, default=None, help="seconds before the job expires")
    ttl.add_argument("--max-ttl", action="store_true", help="use the longest TTL allowed")
    focus = submit.add_mutually_exclusive_group()
    focus.add_argument(
        "--focus",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=None,
        help="relative focal point, both coordinates in [0, 1]",
    )
    focus.add_argument(
        "--focus-px",
        type=int,
        nargs=2,
        metavar=("X", "Y"),
        default=None,
        help="absolute focal point in pixels",
    )
    _add_wait_arguments(submit)

    status = commands.add_parser("status", help="fetch the status of a job")
    status.add_argument("token", help="job token returned on submission")
    _add_wait_arguments(status)

    repost = commands.add_parser("repost", help="resubmit a job that timed out")
    repost.add_argument("token", help="job token returned on submission")
    return parser


def _add_wait_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--wait", action="store_true", help="block until the job leaves 'not completed'"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=0.0,
        help="maximum seconds to wait (0 waits forever)",
    )


def build_params(args: argparse.Namespace) -> Params:
    params = Params()
    if args.locale:
        params.set_locale(args.locale)
    if args.language:
        params.set_language(args.language)
    if args.device_id:
        params.set_device_id(args.device_id)
    if args.latitude is not None and args.longitude is not None:
        params.set_position(
            args.latitude,
            args.longitude,
            args.altitude if args.altitude is not None else 0.0,
        )
    elif args.latitude is not None or args.longitude is not None:
        raise ValueError("latitude and longitude must be given together")
    elif args.altitude is not None:
        params.set_altitude(args.altitude)
    if args.ttl is not None:
        params.set_ttl(args.ttl)
    elif args.max_ttl:
        params.set_max_ttl()
    if args.focus is not None:
        params.set_focus_relative(*args.focus)
    elif args.focus_px is not None:
        params.set_focus_absolute(*args.focus_px)
    return params


def build_client(args: argparse.Namespace, config: ClientConfig) -> CloudSightClient:
    if args.api == "mock":
        session = MockCloudSightSession(base_url=config.base_url)
        mock_config = replace(config, api_key=config.api_key or "mock-key")
        return CloudSightClient.from_config(mock_config, session=session)
    return CloudSightClient.from_config(config)


def run_submit(client: CloudSightClient, args: argparse.Namespace) -> Job:
    params = build_params(args)
    if args.url:
        job = client.remote_image_request(args.url, params)
    else:
        path = Path(args.image)
        with path.open("rb") as image:
            job = client.image_request(image, path.name, params)
    if args.wait:
        client.wait_job(job, args.timeout)
    return job


def run_status(client: CloudSightClient, args: argparse.Namespace) -> Job:
    job = Job(token=args.token)
    client.update_job(job)
    if args.wait:
        client.wait_job(job, args.timeout)
    return job


def run_repost(client: CloudSightClient, args: argparse.Namespace) -> Job:
    job = Job(token=args.token)
    client.update_job(job)
    return client.repost_job(job)


COMMANDS: Dict[str, Callable[[CloudSightClient, argparse.Namespace], Job]] = {
    "submit": run_submit,
    "status": run_status,
    "repost": run_repost,
}


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.INFO,
            format="%(levelname)s [%(name)s] %(message)s",
        )

    config = load_config(Path(args.config) if args.config else None)
    try:
        client = build_client(args, config)
        job = COMMANDS[args.command](client, args)
    except ValueError as exc:
        logger.error("Invalid parameters: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Failed to read image: %s", exc)
        return 1
    except CloudSightError as exc:
        logger.error("%s", exc)
        return 1

    print(json.dumps(job.to_dict(), indent=2))
    return 0


__all__ = ["build_parser", "build_params", "build_client", "main"]
