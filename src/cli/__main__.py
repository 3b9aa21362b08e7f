"""Entry point: ``python -m src.cli``."""

from __future__ import annotations

import sys
import asyncio
import logging

from dotenv import load_dotenv

load_dotenv()

from src.runtime.logging import configure_logging  # noqa: E402
from src.runtime.settings import load_upstream_settings  # noqa: E402
from src.realtime.bridge import UpstreamBridge  # noqa: E402
from src.devices.sounddevice_io import SoundDeviceCapture, SoundDevicePlayback  # noqa: E402

from .runner import EXIT_FAILURE, run_session  # noqa: E402
from .prompts import build_parser, collect_context  # noqa: E402

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        context = collect_context(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except (EOFError, KeyboardInterrupt):
        return EXIT_FAILURE

    bridge = UpstreamBridge(load_upstream_settings(model=args.model, voice=args.voice))
    return asyncio.run(
        run_session(
            context,
            bridge=bridge,
            capture=SoundDeviceCapture(),
            playback=SoundDevicePlayback(),
        )
    )


if __name__ == "__main__":
    sys.exit(main())
