import os
import argparse
import asyncio
import logging
from pathlib import Path

from goveehub.app import BridgeApp
from goveehub.config_manager import ConfigurationManager

log = logging.getLogger(__name__)


def _resolve_config_path(cli_path: str | None) -> Path:
    """--config, then GOVEEHUB_CONFIG, then config.yaml beside the package."""
    path = cli_path or os.getenv("GOVEEHUB_CONFIG")
    if path:
        return Path(path).expanduser().resolve()
    return Path(__file__).resolve().parents[1] / "config.yaml"


async def amain(cli_path: str | None) -> None:
    cfg = ConfigurationManager(str(_resolve_config_path(cli_path))).load_config()
    app = BridgeApp(cfg)
    await app.init()
    try:
        await app.run()
    except Exception as e:
        log.error(f"Bridge stopped: {e}", exc_info=True)
        raise


def main() -> None:
    parser = argparse.ArgumentParser(description="Govee to MQTT bridge")
    parser.add_argument("--config", help="Path to config.yaml")
    args = parser.parse_args()
    asyncio.run(amain(args.config))


if __name__ == "__main__":
    main()
