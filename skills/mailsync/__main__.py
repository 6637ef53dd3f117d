"""
Entry point for the mailsync skill subprocess.

Run with: python -m skills.mailsync --services myapp.mail:create_services
                                    [--config data/config.json]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

logging.basicConfig(
  level=logging.INFO,
  format="[%(name)s] %(levelname)s: %(message)s",
  stream=sys.stderr,
)


def main() -> None:
  parser = argparse.ArgumentParser(prog="python -m skills.mailsync")
  parser.add_argument(
    "--services",
    required=True,
    help="'module:callable' returning the account, message, listener and notification services",
  )
  parser.add_argument("--config", default=None, help="Path to config.json or its directory")
  args = parser.parse_args()

  from .server import build_controller, run_server

  async def run() -> None:
    controller = await build_controller(args.services, args.config)
    await run_server(controller)

  asyncio.run(run())


if __name__ == "__main__":
  main()
