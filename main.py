"""
Notibell main application entry point.
Serves the admin dashboard header with the notification bell and the
notification listing page.
"""

import sys
import os
from pathlib import Path

from notibell.utils.config_service import ConfigurationService, set_config_service
from notibell.utils.log_service import info, error
import argparse


def resolve_config_dir(cli_value: Path | None) -> Path:
    if cli_value:
        return cli_value
    if (env := os.getenv("NOTIBELL_CONFIG_DIR")) is not None:
        return Path(env)
    # Determine config directory relative to project root
    return Path(__file__).parent.resolve() / "config"


def main():
    """Main application entry point"""
    if sys.version_info < (3, 11):
        raise RuntimeError("Python 3.11 or newer is required to run Notibell")
    parser = argparse.ArgumentParser(description="Notibell admin dashboard")
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory containing configuration files",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for the web interface (overrides ui.port)",
    )
    args = parser.parse_args()

    config_dir = resolve_config_dir(args.config_dir)
    config_service = ConfigurationService(
        config_dir / "config.json",
        config_dir / "default_config.json",
    )
    set_config_service(config_service)

    info("Starting Notibell...")

    try:
        from notibell.gui.application import WebApplication

        # Start GUI (this blocks until the application is closed)
        WebApplication(config_service).run(port=args.port)

    except KeyboardInterrupt:
        info("Shutdown requested by user")
    except Exception as e:
        error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        info("Notibell stopped")


if __name__ in {"__main__", "__mp_main__"}:
    main()
