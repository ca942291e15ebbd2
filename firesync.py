import argparse
import sys
import time

from pydantic import ValidationError

from builder import build
from fscore.config import CONFIG_FILE, ConfigError, FiresyncConfig, load_config, write_default_config
from fscore.errors import FiresyncError
from fscore.log import error_log, log, set_verbose


def resolve_config(args):
    """Load firesync.json and apply command line overrides."""
    config = load_config(args.config)
    overrides = {}
    for key in ("input", "output", "darklua_configuration", "darklua", "port"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    if getattr(args, "recursive", False):
        overrides["recursive"] = True
    if overrides:
        try:
            config = FiresyncConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigError(str(e))
    return config


def cmd_init(args):
    path = args.config or CONFIG_FILE
    write_default_config(path)
    log(f"Wrote {path}")


def cmd_build(args):
    config = resolve_config(args)
    result = build(
        config.input, config.output,
        config_path=config.darklua_configuration,
        darklua=config.darklua,
        recursive=config.recursive,
    )
    if not result.succeeded:
        sys.exit(1)


def cmd_serve(args):
    # Imported here so `firesync build` doesn't pay for uvicorn/watchdog
    from devserver import DevServer

    config = resolve_config(args)
    server = DevServer(config)
    try:
        url = server.start()
    except FiresyncError:
        sys.exit(1)

    log(f"Public URL: {url}")
    server.request_build()
    log("Press Ctrl+C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        server.close(timeout=10)


def _add_path_arguments(parser):
    parser.add_argument("input", nargs="?", help="Source file or directory (default: from firesync.json)")
    parser.add_argument("output", nargs="?", help="Output file or directory (default: from firesync.json)")
    parser.add_argument("--darklua-config", dest="darklua_configuration",
                        help="darklua configuration file (default: ./.darklua.json)")
    parser.add_argument("--darklua", help="darklua executable")
    parser.add_argument("--recursive", action="store_true", help="Also patch sub-directories of the output")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Firesync: darklua builds with NS/NLS script inlining")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Path to {CONFIG_FILE}")
    subparsers = parser.add_subparsers(dest="command")

    _add_path_arguments(subparsers.add_parser("build", help="Bundle with darklua and inline child scripts"))

    serve = subparsers.add_parser("serve", help="Rebuild on change, with preview server and tunnel")
    _add_path_arguments(serve)
    serve.add_argument("--port", type=int, help="Preview server port (default: 3000)")

    subparsers.add_parser("init", help=f"Write a default {CONFIG_FILE}")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        if args.command == "build": cmd_build(args)
        elif args.command == "serve": cmd_serve(args)
        elif args.command == "init": cmd_init(args)
        else: parser.print_help()
    except ConfigError as e:
        error_log(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
