"""Entry point: serve | oneshot."""

import sys


def main():
    mode = "serve"
    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

    if mode == "serve":
        from wander_search.core.config import config
        from wander_search.interfaces.http import run_server

        run_server(config.http_host, config.http_port)

    elif mode == "oneshot":
        from wander_search.interfaces.oneshot import main as run_oneshot_main

        sys.exit(run_oneshot_main(sys.argv[2:]))

    else:
        print(f"Unknown mode: {mode}")
        print("Usage: python -m wander_search.main [serve|oneshot]")
        sys.exit(1)


if __name__ == "__main__":
    main()
