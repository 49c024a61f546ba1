"""Module entrypoint for ``python -m teamsync_api`` CLI usage."""

from teamsync_api.cli import app as cli_app


def main() -> None:
    cli_app()


if __name__ == "__main__":
    main()
