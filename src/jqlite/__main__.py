"""Module entrypoint for `python -m jqlite`."""

from jqlite import cli


if __name__ == "__main__":
    cli.main()
