"""Entry point for ``python -m scriptcli``."""

from scriptcli.cli.main import main


if __name__ == "__main__":
    main()
