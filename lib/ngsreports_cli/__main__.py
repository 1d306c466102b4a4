"""ngsreports CLI entry point for `python -m ngsreports_cli`."""

from ngsreports_cli import main

if __name__ == "__main__":
    main()
