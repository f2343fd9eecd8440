"""Allow `python -m ficdown`."""

from ficdown.cli import main

if __name__ == "__main__":
    main()
