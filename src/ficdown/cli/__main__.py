"""Allow `python -m ficdown.cli`."""

from ficdown.cli import main

if __name__ == "__main__":
    main()
