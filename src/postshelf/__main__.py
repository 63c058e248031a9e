"""Allow ``python -m postshelf``."""

from postshelf.cli.main import main

if __name__ == "__main__":
    main()
