"""Allow ``python -m bees``."""
from bees.cli import main

if __name__ == "__main__":
    main()
