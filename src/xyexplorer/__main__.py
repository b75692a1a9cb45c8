"""Command-line interface: ``python -m xyexplorer``."""
from xyexplorer.main import main

if __name__ == "__main__":
    main()
