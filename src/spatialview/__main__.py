"""Allows `python -m spatialview`."""
from spatialview.main import main

if __name__ == "__main__":
    main()
