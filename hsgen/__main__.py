"""Entry point: python -m hsgen SCHEMA -o DIR"""

from .cli import main

if __name__ == "__main__":
    main()
