"""Main entry point for ``python -m hbs_render``."""
from .cli.main import main

if __name__ == "__main__":
    main()
