"""Allow `python -m slim_mcp`."""

from .cli.main import main

if __name__ == "__main__":
    main()
