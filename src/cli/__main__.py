"""Allow ``python -m src.cli`` execution (delegates to the extract tool)."""

from src.cli.extract import main

main()
