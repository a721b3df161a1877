"""CLI tools for Lectern.

- ``python -m src.cli.extract text FILE`` prints the extracted text of a
  local document.
- ``python -m src.cli.extract chunks FILE`` prints its chunk statistics.
"""
