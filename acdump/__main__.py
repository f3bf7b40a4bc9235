"""Allow running acdump as ``python -m acdump``."""

from .cli import main

main()
