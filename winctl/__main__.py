"""Allow `python -m winctl`."""

from .command import main

main()
