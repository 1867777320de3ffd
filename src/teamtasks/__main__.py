"""Allow ``python -m teamtasks``."""

from teamtasks.cli import main

main()
