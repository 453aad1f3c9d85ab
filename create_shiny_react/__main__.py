"""Allow ``python -m create_shiny_react``."""

from create_shiny_react.pipeline import main

main()
