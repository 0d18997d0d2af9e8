"""CLI entrypoint for the slideshow builder."""

from slideshow_builder.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
