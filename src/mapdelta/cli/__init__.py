"""mapdelta command-line interface."""
