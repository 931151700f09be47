"""apiforge command-line interface."""
