"""Command line entry point.

Usage:
    apiforge design validate design.py
    apiforge -v design paths design.py --config apiforge.yaml
"""

import logging

import click

from apiforge.cli.design_cmd import design


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log evaluation phases to stderr.")
def cli(verbose: bool):
    """Evaluate Python API designs and inspect the resulting HTTP services."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


cli.add_command(design)
