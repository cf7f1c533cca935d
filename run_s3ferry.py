#!/usr/bin/env python
# pylint: disable=no-value-for-parameter
"""
Wrapper for running s3ferry from source, and the entry point of the frozen binary.

File names are rendered through the rename mask as unicode, so the locale should
be a unicode one. If it is not, try:

$ export LC_ALL=en_US.utf8
$ s3ferry [ARGS]

Alternately, you should be able to specify the locale on the command-line:

$ LC_ALL=en_US.utf8 s3ferry [ARGS]

Be sure to substitute your unicode variant for en_US.utf8
"""
import sys
import click
from s3ferry.cli.main import cli

if __name__ == '__main__':
    try:
        cli()
    except RuntimeError as err:
        click.echo(f'{err}')
        sys.exit(1)
    except UnicodeError as err:
        click.echo(f'{err}')
        click.echo(__doc__)
        sys.exit(1)
