from dividendsync.cli import cli

cli()
