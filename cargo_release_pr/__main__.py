from cargo_release_pr.cli import cli

cli()
