from literal_hell.cli.main import cli

cli()
