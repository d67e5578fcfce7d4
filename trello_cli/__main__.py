from trello_cli.cli import main

main()
