from relctl.cli.app import main

main()
