from herostats.cli import main

main()
