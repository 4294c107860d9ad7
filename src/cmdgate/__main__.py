from cmdgate.cli import main

main()
