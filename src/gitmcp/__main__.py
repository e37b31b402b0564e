from gitmcp.cli import main

main()
