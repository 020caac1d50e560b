from mcpcore.cli import main

main()
