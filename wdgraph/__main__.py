from wdgraph.cli import main

main()
