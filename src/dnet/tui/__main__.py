from dnet.tui.cli import main

main()
