from timecli.cli import main

main()
