from pixshell.main import main

main()
