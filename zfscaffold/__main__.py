from zfscaffold.cli import main

main()
