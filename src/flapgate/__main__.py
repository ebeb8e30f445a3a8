from flapgate.main import main

main()
